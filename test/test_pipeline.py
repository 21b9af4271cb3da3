"""
End-to-end tests for data loading and the build command.
"""
import json

import numpy as np
import pandas as pd
import pytest

from rankKernel.core.base import EvaluationMode
from rankKernel.core.exceptions import DataMismatchError
from rankKernel.data.loader import DataLoader
from rankKernel.main import main

from conftest import make_expression


def write_table(path, n_samples, n_features, seed):
    X, y = make_expression(n_samples, n_features, seed=seed)
    table = pd.DataFrame(X, columns=[f"gene{i}" for i in range(n_features)],
                         index=[f"s{seed}_{i}" for i in range(n_samples)])
    table.index.name = "SampleID"
    table["Group"] = np.where(y == 1, "Disease", "Health")
    table.to_csv(path)
    return table


class TestDataLoader:
    """Test suite for DataLoader."""

    def test_nested_dataset(self, tmp_path):
        write_table(tmp_path / "train.csv", 12, 4, seed=0)

        dataset = DataLoader().load_dataset(tmp_path / "train.csv")

        assert dataset.name == "train"
        assert dataset.mode == EvaluationMode.NESTED
        assert dataset.X.shape == (12, 4)
        assert list(dataset.feature_names) == ["gene0", "gene1", "gene2", "gene3"]

    def test_held_out_dataset_aligns_columns(self, tmp_path):
        write_table(tmp_path / "train.csv", 12, 4, seed=0)
        test = write_table(tmp_path / "test.csv", 6, 4, seed=1)
        test[["gene3", "gene0", "gene2", "gene1", "Group"]].to_csv(tmp_path / "shuffled.csv")

        dataset = DataLoader().load_dataset(tmp_path / "train.csv", test_file=tmp_path / "shuffled.csv")

        assert dataset.mode == EvaluationMode.HELD_OUT
        np.testing.assert_allclose(dataset.X_test[:, 0], test["gene0"].to_numpy())

    def test_missing_test_features(self, tmp_path):
        write_table(tmp_path / "train.csv", 12, 4, seed=0)
        write_table(tmp_path / "test.csv", 6, 3, seed=1)

        with pytest.raises(DataMismatchError):
            DataLoader().load_dataset(tmp_path / "train.csv", test_file=tmp_path / "test.csv")

    def test_missing_label_column(self, tmp_path):
        write_table(tmp_path / "train.csv", 12, 4, seed=0)
        with pytest.raises(DataMismatchError):
            DataLoader().load_dataset(tmp_path / "train.csv", label_column="Status")


class TestBuildCommand:
    """Test suite for the build command."""

    ARGS = [
        "--models", "tsp,svm_linear,svm_stabilized_kendall",
        "--c_grid", "0.1,1",
        "--k_grid", "1,3",
        "--outer_cv_folds", "2",
        "--inner_cv_folds", "2",
        "--outer_cv_repeats", "1",
        "--noise_window", "0.5",
    ]

    def test_nested_build(self, tmp_path):
        write_table(tmp_path / "train.csv", 16, 5, seed=2)
        out = tmp_path / "out"

        main(["build", "--train_file", str(tmp_path / "train.csv"), "--output", str(out)] + self.ARGS)

        summary = pd.read_csv(out / "summary.csv")
        assert set(summary["model"]) == {
            "TSP", "SVM[linear]", "SVM[linear]-KFD",
            "SVM[stabilized_kendall(a=0.5,exact)]", "SVM[stabilized_kendall(a=0.5,exact)]-KFD",
        }
        report = json.loads((out / "summary.json").read_text())
        assert report["status"] == "complete"
        assert report["config"]["outer_folds"] == 2
        assert (out / "accuracies" / "train__TSP.csv").exists()
        assert (out / "run.log").exists()

    def test_worker_progress_reaches_run_log(self, tmp_path):
        write_table(tmp_path / "train.csv", 16, 5, seed=2)
        out = tmp_path / "out"

        main(["build", "--train_file", str(tmp_path / "train.csv"), "--output", str(out),
              "--cpu", "2", "--verbose", "true"] + self.ARGS)

        log = (out / "run.log").read_text(encoding="utf-8")
        assert "unit r0f1" in log
        # per-grid-point DEBUG lines
        assert "inner=" in log

    def test_held_out_build_with_curves(self, tmp_path):
        write_table(tmp_path / "train.csv", 16, 5, seed=3)
        write_table(tmp_path / "test.csv", 8, 5, seed=4)
        out = tmp_path / "out"

        main(["build", "--train_file", str(tmp_path / "train.csv"), "--test_file", str(tmp_path / "test.csv"),
              "--output", str(out), "--convergence_curves", "true"] + self.ARGS)

        table = pd.read_csv(out / "accuracies" / "train__SVM_linear.csv")
        assert table["fold"].unique().tolist() == [0]
        assert table["selected"].sum() == 1
        assert (out / "curves" / "train__draw_count.csv").exists()
        assert (out / "curves" / "train__window.csv").exists()

    def test_missing_training_file_exits(self, tmp_path):
        with pytest.raises(SystemExit) as excinfo:
            main(["build", "--train_file", str(tmp_path / "nope.csv"), "--output", str(tmp_path / "out")])
        assert excinfo.value.code == 2

    def test_invalid_option_exits(self, tmp_path):
        write_table(tmp_path / "train.csv", 16, 5, seed=2)
        with pytest.raises(SystemExit) as excinfo:
            main(["build", "--train_file", str(tmp_path / "train.csv"), "--output", str(tmp_path / "out"),
                  "--k_grid", "0"])
        assert excinfo.value.code == 3
