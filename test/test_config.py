"""
Unit tests for ExperimentConfig, ConfigManager and the model battery.
"""
import pytest
import yaml

from rankKernel.config import DEFAULT_CONFIG, DEFAULT_MODELS, create_model_battery, create_model_spec
from rankKernel.config.model_configs import DEFAULT_NOISE_WINDOW
from rankKernel.core.base import ExperimentConfig, KernelSVMSpec, KernelSVMTopKSpec, KernelType, TSPSpec
from rankKernel.core.exceptions import ConfigError
from rankKernel.utils.config import ConfigManager


class TestExperimentConfig:
    """Test suite for ExperimentConfig validation."""

    def test_defaults_are_valid(self):
        config = ExperimentConfig().validate()

        assert config.outer_folds == 5
        assert config.c_grid == (0.01, 0.1, 1.0, 10.0, 100.0)

    @pytest.mark.parametrize("option,value", [
        ("c_grid", ()),
        ("c_grid", (1.0, -1.0)),
        ("k_grid", (0, 1)),
        ("k_grid", (3, 1)),
        ("k_grid", (1, 1)),
        ("c_grid", (10.0, 0.1)),
        ("inner_folds", 1),
        ("outer_repeats", 0),
        ("noise_window_grid", (0.0,)),
        ("mc_draw_counts", (10, 5)),
        ("n_jobs", 0),
    ])
    def test_invalid_option_named(self, option, value):
        with pytest.raises(ConfigError) as excinfo:
            ExperimentConfig(**{option: value}).validate()
        assert option in excinfo.value.config

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            ExperimentConfig(k_grid=()).validate()

    def test_to_dict_uses_lists(self):
        data = ExperimentConfig().to_dict()

        assert data["k_grid"] == [1, 3, 5, 7, 9]
        assert data["backend"] == "loky"


class TestConfigManager:
    """Test suite for ConfigManager."""

    def test_aliases(self):
        config = ConfigManager().update_config(Cgrid=[1, 10], kGrid=[2], outerRepeats=3).get_config()

        assert config.c_grid == (1.0, 10.0)
        assert config.k_grid == (2,)
        assert config.outer_repeats == 3

    def test_unknown_key_ignored(self):
        config = ConfigManager().update_config(colour="blue").get_config()

        assert config == ExperimentConfig()

    def test_load_nested_yaml(self, tmp_path):
        path = tmp_path / "experiment.yaml"
        path.write_text(yaml.safe_dump({"experiment": {"innerFolds": 3, "seed": 5}}))

        config = ConfigManager().load_from_file(path).get_config()

        assert config.inner_folds == 3
        assert config.seed == 5

    def test_save_and_load(self, tmp_path):
        manager = ConfigManager().update_config(c_grid=[0.5], disjoint_pairs=True)
        manager.save_to_file(tmp_path / "config.json")

        loaded = ConfigManager().load_from_file(tmp_path / "config.json").get_config()

        assert loaded == manager.get_config()

    def test_invalid_values_rejected_on_get(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("outerFolds: 1\n")

        with pytest.raises(ConfigError):
            ConfigManager().load_from_file(path).get_config()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigManager().load_from_file(tmp_path / "missing.yaml")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "config.txt"
        path.write_text("seed: 1")
        with pytest.raises(ValueError):
            ConfigManager().load_from_file(path)

    def test_default_config_layout_loads(self, tmp_path):
        path = tmp_path / "default.yaml"
        path.write_text(yaml.safe_dump(DEFAULT_CONFIG))

        config = ConfigManager().load_from_file(path).get_config()

        assert config == ExperimentConfig(**DEFAULT_CONFIG["experiment"])


class TestModelBattery:
    """Test suite for model name resolution."""

    def test_default_battery(self):
        models = create_model_battery()

        assert len(models) == len(DEFAULT_MODELS)
        assert len({m.name for m in models}) == len(models)

    def test_stabilized_window(self):
        spec = create_model_spec("svm_stabilized_kendall")
        assert isinstance(spec, KernelSVMSpec)
        assert spec.kernel.window == DEFAULT_NOISE_WINDOW
        assert spec.kernel.n_draws is None

        spec = create_model_spec("svm_stabilized_kendall", window=0.5, n_draws=20)
        assert spec.name == "SVM[stabilized_kendall(a=0.5,D20)]"

    def test_names(self):
        assert isinstance(create_model_spec("TSP"), TSPSpec)
        topk = create_model_spec("svm_kendall_topk")
        assert isinstance(topk, KernelSVMTopKSpec)
        assert topk.kernel.kind == KernelType.KENDALL
        assert topk.name == "SVM[kendall]-topk"

    def test_unknown_model(self):
        with pytest.raises(ConfigError, match="Unknown model"):
            create_model_spec("random_forest")
