import numpy as np
import pytest

from rankKernel.core.base import EvaluationMode, ExperimentConfig
from rankKernel.data.dataset import Dataset


def make_expression(n_samples, n_features, seed=0, informative=(0, 1)):
    """Two balanced classes; the order of the two informative genes flips with the class."""
    rng = np.random.default_rng(seed)
    y = np.array([0] * (n_samples // 2) + [1] * (n_samples - n_samples // 2))
    X = rng.normal(size=(n_samples, n_features))
    i, j = informative
    X[:, i] = X[:, j] + np.where(y == 1, 1.0, -1.0) * (1.0 + rng.random(n_samples))
    return X, y


@pytest.fixture
def fast_config():
    return ExperimentConfig(
        c_grid=(0.1, 1.0),
        k_grid=(1, 3),
        inner_folds=2,
        outer_folds=3,
        outer_repeats=2,
        seed=7,
        noise_window_grid=(0.5, 1.0),
        mc_draw_counts=(1, 2, 4),
    )


@pytest.fixture
def nested_dataset():
    X, y = make_expression(24, 8, seed=1)
    return Dataset("nested", X, y, mode=EvaluationMode.NESTED)


@pytest.fixture
def held_out_dataset():
    X, y = make_expression(20, 8, seed=2)
    X_test, y_test = make_expression(10, 8, seed=3)
    return Dataset("held_out", X, y, X_test, y_test, mode=EvaluationMode.HELD_OUT)
