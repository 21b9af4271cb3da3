"""
Unit tests for kernel functions and KernelMatrixBuilder.
"""
import numpy as np
import pytest

from rankKernel.core.base import KernelSpec, KernelType
from rankKernel.core.exceptions import ConfigError, DegenerateKernelWarning
from rankKernel.core.kernel_builder import KernelMatrixBuilder
from rankKernel.core.kernels import (
    expected_sign, kendall_kernel, linear_kernel, median_sigma, polynomial_kernel,
    rbf_kernel, stabilized_kendall_exact
)

ALL_SPECS = [
    KernelSpec(KernelType.LINEAR),
    KernelSpec(KernelType.POLYNOMIAL),
    KernelSpec(KernelType.RBF),
    KernelSpec(KernelType.KENDALL),
    KernelSpec(KernelType.STABILIZED_KENDALL, window=1.0),
    KernelSpec(KernelType.STABILIZED_KENDALL, window=0.5, n_draws=3),
]


@pytest.fixture
def X():
    return np.random.default_rng(0).normal(size=(9, 6))


class TestKernelFunctions:
    """Test suite for the plain kernel functions."""

    @pytest.mark.parametrize("spec", ALL_SPECS, ids=lambda s: s.label)
    def test_symmetric_with_unit_diagonal(self, X, spec):
        K = KernelMatrixBuilder(random_state=3).build(X, spec)

        assert K.shape == (9, 9)
        np.testing.assert_array_equal(K, K.T)
        np.testing.assert_allclose(np.diag(K), 1.0)

    def test_kendall_extremes(self):
        X = np.array([
            [1.0, 2.0, 3.0, 4.0],
            [10.0, 20.0, 30.0, 40.0],
            [4.0, 3.0, 2.0, 1.0],
        ])
        K = kendall_kernel(X)

        assert K[0, 1] == pytest.approx(1.0)
        assert K[0, 2] == pytest.approx(-1.0)

    def test_kendall_matches_pair_counting(self):
        x = np.array([3.0, 1.0, 4.0, 1.5, 5.0])
        z = np.array([2.0, 7.0, 1.0, 8.0, 2.5])
        concordant = discordant = 0
        for i in range(5):
            for j in range(i + 1, 5):
                s = np.sign(x[i] - x[j]) * np.sign(z[i] - z[j])
                concordant += s > 0
                discordant += s < 0
        K = kendall_kernel(np.vstack([x, z]))

        assert K[0, 1] == pytest.approx((concordant - discordant) / 10.0)

    def test_kendall_constant_sample_warns(self):
        X = np.array([[1.0, 1.0, 1.0], [1.0, 2.0, 3.0], [3.0, 1.0, 2.0]])
        with pytest.warns(DegenerateKernelWarning):
            K = kendall_kernel(X)
        assert K[0, 0] == 1.0
        assert K[0, 1] == 0.0

    def test_linear_zero_row_warns(self):
        X = np.array([[0.0, 0.0], [1.0, 2.0], [2.0, 1.0]])
        with pytest.warns(DegenerateKernelWarning):
            linear_kernel(X)

    def test_polynomial_is_squared_cosine(self, X):
        np.testing.assert_allclose(polynomial_kernel(X), linear_kernel(X) ** 2)

    def test_rbf_rejects_bad_bandwidth(self, X):
        with pytest.raises(ConfigError):
            rbf_kernel(X, 0.0)

    def test_median_sigma_zero_distance_falls_back(self):
        with pytest.warns(DegenerateKernelWarning):
            assert median_sigma(np.ones((4, 3))) == 1.0

    def test_expected_sign(self):
        d = np.array([-3.0, -1.0, 0.0, 1.0, 2.0, 5.0])
        # triangular noise difference on [-2, 2]: P(z < -1) = 1/8
        np.testing.assert_allclose(expected_sign(d, 1.0), [-1.0, -0.75, 0.0, 0.75, 1.0, 1.0])

    def test_stabilized_kernel_approaches_kendall_for_small_window(self, X):
        np.testing.assert_allclose(stabilized_kendall_exact(X, 1e-9), kendall_kernel(X), atol=1e-6)

    def test_stabilized_kernel_shrinks_with_window(self, X):
        narrow = stabilized_kendall_exact(X, 0.1)
        wide = stabilized_kendall_exact(X, 10.0)
        off = ~np.eye(9, dtype=bool)

        assert np.abs(wide[off]).mean() < np.abs(narrow[off]).mean()


class TestKernelMatrixBuilder:
    """Test suite for KernelMatrixBuilder."""

    def test_feature_subset(self, X):
        builder = KernelMatrixBuilder()
        spec = KernelSpec(KernelType.KENDALL)

        np.testing.assert_allclose(builder.build(X, spec, features=[0, 2, 5]),
                                   builder.build(X[:, [0, 2, 5]], spec))

    @pytest.mark.parametrize("features", [[], [0, 6], [-1, 2], [0.5, 1.0]])
    def test_invalid_feature_subset(self, X, features):
        with pytest.raises(ConfigError):
            KernelMatrixBuilder().build(X, KernelSpec(KernelType.LINEAR), features=features)

    def test_rbf_bandwidth_from_training_rows(self, X):
        builder = KernelMatrixBuilder()
        train = np.arange(6)
        builder.build(X, KernelSpec(KernelType.RBF), train_indices=train)
        sigma = builder.last_sigma_

        assert sigma == pytest.approx(median_sigma(X[train]))

        # held-out rows don't move the bandwidth
        X_shifted = X.copy()
        X_shifted[6:] += 100.0
        builder.build(X_shifted, KernelSpec(KernelType.RBF), train_indices=train)
        assert builder.last_sigma_ == pytest.approx(sigma)

    def test_monte_carlo_kernel_is_seeded(self, X):
        spec = KernelSpec(KernelType.STABILIZED_KENDALL, window=1.0, n_draws=4)

        np.testing.assert_array_equal(KernelMatrixBuilder(random_state=5).build(X, spec),
                                      KernelMatrixBuilder(random_state=5).build(X, spec))
        assert not np.array_equal(KernelMatrixBuilder(random_state=5).build(X, spec),
                                  KernelMatrixBuilder(random_state=6).build(X, spec))


class TestKernelSpec:
    """Test suite for KernelSpec validation."""

    def test_stabilized_needs_window(self):
        with pytest.raises(ConfigError):
            KernelSpec(KernelType.STABILIZED_KENDALL)
        with pytest.raises(ConfigError):
            KernelSpec(KernelType.STABILIZED_KENDALL, window=-1.0)

    def test_noise_parameters_only_for_stabilized(self):
        with pytest.raises(ConfigError):
            KernelSpec(KernelType.LINEAR, window=1.0)

    def test_invalid_draw_count(self):
        with pytest.raises(ConfigError):
            KernelSpec(KernelType.STABILIZED_KENDALL, window=1.0, n_draws=0)

    def test_from_name(self):
        assert KernelSpec.from_name("Kendall").kind == KernelType.KENDALL
        with pytest.raises(ConfigError):
            KernelSpec.from_name("sigmoid")

    def test_label(self):
        assert KernelSpec(KernelType.RBF).label == "rbf"
        assert KernelSpec(KernelType.STABILIZED_KENDALL, 0.5, 10).label == "stabilized_kendall(a=0.5,D10)"
