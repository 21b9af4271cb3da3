"""
Kernel matrix construction for rankKernel.

``KernelMatrixBuilder`` turns a feature matrix, an optional feature subset
and a ``KernelSpec`` into a kernel matrix over all samples.
"""

from typing import Optional, Sequence
import numpy as np

from .base import KernelSpec, KernelType
from .exceptions import ConfigError, DataMismatchError
from .kernel_approximator import KernelApproximator
from .kernels import kendall_kernel, linear_kernel, median_sigma, polynomial_kernel, rbf_kernel
from ..utils.logger import get_logger


class KernelMatrixBuilder:
    """
    Builder for every supported kernel family.

    Args:
        random_state: Seed for the Monte-Carlo stabilized kernel
    """

    def __init__(self, random_state: int = 0):
        self.random_state = random_state
        self.logger = get_logger("KernelMatrixBuilder")
        self.last_sigma_ = None

    def restrict(self, X: np.ndarray, features: Optional[Sequence[int]]) -> np.ndarray:
        """Column view of X for a feature subset, validating the indices."""
        X = np.asarray(X, dtype=float)
        if X.ndim != 2:
            raise DataMismatchError(f"Feature matrix must be 2-D, got shape {X.shape}")
        if features is None:
            return X
        features = np.asarray(features)
        if features.size == 0:
            raise ConfigError("Feature subset is empty")
        if not np.issubdtype(features.dtype, np.integer):
            raise ConfigError("Feature subset must contain integer indices",
                              {"features": features.tolist()})
        out_of_range = (features < 0) | (features >= X.shape[1])
        if out_of_range.any():
            raise ConfigError("Feature subset contains out-of-range indices",
                              {"invalid": features[out_of_range].tolist(), "n_features": X.shape[1]})
        return X[:, features]

    def build(
        self,
        X: np.ndarray,
        spec: KernelSpec,
        features: Optional[Sequence[int]] = None,
        train_indices: Optional[Sequence[int]] = None
    ) -> np.ndarray:
        """
        Build the n x n kernel matrix.

        Args:
            X: Feature matrix, rows are samples
            spec: Kernel family and parameters
            features: Optional column subset
            train_indices: Rows allowed to inform data-dependent parameters
                (the Gaussian bandwidth); all rows when None

        Returns:
            Symmetric kernel matrix with a unit diagonal
        """
        Xs = self.restrict(X, features)
        kind = spec.kind

        if kind == KernelType.LINEAR:
            K = linear_kernel(Xs)
        elif kind == KernelType.POLYNOMIAL:
            K = polynomial_kernel(Xs)
        elif kind == KernelType.RBF:
            sigma = median_sigma(Xs, train_indices)
            self.last_sigma_ = sigma
            K = rbf_kernel(Xs, sigma)
        elif kind == KernelType.KENDALL:
            K = kendall_kernel(Xs)
        elif kind == KernelType.STABILIZED_KENDALL:
            approximator = KernelApproximator(spec.window, self.random_state)
            if spec.n_draws is None:
                K = approximator.exact(Xs)
            else:
                K = approximator.monte_carlo(Xs, spec.n_draws)
        else:
            raise ConfigError(f"Unsupported kernel type: {kind}")

        self.logger.debug(f"Built {spec.label} kernel: {K.shape[0]} samples, {Xs.shape[1]} features")
        return K
