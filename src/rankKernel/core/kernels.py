"""
Kernel functions for rankKernel.

Plain functions from a feature matrix (rows = samples) to an n x n kernel
matrix. Every function returns an exactly symmetric matrix with a unit
diagonal; degenerate inputs emit DegenerateKernelWarning.
"""

from typing import Callable, Optional, Sequence, Tuple
import warnings
import numpy as np
from sklearn.metrics.pairwise import euclidean_distances

from .exceptions import ConfigError, DegenerateKernelWarning


def symmetrize(K: np.ndarray, diagonal: float = 1.0) -> np.ndarray:
    """Mirror the strict upper triangle and set the diagonal."""
    upper = np.triu(K, k=1)
    K = upper + upper.T
    np.fill_diagonal(K, diagonal)
    return K


def _safe_normalize(G: np.ndarray, scale: np.ndarray, what: str) -> np.ndarray:
    """Divide G[a, b] by scale[a] * scale[b]; zero-scale rows become 0."""
    degenerate = scale <= 0
    if degenerate.any():
        warnings.warn(
            f"{int(degenerate.sum())} sample(s) with {what}; their kernel rows are constant",
            DegenerateKernelWarning,
            stacklevel=3,
        )
    safe = np.where(degenerate, 1.0, scale)
    K = G / np.outer(safe, safe)
    K[degenerate, :] = 0.0
    K[:, degenerate] = 0.0
    return K


def linear_kernel(X: np.ndarray) -> np.ndarray:
    """Normalized dot product (cosine similarity) between samples."""
    X = np.asarray(X, dtype=float)
    G = X @ X.T
    norms = np.sqrt(np.clip(np.diag(G), 0.0, None))
    return symmetrize(_safe_normalize(G, norms, "zero norm"))


def polynomial_kernel(X: np.ndarray) -> np.ndarray:
    """Homogeneous degree-2 polynomial kernel on the normalized linear kernel."""
    return symmetrize(linear_kernel(X) ** 2)


def median_sigma(X: np.ndarray, rows: Optional[Sequence[int]] = None) -> float:
    """
    Median pairwise Euclidean distance among the given rows.

    Falls back to 1.0 (with a warning) when the median is zero or fewer than
    two rows are available.
    """
    X = np.asarray(X, dtype=float)
    sub = X if rows is None else X[np.asarray(rows)]
    if sub.shape[0] < 2:
        warnings.warn("Fewer than two samples for the median distance heuristic; using sigma=1",
                      DegenerateKernelWarning, stacklevel=2)
        return 1.0
    D = euclidean_distances(sub)
    sigma = float(np.median(D[np.triu_indices(sub.shape[0], k=1)]))
    if not sigma > 0:
        warnings.warn("Median pairwise distance is zero; using sigma=1",
                      DegenerateKernelWarning, stacklevel=2)
        return 1.0
    return sigma


def rbf_kernel(X: np.ndarray, sigma: float) -> np.ndarray:
    """Gaussian kernel exp(-||a - b||^2 / (2 sigma^2))."""
    if not sigma > 0:
        raise ConfigError("Gaussian kernel bandwidth must be positive", {"sigma": sigma})
    D2 = euclidean_distances(np.asarray(X, dtype=float), squared=True)
    return symmetrize(np.exp(-D2 / (2.0 * sigma ** 2)))


def feature_pair_gram(
    X: np.ndarray,
    transform: Callable[[np.ndarray], np.ndarray]
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Accumulate ``T T^T`` where T holds ``transform(x_i - x_j)`` for all i < j.

    Works one feature at a time so only an n x p block is alive at once.

    Returns:
        Tuple of (gram matrix, number of non-zero transformed entries per sample)
    """
    X = np.asarray(X, dtype=float)
    n_samples, n_features = X.shape
    if n_features < 2:
        raise ConfigError("Rank kernels need at least two features", {"n_features": n_features})

    gram = np.zeros((n_samples, n_samples))
    nonzero = np.zeros(n_samples)
    for i in range(n_features - 1):
        T = transform(X[:, [i]] - X[:, i + 1:])
        gram += T @ T.T
        nonzero += np.count_nonzero(T, axis=1)
    return gram, nonzero


def kendall_kernel(X: np.ndarray) -> np.ndarray:
    """
    Kendall tau between samples, treating each feature vector as a ranking.

    (concordant - discordant) / sqrt(untied_a * untied_b): identical to the
    normalized concordance over all pairs when there are no ties.
    """
    gram, untied = feature_pair_gram(X, np.sign)
    K = _safe_normalize(gram, np.sqrt(untied), "all feature values tied")
    return symmetrize(K)


def expected_sign(d: np.ndarray, window: float) -> np.ndarray:
    """
    E[sign(d + e_i - e_j)] for independent e_i, e_j ~ U[-window, window].

    The noise difference is triangular on [-2a, 2a], so with u = |d| / 2a the
    expectation is sign(d) * (1 - (1 - u)^2) for u < 1 and sign(d) otherwise.
    """
    u = np.abs(d) / (2.0 * window)
    return np.sign(d) * np.where(u < 1.0, 1.0 - (1.0 - u) ** 2, 1.0)


def stabilized_kendall_exact(X: np.ndarray, window: float) -> np.ndarray:
    """
    Expected Kendall kernel under uniform noise in [-window, window].

    Noise on two different samples is independent, so each off-diagonal
    entry is the mean over pairs of the product of expected signs; a noised
    sample has no ties, so the diagonal is exactly 1.
    """
    if not window > 0:
        raise ConfigError("Noise window must be positive", {"window": window})
    n_features = np.asarray(X).shape[1]
    gram, _ = feature_pair_gram(X, lambda D: expected_sign(D, window))
    n_pairs = n_features * (n_features - 1) / 2.0
    return symmetrize(gram / n_pairs)


def jitter(X: np.ndarray, window: float, rng: np.random.Generator) -> np.ndarray:
    """Add independent U[-window, window] noise to every entry of X."""
    X = np.asarray(X, dtype=float)
    return X + rng.uniform(-window, window, size=X.shape)
