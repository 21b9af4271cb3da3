"""
Monte-Carlo approximation of the stabilized Kendall kernel.

The stabilized kernel is the expectation of the Kendall kernel over uniform
noise added to the data. ``KernelApproximator`` gives both the closed-form
expectation and a running Monte-Carlo average whose draws are seeded per
draw index, so the D-draw estimate does not depend on how the draws were
scheduled or batched.
"""

from typing import Dict, Iterable, Iterator, Optional, Sequence, Tuple
import numpy as np

from .exceptions import ConfigError
from .kernels import jitter, kendall_kernel, stabilized_kendall_exact
from ..utils.logger import get_logger


class RunningMeanAccumulator:
    """
    Streaming arithmetic mean of equally shaped arrays.

    ``update`` never modifies the previous average in place; it builds the
    new average and swaps it in.
    """

    def __init__(self, mean: Optional[np.ndarray] = None, count: int = 0):
        if (mean is None) != (count == 0):
            raise ConfigError("An accumulator needs a mean exactly when its count is positive",
                              {"count": count})
        self._mean = None if mean is None else np.array(mean, dtype=float)
        self._count = int(count)

    @property
    def count(self) -> int:
        return self._count

    @property
    def mean(self) -> Optional[np.ndarray]:
        return self._mean

    def update(self, draw: np.ndarray) -> np.ndarray:
        """Fold one more draw into the average and return the new average."""
        draw = np.asarray(draw, dtype=float)
        if self._mean is None:
            new_mean = draw.copy()
        else:
            if draw.shape != self._mean.shape:
                raise ConfigError("Draw shape does not match the running average",
                                  {"draw_shape": draw.shape, "mean_shape": self._mean.shape})
            d = self._count
            new_mean = self._mean * (d / (d + 1.0)) + draw * (1.0 / (d + 1.0))
        self._mean = new_mean
        self._count += 1
        return new_mean

    def merge(self, other: 'RunningMeanAccumulator') -> 'RunningMeanAccumulator':
        """Mean over the draws of both accumulators, as a new accumulator."""
        if other.count == 0:
            return RunningMeanAccumulator(self._mean, self._count)
        if self._count == 0:
            return RunningMeanAccumulator(other.mean, other.count)
        total = self._count + other.count
        mean = self._mean * (self._count / total) + other.mean * (other.count / total)
        return RunningMeanAccumulator(mean, total)


class KernelApproximator:
    """
    Stabilized Kendall kernel at a fixed noise window.

    Args:
        window: Half-width a of the uniform noise U[-a, a]
        seed: Root of the per-draw seed sequence
    """

    def __init__(self, window: float, seed: int = 0):
        if not window > 0:
            raise ConfigError("Noise window must be positive", {"window": window})
        self.window = float(window)
        self.seed = int(seed)
        self.logger = get_logger("KernelApproximator")

    def _rng(self, index: int) -> np.random.Generator:
        return np.random.default_rng(np.random.SeedSequence(self.seed, spawn_key=(int(index),)))

    def exact(self, X: np.ndarray) -> np.ndarray:
        """Closed-form expectation of the jittered Kendall kernel."""
        return stabilized_kendall_exact(X, self.window)

    def draw(self, X: np.ndarray, index: int) -> np.ndarray:
        """Kendall kernel of X after the noise draw number ``index``."""
        return kendall_kernel(jitter(X, self.window, self._rng(index)))

    def accumulate(
        self,
        X: np.ndarray,
        n_draws: int,
        accumulator: Optional[RunningMeanAccumulator] = None
    ) -> RunningMeanAccumulator:
        """
        Extend ``accumulator`` (or a fresh one) until it holds ``n_draws`` draws.

        Draws already in the accumulator are not recomputed; draw indices
        continue from its count.
        """
        if not isinstance(n_draws, (int, np.integer)) or n_draws < 1:
            raise ConfigError("Number of draws must be a positive integer", {"n_draws": n_draws})
        accumulator = accumulator if accumulator is not None else RunningMeanAccumulator()
        if accumulator.count > n_draws:
            raise ConfigError("Accumulator already holds more draws than requested",
                              {"have": accumulator.count, "n_draws": n_draws})
        while accumulator.count < n_draws:
            accumulator.update(self.draw(X, accumulator.count))
        return accumulator

    def monte_carlo(self, X: np.ndarray, n_draws: int) -> np.ndarray:
        """Average of the first ``n_draws`` jittered Kendall kernels."""
        K = self.accumulate(X, n_draws).mean
        self.logger.debug(f"Monte-Carlo stabilized kernel: a={self.window:g}, D={n_draws}")
        return K

    def iter_draws(self, X: np.ndarray, draw_counts: Iterable[int]) -> Iterator[Tuple[int, np.ndarray]]:
        """
        Yield ``(D, K_D)`` for increasing draw counts from one running average.

        Adding the D-th draw costs one kernel computation regardless of D.
        """
        accumulator = RunningMeanAccumulator()
        previous = 0
        for n_draws in draw_counts:
            if n_draws < previous:
                raise ConfigError("Draw counts must be increasing",
                                  {"previous": previous, "n_draws": n_draws})
            previous = n_draws
            self.accumulate(X, n_draws, accumulator)
            yield n_draws, accumulator.mean

    @staticmethod
    def deviation(K: np.ndarray, reference: np.ndarray) -> float:
        """Mean absolute off-diagonal difference between two kernel matrices."""
        K = np.asarray(K)
        mask = ~np.eye(K.shape[0], dtype=bool)
        if not mask.any():
            return 0.0
        return float(np.abs(K - np.asarray(reference))[mask].mean())


def window_sweep(
    X: np.ndarray,
    windows: Sequence[float],
    n_draws: Optional[int] = None,
    seed: int = 0
) -> Dict[float, np.ndarray]:
    """
    Stabilized kernel for each window size at a fixed draw count.

    ``n_draws=None`` uses the closed-form expectation.
    """
    kernels = {}
    for window in windows:
        approximator = KernelApproximator(window, seed)
        kernels[window] = approximator.exact(X) if n_draws is None else approximator.monte_carlo(X, n_draws)
    return kernels
