"""
Top-scoring-pair scoring for rankKernel.

A pair (i, j) scores well when the sign of ``X[:, i] - X[:, j]`` separates
the two classes. The comparison table is computed once per dataset and then
restricted to the training rows of each split.
"""

from typing import List, Optional, Sequence, Tuple
from dataclasses import dataclass
import numpy as np

from .exceptions import ConfigError, DataMismatchError
from ..utils.logger import get_logger


@dataclass(frozen=True)
class GenePair:
    """An ordered feature pair with its score.

    ``direction`` is the class predicted for a sample with ``x[i] < x[j]``.
    """
    i: int
    j: int
    score: float
    direction: Optional[object] = None

    @property
    def key(self) -> Tuple[int, int]:
        """Unordered identity of the pair."""
        return (min(self.i, self.j), max(self.i, self.j))


def pair_indices(n_features: int) -> Tuple[np.ndarray, np.ndarray]:
    """Indices (i, j), i < j, of every feature pair in lexicographic order."""
    return np.triu_indices(n_features, k=1)


class PairComparisons:
    """
    Boolean table ``X[s, i] < X[s, j]`` for every sample and every pair i < j.

    Columns follow ``pair_indices`` order. Memory is n * p * (p - 1) / 2
    bytes, which is what lets every fold score its pairs by row subsetting.
    """

    def __init__(self, X: np.ndarray):
        X = np.asarray(X, dtype=float)
        if X.ndim != 2:
            raise DataMismatchError(f"Feature matrix must be 2-D, got shape {X.shape}")
        n_samples, n_features = X.shape
        if n_features < 2:
            raise ConfigError("At least two features are needed to form a pair",
                              {"n_features": n_features})

        self.n_samples = n_samples
        self.n_features = n_features
        self.first_, self.second_ = pair_indices(n_features)

        blocks = [X[:, [i]] < X[:, i + 1:] for i in range(n_features - 1)]
        self.less_ = np.concatenate(blocks, axis=1)

    @property
    def n_pairs(self) -> int:
        return self.less_.shape[1]

    def subset(self, rows: Optional[Sequence[int]] = None) -> np.ndarray:
        if rows is None:
            return self.less_
        return self.less_[np.asarray(rows)]


@dataclass
class PairScores:
    """Scores and deterministic ranking of all feature pairs."""
    first: np.ndarray
    second: np.ndarray
    scores: np.ndarray
    directions: np.ndarray
    classes: np.ndarray
    order: np.ndarray
    disjoint: bool = False

    @property
    def n_pairs(self) -> int:
        return len(self.scores)

    @property
    def max_k(self) -> int:
        return len(self.order)

    def _check_k(self, k: int) -> None:
        if not isinstance(k, (int, np.integer)) or k < 1:
            raise ConfigError("Number of pairs must be a positive integer", {"k": k})
        if k > self.max_k:
            raise ConfigError(
                f"Requested {k} top pairs but only {self.max_k} "
                f"{'disjoint ' if self.disjoint else ''}pairs are available",
                {"k": k, "available_pairs": self.max_k}
            )

    def top_indices(self, k: int) -> np.ndarray:
        """Column indices (into the pair table) of the k best pairs."""
        self._check_k(k)
        return self.order[:k]

    def top(self, k: int) -> List[GenePair]:
        return [
            GenePair(int(self.first[c]), int(self.second[c]), float(self.scores[c]),
                     self.directions[c].item())
            for c in self.top_indices(k)
        ]

    def features(self, k: int) -> np.ndarray:
        """Sorted indices of the features appearing in the top-k pairs."""
        cols = self.top_indices(k)
        return np.unique(np.concatenate([self.first[cols], self.second[cols]]))


class PairScorer:
    """
    Rank-comparison scorer for all feature pairs.

    score(i, j) = |P(x_i < x_j | c1) - P(x_i < x_j | c0)|, estimated from the
    training samples of each class. Pairs are ranked by descending score;
    equal scores keep lexicographic (i, j) order.
    """

    def __init__(self, disjoint: bool = False):
        self.disjoint = disjoint
        self.logger = get_logger("PairScorer")

    def score(
        self,
        X: Optional[np.ndarray],
        y: np.ndarray,
        indices: Optional[Sequence[int]] = None,
        comparisons: Optional[PairComparisons] = None
    ) -> PairScores:
        """
        Score every pair.

        Args:
            X: Feature matrix (ignored when ``comparisons`` is given)
            y: Labels for all rows of X / the comparison table
            indices: Training rows to score on; all rows when None
            comparisons: Precomputed comparison table for X

        Returns:
            PairScores with a deterministic ranking
        """
        if comparisons is None:
            if X is None:
                raise ConfigError("Either a feature matrix or a comparison table is required")
            comparisons = PairComparisons(X)

        y = np.asarray(y)
        if len(y) != comparisons.n_samples:
            raise DataMismatchError(
                f"Label vector length ({len(y)}) doesn't match number of samples ({comparisons.n_samples})"
            )
        rows = np.arange(len(y)) if indices is None else np.asarray(indices)
        y_rows = y[rows]

        classes = np.unique(y_rows)
        if len(classes) != 2:
            raise DataMismatchError(f"Pair scoring needs exactly 2 classes, found {len(classes)}: {classes}")

        less = comparisons.subset(rows)
        p0 = less[y_rows == classes[0]].mean(axis=0)
        p1 = less[y_rows == classes[1]].mean(axis=0)

        scores = np.abs(p1 - p0)
        directions = np.where(p1 >= p0, classes[1], classes[0])

        # stable sort over lexicographically enumerated pairs keeps (i, j) order on ties
        order = np.argsort(-scores, kind="stable")
        if self.disjoint:
            order = self._disjoint_order(order, comparisons.first_, comparisons.second_)

        self.logger.debug(f"Scored {comparisons.n_pairs} pairs on {len(rows)} samples, "
                          f"best score {scores[order[0]]:.3f}")

        return PairScores(
            first=comparisons.first_,
            second=comparisons.second_,
            scores=scores,
            directions=directions,
            classes=classes,
            order=order,
            disjoint=self.disjoint,
        )

    @staticmethod
    def _disjoint_order(order: np.ndarray, first: np.ndarray, second: np.ndarray) -> np.ndarray:
        """Greedy walk down the ranking keeping pairs whose features are unused."""
        used = set()
        kept = []
        for col in order:
            i, j = int(first[col]), int(second[col])
            if i in used or j in used:
                continue
            used.update((i, j))
            kept.append(col)
        return np.asarray(kept, dtype=order.dtype)
