"""
Top-scoring-pair classifiers.

TSP votes with the single best pair, kTSP with the k best pairs and APMV
with every pair. Each pair votes for the class its learned direction
assigns to the observed order of its two features.
"""

from typing import Optional, Sequence
import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin

from ..core.exceptions import ConfigError
from ..core.pair_scorer import PairComparisons, PairScorer, PairScores


def majority_votes(
    less: np.ndarray,
    directions: np.ndarray,
    classes: np.ndarray,
    ks: Sequence[int]
) -> np.ndarray:
    """
    Majority-vote predictions for several pair counts at once.

    Args:
        less: Boolean ``x_i < x_j`` per sample (rows) and ranked pair (columns)
        directions: Class predicted by each ranked pair when ``x_i < x_j``
        classes: The two classes in sorted order
        ks: Pair counts; each uses the first k columns

    Returns:
        Array of shape (len(ks), n_samples). A tied vote goes to ``classes[0]``.
    """
    points_to_second = np.asarray(directions) == classes[1]
    votes_second = np.cumsum(less == points_to_second[np.newaxis, :], axis=1)
    predictions = np.empty((len(ks), less.shape[0]), dtype=np.asarray(classes).dtype)
    for row, k in enumerate(ks):
        wins = votes_second[:, k - 1] * 2 > k
        predictions[row] = np.where(wins, classes[1], classes[0])
    return predictions


class TopScoringPairClassifier(ClassifierMixin, BaseEstimator):
    """
    k-TSP classifier.

    Args:
        k: Number of top pairs voting; None uses every pair (APMV)
        disjoint: Only use pairs that share no feature
    """

    def __init__(self, k: Optional[int] = 1, disjoint: bool = False):
        self.k = k
        self.disjoint = disjoint

    def fit(self, X: np.ndarray, y: np.ndarray, scores: Optional[PairScores] = None) -> 'TopScoringPairClassifier':
        """
        Rank the pairs of X (or reuse ``scores``) and keep the top k.
        """
        if self.k is None and (self.disjoint or (scores is not None and scores.disjoint)):
            raise ConfigError("Voting with every pair (k=None) cannot use disjoint pairs",
                              {"k": self.k, "disjoint": True})
        if scores is None:
            scores = PairScorer(disjoint=self.disjoint).score(np.asarray(X, dtype=float), y)
        k = scores.n_pairs if self.k is None else self.k
        if not isinstance(k, (int, np.integer)) or k < 1:
            raise ConfigError("Number of pairs must be a positive integer", {"k": self.k})

        cols = scores.top_indices(k)
        self.pairs_ = scores.top(k)
        self.first_ = scores.first[cols]
        self.second_ = scores.second[cols]
        self.directions_ = scores.directions[cols]
        self.classes_ = scores.classes
        self.k_ = int(k)
        return self

    def predict_from_comparisons(self, less: np.ndarray) -> np.ndarray:
        """Predict from a comparison table whose columns follow the fitted pairs."""
        return majority_votes(less, self.directions_, self.classes_, [self.k_])[0]

    def predict(self, X: np.ndarray) -> np.ndarray:
        if not hasattr(self, 'pairs_'):
            raise ValueError("Model must be fitted before making predictions")
        X = np.atleast_2d(np.asarray(X, dtype=float))
        less = X[:, self.first_] < X[:, self.second_]
        return self.predict_from_comparisons(less)


def fit_tsp_family(X: np.ndarray, y: np.ndarray, ks: Sequence[int],
                   disjoint: bool = False) -> list:
    """Fit one classifier per k from a single pair ranking."""
    scores = PairScorer(disjoint=disjoint).score(None, y, comparisons=PairComparisons(X))
    return [TopScoringPairClassifier(k, disjoint).fit(X, y, scores=scores) for k in ks]
