"""
Evaluation metrics for rankKernel.

Accuracy of binary predictions and the hyperparameter selection rule shared
by both evaluation modes.
"""

from typing import Sequence
import numpy as np
from sklearn.metrics import accuracy_score

# inner-CV means closer than this count as tied
SELECTION_TOLERANCE = 1e-12


def accuracy(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Fraction of correctly predicted labels."""
    return float(accuracy_score(np.asarray(y_true), np.asarray(y_pred)))


def select_best_index(scores: Sequence[float]) -> int:
    """
    Index of the maximal score; ties go to the first occurrence in grid order.

    NaN scores (grid points that could not be evaluated) never win unless
    every score is NaN, in which case the first index is returned.
    """
    scores = np.asarray(scores, dtype=float)
    if scores.size == 0:
        raise ValueError("Cannot select from an empty grid")
    if np.isnan(scores).all():
        return 0
    best = np.nanmax(scores)
    return int(np.flatnonzero(scores >= best - SELECTION_TOLERANCE)[0])
