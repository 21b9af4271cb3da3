"""
Dataset container for rankKernel.
"""

from typing import Optional, Sequence
from dataclasses import dataclass
import numpy as np

from ..core.base import EvaluationMode


@dataclass
class Dataset:
    """
    Feature matrix and binary labels, with an optional independent test partition.

    ``mode`` declares how the dataset is evaluated; the validator checks it
    against the partitions actually present.
    """
    name: str
    X: np.ndarray
    y: np.ndarray
    X_test: Optional[np.ndarray] = None
    y_test: Optional[np.ndarray] = None
    mode: EvaluationMode = EvaluationMode.NESTED
    feature_names: Optional[Sequence[str]] = None

    def __post_init__(self):
        self.X = np.asarray(self.X, dtype=float)
        self.y = np.asarray(self.y)
        if self.X_test is not None:
            self.X_test = np.asarray(self.X_test, dtype=float)
        if self.y_test is not None:
            self.y_test = np.asarray(self.y_test)
        if isinstance(self.mode, str):
            self.mode = EvaluationMode(self.mode)

    @property
    def has_test_partition(self) -> bool:
        return (self.X_test is not None and self.y_test is not None
                and len(self.y_test) > 0 and self.X_test.shape[0] > 0)

    @property
    def n_train(self) -> int:
        return self.X.shape[0]

    @property
    def n_features(self) -> int:
        return self.X.shape[1]

    def stacked(self):
        """
        Training and test samples in one matrix.

        Returns:
            Tuple of (X_all, y_all, train_indices, test_indices)
        """
        if not self.has_test_partition:
            idx = np.arange(self.n_train)
            return self.X, self.y, idx, np.array([], dtype=int)
        X_all = np.vstack([self.X, self.X_test])
        y_all = np.concatenate([self.y, self.y_test])
        train_idx = np.arange(self.n_train)
        test_idx = np.arange(self.n_train, X_all.shape[0])
        return X_all, y_all, train_idx, test_idx
