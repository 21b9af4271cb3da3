"""
Base model implementation for rankKernel.

Kernel models are trained on a precomputed training kernel matrix and
predict from the rows of the kernel between test and training samples.
"""

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.utils.multiclass import unique_labels

from ..core.exceptions import DataMismatchError


class PrecomputedKernelModel(ClassifierMixin, BaseEstimator):
    """Base class for binary classifiers on precomputed kernel matrices."""

    def _check_fit_input(self, K_train: np.ndarray, y: np.ndarray):
        K_train = np.asarray(K_train, dtype=float)
        y = np.asarray(y)
        if K_train.ndim != 2 or K_train.shape[0] != K_train.shape[1]:
            raise DataMismatchError(f"Training kernel must be square, got shape {K_train.shape}")
        if K_train.shape[0] != len(y):
            raise DataMismatchError(
                f"Training kernel size ({K_train.shape[0]}) doesn't match labels length ({len(y)})"
            )
        self.classes_ = unique_labels(y)
        if len(self.classes_) != 2:
            raise DataMismatchError(f"Expected 2 classes, found {len(self.classes_)}: {self.classes_}")
        self.n_train_ = K_train.shape[0]
        return K_train, y

    def _check_predict_input(self, K_test: np.ndarray) -> np.ndarray:
        if not hasattr(self, 'classes_'):
            raise ValueError("Model must be fitted before making predictions")
        K_test = np.atleast_2d(np.asarray(K_test, dtype=float))
        if K_test.shape[1] != self.n_train_:
            raise DataMismatchError(
                f"Test kernel has {K_test.shape[1]} columns, expected {self.n_train_} training samples"
            )
        return K_test

    def decision_function(self, K_test: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def predict(self, K_test: np.ndarray) -> np.ndarray:
        """Positive decision values map to ``classes_[1]``."""
        scores = self.decision_function(K_test)
        return np.where(scores > 0, self.classes_[1], self.classes_[0])
