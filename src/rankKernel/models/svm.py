"""
Kernel SVM on precomputed kernel matrices.

The CV engine treats SVM training as a black box with the signature of
``train_predict``; ``KernelSVMClassifier`` is the scikit-learn backed
default.
"""

import numpy as np
from sklearn.svm import SVC

from .base_model import PrecomputedKernelModel


class KernelSVMClassifier(PrecomputedKernelModel):
    """
    SVM with ``kernel='precomputed'``.

    Args:
        C: Regularization parameter
        tol: Solver tolerance
        max_iter: Solver iteration limit (-1 for none)
    """

    def __init__(self, C: float = 1.0, tol: float = 1e-3, max_iter: int = -1):
        self.C = C
        self.tol = tol
        self.max_iter = max_iter

    def fit(self, K_train: np.ndarray, y: np.ndarray) -> 'KernelSVMClassifier':
        K_train, y = self._check_fit_input(K_train, y)
        self.svc_ = SVC(kernel='precomputed', C=self.C, tol=self.tol, max_iter=self.max_iter)
        self.svc_.fit(K_train, y)
        return self

    def decision_function(self, K_test: np.ndarray) -> np.ndarray:
        K_test = self._check_predict_input(K_test)
        return self.svc_.decision_function(K_test)

    def predict(self, K_test: np.ndarray) -> np.ndarray:
        K_test = self._check_predict_input(K_test)
        return self.svc_.predict(K_test)


def train_predict(K_train: np.ndarray, y_train: np.ndarray,
                  K_test_rows: np.ndarray, C: float) -> np.ndarray:
    """
    Train a kernel SVM and predict held-out samples.

    Args:
        K_train: Kernel among training samples
        y_train: Training labels
        K_test_rows: Kernel between held-out samples (rows) and training samples (columns)
        C: Regularization parameter

    Returns:
        Predicted labels for the held-out samples
    """
    return KernelSVMClassifier(C=C).fit(K_train, y_train).predict(K_test_rows)
