"""
Kernel Fisher Discriminant on precomputed kernel matrices.

Used as a baseline next to every kernel SVM: it shares the SVM's kernel
matrices and has no hyperparameter to tune (the ridge term is fixed).
"""

import numpy as np

from .base_model import PrecomputedKernelModel


class KernelFisherDiscriminant(PrecomputedKernelModel):
    """
    Two-class kernel Fisher discriminant.

    Maximizes between-class over within-class scatter of the projection
    ``K alpha``; the threshold is the midpoint of the projected class means.

    Args:
        regularization: Ridge term added to the within-class scatter
    """

    def __init__(self, regularization: float = 1e-3):
        self.regularization = regularization

    def fit(self, K_train: np.ndarray, y: np.ndarray) -> 'KernelFisherDiscriminant':
        K_train, y = self._check_fit_input(K_train, y)
        n = K_train.shape[0]

        means = []
        scatter = np.zeros((n, n))
        for label in self.classes_:
            Kc = K_train[:, y == label]
            n_c = Kc.shape[1]
            means.append(Kc.mean(axis=1))
            centering = np.eye(n_c) - np.full((n_c, n_c), 1.0 / n_c)
            scatter += Kc @ centering @ Kc.T

        diff = means[1] - means[0]
        if self.regularization > 0:
            self.alpha_ = np.linalg.solve(scatter + self.regularization * np.eye(n), diff)
        else:
            self.alpha_ = np.linalg.lstsq(scatter, diff, rcond=None)[0]

        projected = K_train @ self.alpha_
        self.threshold_ = 0.5 * (projected[y == self.classes_[0]].mean()
                                 + projected[y == self.classes_[1]].mean())
        return self

    def decision_function(self, K_test: np.ndarray) -> np.ndarray:
        K_test = self._check_predict_input(K_test)
        return K_test @ self.alpha_ - self.threshold_
