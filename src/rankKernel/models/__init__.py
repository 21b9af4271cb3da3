"""
Model implementations for rankKernel.

This module contains the precomputed-kernel classifiers and the rank-comparison voters.
"""

from .base_model import PrecomputedKernelModel
from .svm import KernelSVMClassifier, train_predict
from .kfd import KernelFisherDiscriminant
from .tsp import TopScoringPairClassifier, majority_votes

__all__ = [
    "PrecomputedKernelModel",
    "KernelSVMClassifier",
    "train_predict",
    "KernelFisherDiscriminant",
    "TopScoringPairClassifier",
    "majority_votes",
]
