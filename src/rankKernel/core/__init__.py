"""
Core functionality for rankKernel.

This module contains pair scoring, kernel construction and the cross-validation engine.
"""

from .base import EvaluationMode, ExperimentConfig, GridPoint, KernelSpec, KernelType, ModelKind
from .exceptions import ConfigError, DataMismatchError, DegenerateKernelWarning, RankKernelError
from .pair_scorer import GenePair, PairComparisons, PairScorer, PairScores
from .kernel_builder import KernelMatrixBuilder
from .kernel_approximator import KernelApproximator, RunningMeanAccumulator, window_sweep
from .fold_splitter import FoldSplit, FoldSplitter
from .cv_engine import CVEngine

__all__ = [
    "EvaluationMode",
    "ExperimentConfig",
    "GridPoint",
    "KernelSpec",
    "KernelType",
    "ModelKind",
    "ConfigError",
    "DataMismatchError",
    "DegenerateKernelWarning",
    "RankKernelError",
    "GenePair",
    "PairComparisons",
    "PairScorer",
    "PairScores",
    "KernelMatrixBuilder",
    "KernelApproximator",
    "RunningMeanAccumulator",
    "window_sweep",
    "FoldSplit",
    "FoldSplitter",
    "CVEngine",
]
