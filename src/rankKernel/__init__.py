"""
rankKernel v1.0

Rank-comparison classifiers (TSP, kTSP, all-pairs majority vote) and kernel
SVMs with rank-based kernels, evaluated with held-out or nested cross-validation.
"""

__version__ = "1.0.0"

# Core imports
from .core.base import (
    EvaluationMode, ExperimentConfig, GridPoint, KernelSpec, KernelType,
    APMVSpec, TSPSpec, KTSPSpec, KernelSVMSpec, KernelSVMTopKSpec
)
from .core.exceptions import ConfigError, DataMismatchError, DegenerateKernelWarning, RankKernelError
from .core.pair_scorer import GenePair, PairComparisons, PairScorer, PairScores
from .core.kernel_builder import KernelMatrixBuilder
from .core.kernel_approximator import KernelApproximator, RunningMeanAccumulator
from .core.fold_splitter import FoldSplit, FoldSplitter
from .core.cv_engine import CVEngine

# Data handling
from .data.dataset import Dataset
from .data.loader import DataLoader
from .data.validator import DataValidator

# Models
from .models.svm import KernelSVMClassifier
from .models.kfd import KernelFisherDiscriminant
from .models.tsp import TopScoringPairClassifier

# Evaluation
from .evaluation.results import EvaluationResult, RunReport
from .evaluation.reporter import ResultsWriter

__all__ = [
    # Core
    "EvaluationMode",
    "ExperimentConfig",
    "GridPoint",
    "KernelSpec",
    "KernelType",
    "APMVSpec",
    "TSPSpec",
    "KTSPSpec",
    "KernelSVMSpec",
    "KernelSVMTopKSpec",
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
    "FoldSplit",
    "FoldSplitter",
    "CVEngine",

    # Data
    "Dataset",
    "DataLoader",
    "DataValidator",

    # Models
    "KernelSVMClassifier",
    "KernelFisherDiscriminant",
    "TopScoringPairClassifier",

    # Evaluation
    "EvaluationResult",
    "RunReport",
    "ResultsWriter",
]
