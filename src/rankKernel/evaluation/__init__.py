"""
Evaluation modules for rankKernel.

This module contains accuracy metrics, result containers, and results writing.
"""

from .metrics import accuracy, select_best_index
from .results import AccuracyTensor, EvaluationResult, RunReport, UnitFailure
from .reporter import ResultsWriter

__all__ = [
    "accuracy",
    "select_best_index",
    "AccuracyTensor",
    "EvaluationResult",
    "RunReport",
    "UnitFailure",
    "ResultsWriter",
]
