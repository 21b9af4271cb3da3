"""
Result containers for rankKernel evaluations.

Accuracies live in an ``AccuracyTensor`` indexed by (fold, grid point,
metric), allocated once with known dimensions and filled fold by fold.
"""

from typing import Any, Dict, List, Sequence, Tuple
from dataclasses import dataclass, field
import numpy as np
import pandas as pd

from .metrics import select_best_index


class AccuracyTensor:
    """
    Accuracy array of shape (n_folds, n_grid, n_metrics).

    Metrics are ``inner_cv`` (mean inner-CV accuracy on the fold's training
    data) and ``held_out`` (accuracy on the fold's held-out samples after
    training on all of its training data). Unfilled entries are NaN.
    """

    METRICS = ("inner_cv", "held_out")

    def __init__(self, n_folds: int, grid_labels: Sequence[str]):
        self.grid_labels = tuple(grid_labels)
        self.values = np.full((n_folds, len(self.grid_labels), len(self.METRICS)), np.nan)

    @property
    def n_folds(self) -> int:
        return self.values.shape[0]

    @property
    def n_grid(self) -> int:
        return self.values.shape[1]

    def metric_index(self, metric: str) -> int:
        try:
            return self.METRICS.index(metric)
        except ValueError:
            raise KeyError(f"Unknown metric: {metric}") from None

    def set_fold(self, fold: int, inner_cv: np.ndarray, held_out: np.ndarray) -> None:
        self.values[fold, :, 0] = inner_cv
        self.values[fold, :, 1] = held_out

    def metric(self, metric: str) -> np.ndarray:
        """(n_folds, n_grid) slice for one metric."""
        return self.values[:, :, self.metric_index(metric)]

    def to_frame(self) -> pd.DataFrame:
        """Long-format table with one row per (fold, grid point)."""
        rows = []
        for fold in range(self.n_folds):
            for g, label in enumerate(self.grid_labels):
                rows.append({
                    'fold': fold,
                    'grid_index': g,
                    'grid_point': label,
                    'inner_cv': self.values[fold, g, 0],
                    'held_out': self.values[fold, g, 1],
                })
        return pd.DataFrame(rows)


@dataclass
class EvaluationResult:
    """Outcome of one model on one dataset across all of its folds."""
    dataset: str
    model: str
    grid_labels: Tuple[str, ...]
    accuracies: AccuracyTensor
    selected: np.ndarray
    inconclusive: bool = False
    notes: List[str] = field(default_factory=list)

    @classmethod
    def allocate(cls, dataset: str, model: str, grid_labels: Sequence[str], n_folds: int) -> 'EvaluationResult':
        return cls(
            dataset=dataset,
            model=model,
            grid_labels=tuple(grid_labels),
            accuracies=AccuracyTensor(n_folds, grid_labels),
            selected=np.full(n_folds, -1, dtype=int),
        )

    def record_fold(self, fold: int, inner_cv: np.ndarray, held_out: np.ndarray) -> int:
        """Store one fold's accuracies and select its grid point from the inner-CV scores."""
        self.accuracies.set_fold(fold, inner_cv, held_out)
        self.selected[fold] = select_best_index(inner_cv)
        return int(self.selected[fold])

    @property
    def selected_accuracy(self) -> np.ndarray:
        """Held-out accuracy of the selected grid point, per fold."""
        held_out = self.accuracies.metric("held_out")
        out = np.full(len(self.selected), np.nan)
        done = self.selected >= 0
        out[done] = held_out[np.flatnonzero(done), self.selected[done]]
        return out

    @property
    def mean_accuracy(self) -> float:
        """Mean selected held-out accuracy over all folds."""
        values = self.selected_accuracy
        return float(np.nanmean(values)) if np.isfinite(values).any() else float('nan')

    @property
    def selected_labels(self) -> List[str]:
        return [self.grid_labels[i] if i >= 0 else "" for i in self.selected]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'dataset': self.dataset,
            'model': self.model,
            'grid': list(self.grid_labels),
            'selected_index': self.selected.tolist(),
            'selected_grid_point': self.selected_labels,
            'selected_accuracy': [None if np.isnan(v) else float(v) for v in self.selected_accuracy],
            'mean_accuracy': None if np.isnan(self.mean_accuracy) else self.mean_accuracy,
            'inconclusive': self.inconclusive,
            'notes': list(self.notes),
        }


@dataclass
class UnitFailure:
    """A unit of work that raised instead of producing results."""
    dataset: str
    unit: str
    error_type: str
    message: str


@dataclass
class RunReport:
    """Aggregated results of a run; incomplete whenever any unit failed."""
    results: Dict[Tuple[str, str], EvaluationResult] = field(default_factory=dict)
    failures: List[UnitFailure] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failures

    @property
    def status(self) -> str:
        return "complete" if self.complete else "incomplete"

    def get(self, dataset: str, model: str) -> EvaluationResult:
        return self.results[(dataset, model)]

    def failed_datasets(self) -> List[str]:
        return sorted({f.dataset for f in self.failures})

    def summary_frame(self) -> pd.DataFrame:
        """One row per (dataset, model), plus one row per failed unit."""
        rows = []
        for (dataset, model), result in self.results.items():
            values = result.selected_accuracy
            rows.append({
                'dataset': dataset,
                'model': model,
                'mean_accuracy': result.mean_accuracy,
                'std_accuracy': float(np.nanstd(values)) if np.isfinite(values).any() else np.nan,
                'n_folds': int(np.isfinite(values).sum()),
                'inconclusive': result.inconclusive,
                'failed': False,
            })
        for failure in self.failures:
            rows.append({
                'dataset': failure.dataset,
                'model': failure.unit,
                'mean_accuracy': np.nan,
                'std_accuracy': np.nan,
                'n_folds': 0,
                'inconclusive': True,
                'failed': True,
            })
        return pd.DataFrame(rows)
