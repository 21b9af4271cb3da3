"""
Base types and configuration for rankKernel.

This module defines the closed set of kernel families and model kinds the
CV engine understands, together with the experiment configuration.
"""

from typing import Any, ClassVar, Dict, Optional, Tuple, Union
from dataclasses import dataclass, asdict
from enum import Enum
import numbers

from .exceptions import ConfigError


class EvaluationMode(Enum):
    """How a dataset is evaluated."""
    HELD_OUT = "held_out"  # independent test partition
    NESTED = "nested"      # repeated outer CV with inner model selection


class KernelType(Enum):
    """Enumeration of supported kernel families."""
    LINEAR = "linear"
    POLYNOMIAL = "polynomial"
    RBF = "rbf"
    KENDALL = "kendall"
    STABILIZED_KENDALL = "stabilized_kendall"


class ModelKind(Enum):
    """Enumeration of supported model kinds."""
    APMV = "apmv"
    TSP = "tsp"
    KTSP = "ktsp"
    KERNEL_SVM = "kernel_svm"
    KERNEL_SVM_TOPK = "kernel_svm_topk"


@dataclass(frozen=True)
class KernelSpec:
    """
    Kernel family plus the parameters that change the matrix.

    ``window`` and ``n_draws`` only apply to the stabilized Kendall kernel;
    ``n_draws=None`` asks for the closed-form expectation over the noise.
    """
    kind: KernelType
    window: Optional[float] = None
    n_draws: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.kind, KernelType):
            raise ConfigError(f"Unknown kernel type: {self.kind!r}")
        if self.kind == KernelType.STABILIZED_KENDALL:
            if self.window is None or not self.window > 0:
                raise ConfigError("Stabilized Kendall kernel needs a window size > 0",
                                  {"window": self.window})
            if self.n_draws is not None and (not isinstance(self.n_draws, numbers.Integral) or self.n_draws < 1):
                raise ConfigError("Number of Monte-Carlo draws must be a positive integer",
                                  {"n_draws": self.n_draws})
        elif self.window is not None or self.n_draws is not None:
            raise ConfigError(f"{self.kind.value} kernel takes no noise parameters",
                              {"window": self.window, "n_draws": self.n_draws})

    @property
    def label(self) -> str:
        if self.kind != KernelType.STABILIZED_KENDALL:
            return self.kind.value
        draws = "exact" if self.n_draws is None else f"D{self.n_draws}"
        return f"{self.kind.value}(a={self.window:g},{draws})"

    @classmethod
    def from_name(cls, name: str, window: Optional[float] = None,
                  n_draws: Optional[int] = None) -> 'KernelSpec':
        try:
            kind = KernelType(name.lower())
        except ValueError:
            raise ConfigError(f"Unknown kernel type: {name}") from None
        return cls(kind, window, n_draws)


# Model battery. Each variant carries exactly the parameters it needs; the
# grids (k, C) come from the experiment configuration.

@dataclass(frozen=True)
class APMVSpec:
    """All-pairs majority vote."""
    kind: ClassVar[ModelKind] = ModelKind.APMV

    @property
    def name(self) -> str:
        return "APMV"


@dataclass(frozen=True)
class TSPSpec:
    """Single top-scoring pair."""
    kind: ClassVar[ModelKind] = ModelKind.TSP

    @property
    def name(self) -> str:
        return "TSP"


@dataclass(frozen=True)
class KTSPSpec:
    """Majority vote over the top-k pairs, k selected from the k grid."""
    kind: ClassVar[ModelKind] = ModelKind.KTSP

    @property
    def name(self) -> str:
        return "kTSP"


@dataclass(frozen=True)
class KernelSVMSpec:
    """Kernel SVM on all features, C selected from the C grid."""
    kernel: KernelSpec
    kind: ClassVar[ModelKind] = ModelKind.KERNEL_SVM

    @property
    def name(self) -> str:
        return f"SVM[{self.kernel.label}]"


@dataclass(frozen=True)
class KernelSVMTopKSpec:
    """Kernel SVM restricted to the features of the top-k pairs, (k, C) selected jointly."""
    kernel: KernelSpec
    kind: ClassVar[ModelKind] = ModelKind.KERNEL_SVM_TOPK

    @property
    def name(self) -> str:
        return f"SVM[{self.kernel.label}]-topk"


ModelSpec = Union[APMVSpec, TSPSpec, KTSPSpec, KernelSVMSpec, KernelSVMTopKSpec]


@dataclass(frozen=True)
class GridPoint:
    """One hyperparameter setting; unused parameters are None."""
    k: Optional[int] = None
    C: Optional[float] = None

    @property
    def label(self) -> str:
        parts = []
        if self.k is not None:
            parts.append(f"k={self.k}")
        if self.C is not None:
            parts.append(f"C={self.C:g}")
        return ",".join(parts) if parts else "default"


@dataclass
class ExperimentConfig:
    """Complete configuration for an evaluation run."""
    c_grid: Tuple[float, ...] = (0.01, 0.1, 1.0, 10.0, 100.0)
    k_grid: Tuple[int, ...] = (1, 3, 5, 7, 9)
    inner_folds: int = 5
    outer_folds: int = 5
    outer_repeats: int = 10
    seed: int = 42
    noise_window_grid: Tuple[float, ...] = (0.5, 1.0, 2.0)
    mc_draw_counts: Tuple[int, ...] = (1, 5, 10, 50, 100)
    n_jobs: int = 1
    backend: str = "loky"
    disjoint_pairs: bool = False
    kfd_regularization: float = 1e-3

    def __post_init__(self):
        self.c_grid = tuple(float(c) for c in self.c_grid)
        self.k_grid = tuple(self.k_grid)
        self.noise_window_grid = tuple(float(a) for a in self.noise_window_grid)
        self.mc_draw_counts = tuple(self.mc_draw_counts)

    def validate(self) -> 'ExperimentConfig':
        """Check every option; raise ConfigError naming the first offending one."""
        if not self.c_grid:
            raise ConfigError("C grid must not be empty", {"c_grid": self.c_grid})
        if any(not c > 0 for c in self.c_grid):
            raise ConfigError("C values must be positive", {"c_grid": self.c_grid})
        if not self.k_grid:
            raise ConfigError("k grid must not be empty", {"k_grid": self.k_grid})
        if any(not isinstance(k, numbers.Integral) or k < 1 for k in self.k_grid):
            raise ConfigError("k values must be positive integers", {"k_grid": self.k_grid})
        # grid order is the tie-break order: smallest k, then smallest C
        for key in ("c_grid", "k_grid"):
            grid = getattr(self, key)
            if any(a >= b for a, b in zip(grid, grid[1:])):
                raise ConfigError(f"{key} must be strictly increasing", {key: grid})
        for key in ("inner_folds", "outer_folds"):
            value = getattr(self, key)
            if not isinstance(value, numbers.Integral) or value < 2:
                raise ConfigError(f"{key} must be an integer >= 2", {key: value})
        if not isinstance(self.outer_repeats, numbers.Integral) or self.outer_repeats < 1:
            raise ConfigError("outer_repeats must be an integer >= 1", {"outer_repeats": self.outer_repeats})
        if any(not a > 0 for a in self.noise_window_grid):
            raise ConfigError("Noise window sizes must be positive",
                              {"noise_window_grid": self.noise_window_grid})
        if any(not isinstance(d, numbers.Integral) or d < 1 for d in self.mc_draw_counts):
            raise ConfigError("Draw counts must be positive integers",
                              {"mc_draw_counts": self.mc_draw_counts})
        if list(self.mc_draw_counts) != sorted(self.mc_draw_counts):
            raise ConfigError("Draw counts must be increasing", {"mc_draw_counts": self.mc_draw_counts})
        if self.n_jobs == 0:
            raise ConfigError("n_jobs must be non-zero", {"n_jobs": self.n_jobs})
        if self.kfd_regularization < 0:
            raise ConfigError("KFD regularization must be >= 0",
                              {"kfd_regularization": self.kfd_regularization})
        return self

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, tuple):
                data[key] = list(value)
        return data
