"""
Model battery configuration for rankKernel.

Model names accepted on the command line map to model specifications; the
default battery compares the rank-based classifiers with kernel SVMs on
every kernel family.
"""

from typing import Dict, List, Optional

from ..core.base import (
    APMVSpec, KernelSpec, KernelSVMSpec, KernelSVMTopKSpec, KernelType, KTSPSpec, ModelSpec, TSPSpec
)
from ..core.exceptions import ConfigError

# window used when a stabilized kernel is requested without one
DEFAULT_NOISE_WINDOW = 1.0

MODEL_CONFIGS: Dict[str, Dict[str, object]] = {
    "apmv": {"kind": "apmv"},
    "tsp": {"kind": "tsp"},
    "ktsp": {"kind": "ktsp"},
    "svm_linear": {"kind": "kernel_svm", "kernel": "linear"},
    "svm_poly": {"kind": "kernel_svm", "kernel": "polynomial"},
    "svm_rbf": {"kind": "kernel_svm", "kernel": "rbf"},
    "svm_kendall": {"kind": "kernel_svm", "kernel": "kendall"},
    "svm_stabilized_kendall": {"kind": "kernel_svm", "kernel": "stabilized_kendall"},
    "svm_linear_topk": {"kind": "kernel_svm_topk", "kernel": "linear"},
    "svm_poly_topk": {"kind": "kernel_svm_topk", "kernel": "polynomial"},
    "svm_rbf_topk": {"kind": "kernel_svm_topk", "kernel": "rbf"},
    "svm_kendall_topk": {"kind": "kernel_svm_topk", "kernel": "kendall"},
}

DEFAULT_MODELS: List[str] = [
    "apmv", "tsp", "ktsp",
    "svm_linear", "svm_poly", "svm_rbf", "svm_kendall", "svm_stabilized_kendall",
    "svm_kendall_topk",
]


def create_model_spec(name: str, window: Optional[float] = None,
                      n_draws: Optional[int] = None) -> ModelSpec:
    """Build the model specification registered under ``name``."""
    try:
        entry = MODEL_CONFIGS[name.lower()]
    except KeyError:
        raise ConfigError(f"Unknown model: {name}. Supported models: {', '.join(MODEL_CONFIGS)}") from None

    kind = entry["kind"]
    if kind == "apmv":
        return APMVSpec()
    elif kind == "tsp":
        return TSPSpec()
    elif kind == "ktsp":
        return KTSPSpec()

    kernel_type = KernelType(entry["kernel"])
    if kernel_type == KernelType.STABILIZED_KENDALL:
        kernel = KernelSpec(kernel_type, DEFAULT_NOISE_WINDOW if window is None else window, n_draws)
    else:
        kernel = KernelSpec(kernel_type)

    if kind == "kernel_svm":
        return KernelSVMSpec(kernel)
    elif kind == "kernel_svm_topk":
        return KernelSVMTopKSpec(kernel)
    raise ConfigError(f"Unknown model kind: {kind}")


def create_model_battery(names: Optional[List[str]] = None, window: Optional[float] = None,
                         n_draws: Optional[int] = None) -> List[ModelSpec]:
    """Model specifications for a list of names (the default battery when None)."""
    return [create_model_spec(name, window, n_draws) for name in (names or DEFAULT_MODELS)]
