"""
Error taxonomy for rankKernel.

Errors raised while scoring pairs or building kernels bubble up to the
CV engine, which records them per unit of work instead of aborting a run.
"""

from typing import Any, Dict, Optional


class RankKernelError(Exception):
    """Base class for all rankKernel errors."""


class ConfigError(RankKernelError, ValueError):
    """Invalid hyperparameter, feature subset or model configuration."""

    def __init__(self, message: str, config: Optional[Dict[str, Any]] = None):
        self.config = dict(config) if config else {}
        if self.config:
            message = f"{message} (config: {self.config})"
        super().__init__(message)


class DataMismatchError(RankKernelError, ValueError):
    """Dataset partitions or shapes do not match the declared evaluation mode."""


class DegenerateKernelWarning(UserWarning):
    """A kernel matrix was built from degenerate input and may be uninformative."""
