"""
Utility modules for rankKernel.

This module contains logging, configuration, and helper functions.
"""

from .logger import get_logger, setup_logging
from .helpers import derive_seed, ensure_directory, format_time

__all__ = [
    "get_logger",
    "setup_logging",
    "derive_seed",
    "ensure_directory",
    "format_time",
]
