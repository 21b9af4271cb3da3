"""
Data handling modules for rankKernel.

This module contains the dataset container, loading, and validation utilities.
"""

from .dataset import Dataset
from .loader import DataLoader
from .validator import DataValidator

__all__ = [
    "Dataset",
    "DataLoader",
    "DataValidator",
]
