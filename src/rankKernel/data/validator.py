"""
Data validation utilities for rankKernel.

Datasets are checked before any pair scoring or kernel computation.
"""

from typing import Optional
import numpy as np

from .dataset import Dataset
from ..core.base import EvaluationMode
from ..core.exceptions import DataMismatchError
from ..utils.logger import get_logger


class DataValidator:
    """Data validator for binary expression datasets."""

    def __init__(self):
        self.logger = get_logger("DataValidator")

    def validate_dataset(self, dataset: Dataset, min_class_count: int = 2) -> None:
        """
        Validate a dataset against its declared evaluation mode.

        Args:
            dataset: Dataset to check
            min_class_count: Minimum number of training samples per class

        Raises:
            DataMismatchError: If partitions, shapes or labels are inconsistent
        """
        self.logger.info(f"Validating dataset '{dataset.name}' ({dataset.mode.value} mode)")

        self._validate_mode(dataset)
        self._validate_feature_matrix(dataset.X, "training")
        self._validate_labels(dataset.y, "training", min_class_count)
        self._validate_data_consistency(dataset.X, dataset.y, "training")

        if dataset.has_test_partition:
            self._validate_feature_matrix(dataset.X_test, "test")
            self._validate_data_consistency(dataset.X_test, dataset.y_test, "test")
            if dataset.X_test.shape[1] != dataset.X.shape[1]:
                raise DataMismatchError(
                    f"Test partition has {dataset.X_test.shape[1]} features, "
                    f"training partition has {dataset.X.shape[1]}"
                )
            unknown = np.setdiff1d(np.unique(dataset.y_test), np.unique(dataset.y))
            if unknown.size:
                raise DataMismatchError(f"Test labels not present in training labels: {unknown.tolist()}")

        self.logger.info("Data validation passed")

    def _validate_mode(self, dataset: Dataset) -> None:
        if dataset.mode == EvaluationMode.HELD_OUT and not dataset.has_test_partition:
            raise DataMismatchError(
                f"Dataset '{dataset.name}' is declared held-out mode but has no (or an empty) test partition"
            )
        if dataset.mode == EvaluationMode.NESTED and (dataset.X_test is not None or dataset.y_test is not None):
            raise DataMismatchError(
                f"Dataset '{dataset.name}' is declared nested mode but carries a test partition"
            )

    def _validate_feature_matrix(self, X: np.ndarray, part: str) -> None:
        if X.ndim != 2:
            raise DataMismatchError(f"{part} feature matrix must be 2-D, got shape {X.shape}")
        if X.shape[0] == 0:
            raise DataMismatchError(f"No samples in {part} feature matrix")
        if X.shape[1] == 0:
            raise DataMismatchError(f"No features in {part} feature matrix")
        if not np.isfinite(X).all():
            raise DataMismatchError(f"{part} feature matrix contains NaN or infinite values")

    def _validate_labels(self, y: np.ndarray, part: str, min_class_count: int) -> None:
        if y.ndim != 1 or len(y) == 0:
            raise DataMismatchError(f"{part} labels must be a non-empty 1-D array")

        unique_labels, counts = np.unique(y, return_counts=True)
        if len(unique_labels) != 2:
            raise DataMismatchError(f"Expected 2 classes, found {len(unique_labels)}: {unique_labels}")
        if counts.min() < min_class_count:
            raise DataMismatchError(
                f"Each class needs at least {min_class_count} {part} samples, got {dict(zip(unique_labels.tolist(), counts.tolist()))}"
            )

    def _validate_data_consistency(self, X: np.ndarray, y: Optional[np.ndarray], part: str) -> None:
        if y is None or len(X) != len(y):
            raise DataMismatchError(
                f"{part} feature matrix length ({len(X)}) doesn't match labels length ({0 if y is None else len(y)})"
            )
