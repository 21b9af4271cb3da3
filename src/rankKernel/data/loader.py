"""
Data loading utilities for rankKernel.

This module reads expression tables (rows = samples, columns = genes plus
one label column) into ``Dataset`` objects.
"""

from typing import Optional, Tuple, Union
import pandas as pd
import numpy as np
from pathlib import Path

from .dataset import Dataset
from ..core.base import EvaluationMode
from ..core.exceptions import DataMismatchError
from ..utils.logger import get_logger


class DataLoader:
    """Data loader for expression datasets."""

    def __init__(self):
        self.logger = get_logger("DataLoader")

    def load_table(self, path: Union[str, Path], label_column: str) -> Tuple[pd.DataFrame, np.ndarray]:
        """
        Load one CSV table.

        Args:
            path: CSV file, first column is the sample ID
            label_column: Name of the class label column

        Returns:
            Tuple of (feature table, labels)
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Data file not found: {path}")

        table = pd.read_csv(path, index_col=0)
        self.logger.info(f"Loaded {path.name}: {table.shape}")

        if label_column not in table.columns:
            raise DataMismatchError(f"Label column '{label_column}' not found in {path}")

        y = table[label_column].to_numpy()
        features = table.drop(columns=[label_column])
        non_numeric = features.select_dtypes(exclude=[np.number]).columns.tolist()
        if non_numeric:
            self.logger.warning(f"Dropping non-numeric columns: {non_numeric}")
            features = features.drop(columns=non_numeric)
        return features, y

    def load_dataset(
        self,
        train_file: Union[str, Path],
        label_column: str = "Group",
        test_file: Optional[Union[str, Path]] = None,
        name: Optional[str] = None
    ) -> Dataset:
        """
        Load a dataset; a test file switches it to held-out mode.

        Args:
            train_file: Training (or only) CSV table
            label_column: Name of the class label column
            test_file: Optional independent test CSV table
            name: Dataset name (defaults to the training file stem)

        Returns:
            Dataset
        """
        X_train, y_train = self.load_table(train_file, label_column)
        name = name or Path(train_file).stem

        if test_file is None:
            return Dataset(name, X_train.to_numpy(dtype=float), y_train,
                           mode=EvaluationMode.NESTED, feature_names=X_train.columns.tolist())

        X_test, y_test = self.load_table(test_file, label_column)
        missing = [c for c in X_train.columns if c not in X_test.columns]
        if missing:
            raise DataMismatchError(f"Test table lacks {len(missing)} training features, e.g. {missing[:5]}")
        X_test = X_test[X_train.columns]

        return Dataset(name, X_train.to_numpy(dtype=float), y_train,
                       X_test.to_numpy(dtype=float), y_test,
                       mode=EvaluationMode.HELD_OUT, feature_names=X_train.columns.tolist())
