"""
交叉验证分割器 for rankKernel.

外层分割：重复分层K折（每次重复使用独立派生的随机种子）
内层分割：只在当前外层训练集内部做分层K折，索引映射回全局样本编号
"""

from typing import List, Sequence
from dataclasses import dataclass
import numpy as np
from sklearn.model_selection import StratifiedKFold

from .exceptions import ConfigError
from ..utils.helpers import derive_seed

# spawn-key tag separating inner-split seeds from outer-split seeds
INNER_SEED_TAG = 1


@dataclass(frozen=True, eq=False)
class FoldSplit:
    """训练/验证索引（全局样本编号）。"""
    train: np.ndarray
    test: np.ndarray
    repeat: int = 0
    fold: int = 0

    @property
    def label(self) -> str:
        return f"r{self.repeat}f{self.fold}"


class FoldSplitter:
    """
    分层K折分割器。

    Args:
        seed: 运行级随机种子
        dataset_index: 数据集编号（用于派生子种子）
    """

    def __init__(self, seed: int, dataset_index: int = 0):
        self.seed = seed
        self.dataset_index = dataset_index

    @staticmethod
    def _check_folds(y: np.ndarray, n_folds: int, where: str) -> None:
        _, counts = np.unique(y, return_counts=True)
        if len(counts) < 2:
            raise ConfigError(f"{where} split needs both classes", {"n_samples": len(y)})
        if counts.min() < n_folds:
            raise ConfigError(
                f"{where} split: {n_folds} folds requested but the smallest class has {counts.min()} samples",
                {"n_folds": n_folds, "class_counts": counts.tolist()}
            )

    def outer_splits(self, y: np.ndarray, n_folds: int, n_repeats: int) -> List[FoldSplit]:
        """重复分层K折外层分割，共 n_repeats * n_folds 个。"""
        y = np.asarray(y)
        self._check_folds(y, n_folds, "Outer")
        indices = np.arange(len(y))

        splits = []
        for repeat in range(n_repeats):
            cv = StratifiedKFold(
                n_splits=n_folds,
                shuffle=True,
                random_state=derive_seed(self.seed, self.dataset_index, repeat)
            )
            for fold, (train_idx, test_idx) in enumerate(cv.split(indices, y)):
                splits.append(FoldSplit(indices[train_idx], indices[test_idx], repeat, fold))
        return splits

    def inner_splits(self, y: np.ndarray, outer: FoldSplit, n_folds: int) -> List[FoldSplit]:
        """
        内层分层K折，只使用外层训练样本。

        Args:
            y: 全部样本标签（全局编号）
            outer: 当前外层分割
            n_folds: 内层折数

        Returns:
            内层分割列表，索引均为外层训练索引的子集
        """
        outer_train = np.asarray(outer.train)
        y_outer = np.asarray(y)[outer_train]
        self._check_folds(y_outer, n_folds, "Inner")

        cv = StratifiedKFold(
            n_splits=n_folds,
            shuffle=True,
            random_state=derive_seed(self.seed, self.dataset_index, outer.repeat, outer.fold, INNER_SEED_TAG)
        )
        # 局部索引 -> 全局索引
        return [
            FoldSplit(outer_train[tr], outer_train[va], outer.repeat, fold)
            for fold, (tr, va) in enumerate(cv.split(outer_train, y_outer))
        ]

    @staticmethod
    def held_out_split(train_indices: Sequence[int], test_indices: Sequence[int]) -> FoldSplit:
        """固定训练/测试划分（held-out模式）。"""
        return FoldSplit(np.asarray(train_indices), np.asarray(test_indices), 0, 0)
