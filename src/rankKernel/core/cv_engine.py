"""
交叉验证引擎 for rankKernel.

这个模块实现了两种评估模式：
- held-out模式：训练集内部K折CV得到每个网格点的内层准确率，
  再用完整训练集训练、在独立测试集上得到对应网格点的准确率
- 嵌套模式：R次重复的分层K折外层CV；每个外层折内部做K折内层CV选参，
  最终准确率为 R*K 个外层折的平均

每个独立工作单元（held-out数据集 / 嵌套模式的一个外层折）携带自己的派生种子，
结果与调度顺序和worker数量无关。
"""

from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field
import time
import warnings
import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from .base import (
    APMVSpec, EvaluationMode, ExperimentConfig, GridPoint, KernelSpec, KernelSVMSpec,
    KernelSVMTopKSpec, KernelType, KTSPSpec, ModelSpec, TSPSpec
)
from .exceptions import ConfigError, DegenerateKernelWarning, RankKernelError
from .fold_splitter import FoldSplit, FoldSplitter
from .kernel_approximator import KernelApproximator
from .kernel_builder import KernelMatrixBuilder
from .pair_scorer import PairComparisons, PairScorer, PairScores
from ..data.dataset import Dataset
from ..data.validator import DataValidator
from ..evaluation.metrics import accuracy
from ..evaluation.results import EvaluationResult, RunReport, UnitFailure
from ..models.kfd import KernelFisherDiscriminant
from ..models.svm import train_predict as svm_train_predict
from ..models.tsp import majority_votes
from ..utils.helpers import derive_seed, format_time
from ..utils.logger import ensure_logging, get_logger, logging_state

TrainPredict = Callable[[np.ndarray, np.ndarray, np.ndarray, float], np.ndarray]

# errors captured at the unit boundary by ``CVEngine.run``
UNIT_ERRORS = (RankKernelError, ValueError, np.linalg.LinAlgError)

KFD_SUFFIX = "-KFD"


def uses_pairs(model: ModelSpec) -> bool:
    return isinstance(model, (APMVSpec, TSPSpec, KTSPSpec, KernelSVMTopKSpec))


@dataclass
class _ModelOutcome:
    """一个模型在一个外层折上的结果（含KFD基线）。"""
    inner_cv: Dict[str, np.ndarray]
    held_out: Dict[str, np.ndarray]
    inconclusive: bool = False


@dataclass
class _Unit:
    """独立工作单元：一个数据集上的一个外层分割。"""
    dataset_index: int
    dataset_name: str
    fold_index: int
    split: FoldSplit
    X: np.ndarray
    y: np.ndarray
    models: Tuple[ModelSpec, ...]
    comparisons: Optional[PairComparisons]
    shared_kernels: Dict[Any, Tuple[np.ndarray, bool]]


@dataclass
class _UnitOutput:
    dataset_index: int
    dataset_name: str
    fold_index: int
    outcomes: Dict[ModelSpec, _ModelOutcome] = field(default_factory=dict)
    failures: List[UnitFailure] = field(default_factory=list)


class _SplitContext:
    """
    单元内缓存：按训练索引缓存配对打分，按(核, 特征子集, 训练索引)缓存核矩阵。

    同一核矩阵在整个C网格上复用，不会按C重新计算。
    """

    def __init__(self, X, y, builder, scorer, comparisons, shared_kernels):
        self.X = X
        self.y = y
        self.builder = builder
        self.scorer = scorer
        self.comparisons = comparisons
        self.kernels = dict(shared_kernels)
        self.scores = {}

    def pair_scores(self, train: np.ndarray) -> PairScores:
        key = train.tobytes()
        if key not in self.scores:
            if self.comparisons is None:
                self.comparisons = PairComparisons(self.X)
            self.scores[key] = self.scorer.score(None, self.y, train, self.comparisons)
        return self.scores[key]

    def kernel(self, spec: KernelSpec, features: Optional[np.ndarray],
               train: np.ndarray) -> Tuple[np.ndarray, bool]:
        feature_key = None if features is None else tuple(int(f) for f in features)
        # Gaussian bandwidth depends on the active training rows
        train_key = train.tobytes() if spec.kind == KernelType.RBF else None
        key = (spec, feature_key, train_key)
        if key not in self.kernels:
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always", DegenerateKernelWarning)
                K = self.builder.build(self.X, spec, features, train)
            degenerate = any(issubclass(w.category, DegenerateKernelWarning) for w in caught)
            self.kernels[key] = (K, degenerate)
        return self.kernels[key]


class CVEngine:
    """
    交叉验证引擎。

    Args:
        config: 实验配置
        train_predict: 核SVM训练/预测服务，签名为
            ``train_predict(K_train, y_train, K_test_rows, C) -> predicted labels``
    """

    def __init__(self, config: Optional[ExperimentConfig] = None,
                 train_predict: TrainPredict = svm_train_predict):
        self.config = (config or ExperimentConfig()).validate()
        self.train_predict = train_predict
        self.logger = get_logger("CVEngine")
        self.validator = DataValidator()

    # ------------------------------------------------------------------
    # grids
    # ------------------------------------------------------------------

    def grid_points(self, model: ModelSpec) -> Dict[str, List[GridPoint]]:
        """每个输出模型（含KFD基线）的有序超参数网格。"""
        cfg = self.config
        if isinstance(model, APMVSpec):
            return {model.name: [GridPoint()]}
        elif isinstance(model, TSPSpec):
            return {model.name: [GridPoint(k=1)]}
        elif isinstance(model, KTSPSpec):
            return {model.name: [GridPoint(k=k) for k in cfg.k_grid]}
        elif isinstance(model, KernelSVMSpec):
            return {
                model.name: [GridPoint(C=c) for c in cfg.c_grid],
                model.name + KFD_SUFFIX: [GridPoint()],
            }
        elif isinstance(model, KernelSVMTopKSpec):
            # k-major order: first maximum = smallest k, then smallest C
            return {
                model.name: [GridPoint(k=k, C=c) for k in cfg.k_grid for c in cfg.c_grid],
                model.name + KFD_SUFFIX: [GridPoint(k=k) for k in cfg.k_grid],
            }
        raise ConfigError(f"Unknown model specification: {model!r}")

    def _check_models(self, models: Sequence[ModelSpec]) -> Tuple[ModelSpec, ...]:
        models = tuple(models)
        if not models:
            raise ConfigError("Model battery is empty")
        names = [name for model in models for name in self.grid_points(model)]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ConfigError("Model battery contains duplicate models", {"models": duplicates})
        return models

    # ------------------------------------------------------------------
    # scoring one split
    # ------------------------------------------------------------------

    def _score_split(self, ctx: _SplitContext, model: ModelSpec,
                     train: np.ndarray, test: np.ndarray) -> Tuple[Dict[str, np.ndarray], bool]:
        """
        在一个训练/验证划分上评估模型的所有网格点。

        Returns:
            Tuple of ({输出模型名: 每个网格点的准确率}, 是否出现退化核)
        """
        y_train, y_test = ctx.y[train], ctx.y[test]
        cfg = self.config

        if isinstance(model, (APMVSpec, TSPSpec, KTSPSpec)):
            scores = ctx.pair_scores(train)
            if isinstance(model, APMVSpec):
                # every pair votes, disjoint selection does not apply
                ks = [scores.n_pairs]
                cols = np.arange(scores.n_pairs)
            else:
                ks = [1] if isinstance(model, TSPSpec) else list(cfg.k_grid)
                cols = scores.top_indices(max(ks))
            less = ctx.comparisons.subset(test)[:, cols]
            predictions = majority_votes(less, scores.directions[cols], scores.classes, ks)
            return {model.name: np.array([accuracy(y_test, p) for p in predictions])}, False

        elif isinstance(model, KernelSVMSpec):
            K, degenerate = ctx.kernel(model.kernel, None, train)
            svm_acc, kfd_acc = self._kernel_accuracies(K, y_train, y_test, train, test)
            return {model.name: svm_acc, model.name + KFD_SUFFIX: np.array([kfd_acc])}, degenerate

        elif isinstance(model, KernelSVMTopKSpec):
            scores = ctx.pair_scores(train)
            svm_acc, kfd_acc, degenerate = [], [], False
            for k in cfg.k_grid:
                K, flagged = ctx.kernel(model.kernel, scores.features(k), train)
                degenerate = degenerate or flagged
                acc, kfd = self._kernel_accuracies(K, y_train, y_test, train, test)
                svm_acc.append(acc)
                kfd_acc.append(kfd)
            return {
                model.name: np.concatenate(svm_acc),
                model.name + KFD_SUFFIX: np.array(kfd_acc),
            }, degenerate

        raise ConfigError(f"Unknown model specification: {model!r}")

    def _kernel_accuracies(self, K: np.ndarray, y_train: np.ndarray, y_test: np.ndarray,
                           train: np.ndarray, test: np.ndarray) -> Tuple[np.ndarray, float]:
        """一个核矩阵上：所有C的SVM准确率 + KFD基线准确率。"""
        K_train = K[np.ix_(train, train)]
        K_test = K[np.ix_(test, train)]
        svm_acc = np.array([
            accuracy(y_test, self.train_predict(K_train, y_train, K_test, C))
            for C in self.config.c_grid
        ])
        kfd = KernelFisherDiscriminant(self.config.kfd_regularization).fit(K_train, y_train)
        return svm_acc, accuracy(y_test, kfd.predict(K_test))

    # ------------------------------------------------------------------
    # units
    # ------------------------------------------------------------------

    def _kernel_seed(self, dataset_index: int) -> int:
        return derive_seed(self.config.seed, dataset_index)

    def _run_unit(self, unit: _Unit, capture: bool, log_state: Optional[dict] = None) -> _UnitOutput:
        """执行一个工作单元：对每个模型做内层CV选参 + 外层评估。"""
        if log_state is not None:
            # 进程池worker需要重新挂载运行日志
            ensure_logging(log_state)
        start = time.time()
        output = _UnitOutput(unit.dataset_index, unit.dataset_name, unit.fold_index)
        splitter = FoldSplitter(self.config.seed, unit.dataset_index)
        ctx = _SplitContext(
            unit.X, unit.y,
            KernelMatrixBuilder(random_state=self._kernel_seed(unit.dataset_index)),
            PairScorer(disjoint=self.config.disjoint_pairs),
            unit.comparisons,
            unit.shared_kernels,
        )

        self.logger.info(f"[{unit.dataset_name}] unit {unit.split.label}: "
                         f"{len(unit.split.train)} train / {len(unit.split.test)} held-out samples")

        for model in unit.models:
            try:
                inner_splits = splitter.inner_splits(unit.y, unit.split, self.config.inner_folds)
                inner_sum, degenerate = {}, False
                for inner in inner_splits:
                    accs, flagged = self._score_split(ctx, model, inner.train, inner.test)
                    degenerate = degenerate or flagged
                    for name, acc in accs.items():
                        inner_sum[name] = inner_sum.get(name, 0.0) + acc
                inner_cv = {name: total / len(inner_splits) for name, total in inner_sum.items()}

                held_out, flagged = self._score_split(ctx, model, unit.split.train, unit.split.test)
                degenerate = degenerate or flagged
                if degenerate:
                    self.logger.warning(f"[{unit.dataset_name}] {model.name} ({unit.split.label}): "
                                        f"degenerate kernel, accuracy flagged as inconclusive")
                output.outcomes[model] = _ModelOutcome(inner_cv, held_out, degenerate)
                self.logger.debug(f"[{unit.dataset_name}] {model.name} ({unit.split.label}): "
                                  f"inner={np.round(inner_cv[model.name], 3).tolist()}")
            except UNIT_ERRORS as e:
                if not capture:
                    raise
                self.logger.error(f"[{unit.dataset_name}] {model.name} ({unit.split.label}) failed: {e}")
                output.failures.append(UnitFailure(
                    dataset=unit.dataset_name,
                    unit=f"{model.name}/{unit.split.label}",
                    error_type=type(e).__name__,
                    message=str(e),
                ))

        self.logger.info(f"[{unit.dataset_name}] unit {unit.split.label} done in {format_time(time.time() - start)}")
        return output

    def _plan_units(self, dataset: Dataset, models: Tuple[ModelSpec, ...], dataset_index: int,
                    kernel_overrides: Optional[Dict[KernelSpec, np.ndarray]] = None) -> List[_Unit]:
        """校验数据集，预计算数据集级共享结构，生成工作单元。"""
        # 必须在任何核计算之前完成校验
        self.validator.validate_dataset(dataset)

        X_all, y_all, train_idx, test_idx = dataset.stacked()
        splitter = FoldSplitter(self.config.seed, dataset_index)
        if dataset.mode == EvaluationMode.HELD_OUT:
            splits = [splitter.held_out_split(train_idx, test_idx)]
        else:
            splits = splitter.outer_splits(y_all, self.config.outer_folds, self.config.outer_repeats)

        # 配对比较表每个数据集只算一次
        comparisons = PairComparisons(X_all) if any(uses_pairs(m) for m in models) else None

        shared = self._shared_kernels(X_all, models, dataset_index, kernel_overrides)

        return [
            _Unit(dataset_index, dataset.name, fold_index, split, X_all, y_all,
                  models, comparisons, shared)
            for fold_index, split in enumerate(splits)
        ]

    def _shared_kernels(self, X: np.ndarray, models: Tuple[ModelSpec, ...], dataset_index: int,
                        kernel_overrides: Optional[Dict[KernelSpec, np.ndarray]]) -> Dict[Any, Tuple[np.ndarray, bool]]:
        """全特征、与划分无关的核矩阵：每个数据集每种核只构建一次。"""
        shared = {}
        for spec, K in (kernel_overrides or {}).items():
            shared[(spec, None, None)] = (np.asarray(K, dtype=float), False)

        builder = KernelMatrixBuilder(random_state=self._kernel_seed(dataset_index))
        for model in models:
            if not isinstance(model, KernelSVMSpec) or model.kernel.kind == KernelType.RBF:
                continue
            key = (model.kernel, None, None)
            if key in shared:
                continue
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always", DegenerateKernelWarning)
                K = builder.build(X, model.kernel)
            shared[key] = (K, any(issubclass(w.category, DegenerateKernelWarning) for w in caught))
            self.logger.info(f"Built shared {model.kernel.label} kernel ({K.shape[0]} samples)")
        return shared

    def _assemble(self, dataset_name: str, models: Tuple[ModelSpec, ...], n_folds: int,
                  outputs: List[_UnitOutput]) -> Dict[str, EvaluationResult]:
        """把各单元结果写入按(折, 网格点, 指标)索引的结果数组。"""
        results = {}
        for model in models:
            for name, grid in self.grid_points(model).items():
                results[name] = EvaluationResult.allocate(
                    dataset_name, name, [g.label for g in grid], n_folds
                )

        for output in outputs:
            for model, outcome in output.outcomes.items():
                for name in self.grid_points(model):
                    result = results[name]
                    result.record_fold(output.fold_index, outcome.inner_cv[name], outcome.held_out[name])
                    if outcome.inconclusive:
                        result.inconclusive = True
            for failure in output.failures:
                model_name = failure.unit.rsplit("/", 1)[0]
                for name in (model_name, model_name + KFD_SUFFIX):
                    if name in results:
                        results[name].notes.append(f"{failure.unit}: {failure.error_type}: {failure.message}")
        return results

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------

    def evaluate_dataset(
        self,
        dataset: Dataset,
        models: Sequence[ModelSpec],
        dataset_index: int = 0,
        kernel_overrides: Optional[Dict[KernelSpec, np.ndarray]] = None
    ) -> Dict[str, EvaluationResult]:
        """
        评估一个数据集上的全部模型（出错即抛出）。

        Args:
            dataset: 数据集
            models: 模型列表
            dataset_index: 数据集编号（用于派生种子）
            kernel_overrides: 预先计算好的全特征核矩阵，按KernelSpec索引

        Returns:
            {输出模型名: EvaluationResult}
        """
        models = self._check_models(models)
        self.logger.info(f"开始评估数据集 '{dataset.name}' ({dataset.mode.value}), 模型数量: {len(models)}")
        units = self._plan_units(dataset, models, dataset_index, kernel_overrides)
        outputs = [self._run_unit(unit, capture=False) for unit in units]
        results = self._assemble(dataset.name, models, len(units), outputs)
        for name, result in results.items():
            self.logger.info(f"[{dataset.name}] {name}: mean accuracy {result.mean_accuracy:.4f}")
        return results

    def run(self, datasets: Sequence[Dataset], models: Sequence[ModelSpec]) -> RunReport:
        """
        批量评估：所有数据集的所有工作单元交给一个有界worker池执行。

        单元失败只影响该单元；失败记录在报告中，报告状态为incomplete。
        """
        models = self._check_models(models)
        report = RunReport()
        start = time.time()

        planned = []
        names = [d.name for d in datasets]
        duplicate_names = sorted({n for n in names if names.count(n) > 1})
        if duplicate_names:
            raise ConfigError("Dataset names must be unique", {"datasets": duplicate_names})

        for dataset_index, dataset in enumerate(datasets):
            try:
                units = self._plan_units(dataset, models, dataset_index)
            except UNIT_ERRORS as e:
                self.logger.error(f"[{dataset.name}] dataset skipped: {e}")
                report.failures.append(UnitFailure(dataset.name, "dataset", type(e).__name__, str(e)))
                continue
            planned.append((dataset, units))

        all_units = [unit for _, units in planned for unit in units]
        log_state = logging_state()
        self.logger.info(f"运行 {len(all_units)} 个工作单元 (n_jobs={self.config.n_jobs}, backend={self.config.backend})")
        outputs = Parallel(n_jobs=self.config.n_jobs, backend=self.config.backend)(
            delayed(self._run_unit)(unit, True, log_state) for unit in all_units
        )

        by_dataset = {}
        for output in outputs:
            by_dataset.setdefault(output.dataset_index, []).append(output)

        for dataset_index, dataset in enumerate(datasets):
            units = next((u for d, u in planned if d is dataset), None)
            if units is None:
                continue
            dataset_outputs = by_dataset.get(dataset_index, [])
            results = self._assemble(dataset.name, models, len(units), dataset_outputs)
            for name, result in results.items():
                report.results[(dataset.name, name)] = result
            for output in dataset_outputs:
                report.failures.extend(output.failures)

        self.logger.info(f"Run {report.status}: {len(report.results)} results, "
                         f"{len(report.failures)} failures, {format_time(time.time() - start)}")
        return report

    # ------------------------------------------------------------------
    # stabilized-kernel studies
    # ------------------------------------------------------------------

    def draw_count_curve(
        self,
        dataset: Dataset,
        window: Optional[float] = None,
        draw_counts: Optional[Sequence[int]] = None,
        dataset_index: int = 0
    ) -> pd.DataFrame:
        """
        准确率随蒙特卡洛抽样次数D的变化（固定窗口a）。

        D个抽样的核矩阵增量更新，新增一次抽样只计算一个核矩阵。
        """
        window = self.config.noise_window_grid[0] if window is None else window
        draw_counts = self.config.mc_draw_counts if draw_counts is None else tuple(draw_counts)

        self.validator.validate_dataset(dataset)
        X_all = dataset.stacked()[0]
        approximator = KernelApproximator(window, self._kernel_seed(dataset_index))
        exact = approximator.exact(X_all)

        rows = []
        for n_draws, K in approximator.iter_draws(X_all, draw_counts):
            spec = KernelSpec(KernelType.STABILIZED_KENDALL, window, int(n_draws))
            rows.append(self._curve_row(dataset, spec, K, dataset_index,
                                        deviation=approximator.deviation(K, exact)))
        return pd.DataFrame(rows)

    def window_curve(
        self,
        dataset: Dataset,
        windows: Optional[Sequence[float]] = None,
        n_draws: Optional[int] = None,
        dataset_index: int = 0
    ) -> pd.DataFrame:
        """
        准确率随噪声窗口a的变化（固定抽样次数D；None表示精确期望核）。
        """
        windows = self.config.noise_window_grid if windows is None else tuple(windows)

        self.validator.validate_dataset(dataset)
        X_all = dataset.stacked()[0]
        rows = []
        for window in windows:
            approximator = KernelApproximator(window, self._kernel_seed(dataset_index))
            exact = approximator.exact(X_all)
            K = exact if n_draws is None else approximator.monte_carlo(X_all, n_draws)
            spec = KernelSpec(KernelType.STABILIZED_KENDALL, window, n_draws)
            rows.append(self._curve_row(dataset, spec, K, dataset_index,
                                        deviation=approximator.deviation(K, exact)))
        return pd.DataFrame(rows)

    def _curve_row(self, dataset: Dataset, spec: KernelSpec, K: np.ndarray,
                   dataset_index: int, deviation: float) -> Dict[str, Any]:
        model = KernelSVMSpec(spec)
        results = self.evaluate_dataset(dataset, [model], dataset_index, kernel_overrides={spec: K})
        return {
            'window': spec.window,
            'n_draws': spec.n_draws if spec.n_draws is not None else np.nan,
            'accuracy': results[model.name].mean_accuracy,
            'kfd_accuracy': results[model.name + KFD_SUFFIX].mean_accuracy,
            'deviation_from_exact': deviation,
        }
