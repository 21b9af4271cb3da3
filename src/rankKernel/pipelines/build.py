#!/usr/bin/env python3
"""
构建流水线 for rankKernel.

1. 加载数据集（有测试文件 -> held-out模式，否则嵌套CV模式）
2. 合并配置文件与命令行参数
3. 运行CV引擎评估模型组合
4. （可选）稳定化Kendall核的收敛曲线
5. 写出准确率表与汇总
"""

import argparse
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict

import pandas as pd

from rankKernel.config import DEFAULT_CONFIG, create_model_battery
from rankKernel.core.cv_engine import CVEngine
from rankKernel.core.base import ExperimentConfig
from rankKernel.data.loader import DataLoader
from rankKernel.evaluation.reporter import ResultsWriter
from rankKernel.utils.config import ConfigManager
from rankKernel.utils.helpers import ensure_directory
from rankKernel.utils.logger import get_logger, setup_logging

# 命令行参数 -> 配置字段
ARG_TO_CONFIG = {
    'c_grid': 'c_grid',
    'k_grid': 'k_grid',
    'outer_cv_folds': 'outer_folds',
    'inner_cv_folds': 'inner_folds',
    'outer_cv_repeats': 'outer_repeats',
    'seed': 'seed',
    'disjoint_pairs': 'disjoint_pairs',
    'cpu': 'n_jobs',
}


def handle_build(args: argparse.Namespace) -> None:
    """处理build命令：准备输出目录，加载数据，运行评估流水线。"""
    logger = get_logger("BuildPipeline")

    output_dir = _setup_output_directory(args)
    log_config = DEFAULT_CONFIG["logging"]
    level = logging.DEBUG if getattr(args, 'verbose', False) else getattr(logging, log_config["level"])
    setup_logging(level, log_file=output_dir / log_config["file"], log_format=log_config["format"])
    logger.info("开始构建流水线...")
    logger.info(f"输出目录: {output_dir}")

    # 1. 配置
    config = _create_experiment_config(args)
    logger.info(f"实验配置: {config.to_dict()}")

    # 2. 数据
    loader = DataLoader()
    dataset = loader.load_dataset(args.train_file, args.label_column, args.test_file, args.name)
    logger.info(f"数据加载完成: {dataset.n_train} 训练样本, {dataset.n_features} 特征, 模式 {dataset.mode.value}")

    # 3. 模型评估
    models = create_model_battery(args.models, window=args.noise_window, n_draws=args.n_draws)
    engine = CVEngine(config)
    report = engine.run([dataset], models)

    # 4. 收敛曲线
    curves: Dict[str, pd.DataFrame] = {}
    if getattr(args, 'convergence_curves', False):
        logger.info("计算稳定化Kendall核收敛曲线...")
        window = args.noise_window if args.noise_window is not None else config.noise_window_grid[0]
        curves[f"{dataset.name}__draw_count"] = engine.draw_count_curve(dataset, window=window)
        curves[f"{dataset.name}__window"] = engine.window_curve(dataset, n_draws=args.n_draws)

    # 5. 输出
    ResultsWriter().write(report, output_dir, config=config.to_dict(), curves=curves)

    summary = report.summary_frame()
    if not summary.empty:
        logger.info("\n" + summary.to_string(index=False))
    if not report.complete:
        logger.warning(f"运行结果不完整: {len(report.failures)} 个单元失败")
    logger.info("构建流水线完成！")


def _setup_output_directory(args: argparse.Namespace) -> Path:
    """设置输出目录。"""
    if args.output:
        output_dir = Path(args.output)
    else:
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_dir = Path(DEFAULT_CONFIG["output"]["directory"]) / (args.name or Path(args.train_file).stem) / stamp
    return ensure_directory(output_dir)


def _create_experiment_config(args: argparse.Namespace) -> ExperimentConfig:
    """配置文件覆盖默认值，命令行参数覆盖配置文件。"""
    manager = ConfigManager()
    if getattr(args, 'config', None):
        manager.load_from_file(args.config)

    overrides = {
        field: getattr(args, arg)
        for arg, field in ARG_TO_CONFIG.items()
        if getattr(args, arg, None) is not None
    }
    if getattr(args, 'noise_window', None) is not None:
        overrides['noise_window_grid'] = [args.noise_window]
    manager.update_config(**overrides)
    return manager.get_config()
