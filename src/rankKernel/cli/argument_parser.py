"""
参数解析器 for rankKernel.

支持build子命令：加载数据集，运行模型评估，输出准确率表。
"""

import argparse

from rankKernel.config import DEFAULT_CONFIG
from typing import List, Optional


def str2bool(v):
    """将字符串转换为布尔值。"""
    if isinstance(v, bool):
        return v
    if v.lower() in ('yes', 'true', 't', 'y', '1'):
        return True
    elif v.lower() in ('no', 'false', 'f', 'n', '0'):
        return False
    else:
        raise argparse.ArgumentTypeError('Boolean value expected.')


def comma_separated_items(value: str) -> List[str]:
    """解析逗号分隔的字符串为列表。"""
    if not value:
        return []
    return [item.strip() for item in value.split(',') if item.strip()]


def comma_separated_floats(value: str) -> List[float]:
    try:
        return [float(item) for item in comma_separated_items(value)]
    except ValueError:
        raise argparse.ArgumentTypeError(f'Comma separated numbers expected, got: {value}')


def comma_separated_ints(value: str) -> List[int]:
    try:
        return [int(item) for item in comma_separated_items(value)]
    except ValueError:
        raise argparse.ArgumentTypeError(f'Comma separated integers expected, got: {value}')


def create_argument_parser() -> argparse.ArgumentParser:
    """创建和配置CLI解析器。"""
    parser = argparse.ArgumentParser(
        prog="rankkernel",
        description="rankKernel - 基因表达数据上的秩比较与核方法分类器评估",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    build_p = subparsers.add_parser('build', help='运行嵌套CV / held-out评估')

    # 数据文件参数
    build_p.add_argument('--train_file', type=str, required=True,
                         help="训练数据CSV (行=样本, 列=基因 + 标签列)")
    build_p.add_argument('--test_file', type=str, required=False, default=None,
                         help="独立测试集CSV；提供时使用held-out模式，否则使用嵌套CV")
    build_p.add_argument('--label_column', type=str, required=False, default=DEFAULT_CONFIG["data"]["label_column"],
                         help="标签列名")
    build_p.add_argument('--name', type=str, required=False, default=None,
                         help="数据集名称 (默认: 训练文件名)")
    build_p.add_argument('--output', type=str, required=False, default=None,
                         help="结果输出目录 (未指定时自动生成)")

    # 模型参数
    build_p.add_argument('--models', type=comma_separated_items, required=False, default=None,
                         help="要评估的模型列表 (逗号分隔；默认使用标准模型组合)")

    # 交叉验证与网格参数
    build_p.add_argument('--c_grid', type=comma_separated_floats, required=False, default=None,
                         help="SVM正则化参数C的网格")
    build_p.add_argument('--k_grid', type=comma_separated_ints, required=False, default=None,
                         help="top-k配对数量网格")
    build_p.add_argument('--outer_cv_folds', type=int, required=False, default=None,
                         help="外层CV折数")
    build_p.add_argument('--inner_cv_folds', type=int, required=False, default=None,
                         help="内层CV折数")
    build_p.add_argument('--outer_cv_repeats', type=int, required=False, default=None,
                         help="外层CV重复次数")
    build_p.add_argument('--seed', type=int, required=False, default=None,
                         help="运行级随机种子")
    build_p.add_argument('--disjoint_pairs', type=str2bool, required=False, default=None,
                         help="top-k配对互不共享基因")

    # 稳定化Kendall核
    build_p.add_argument('--noise_window', type=float, required=False, default=None,
                         help="稳定化Kendall核的噪声窗口a")
    build_p.add_argument('--n_draws', type=int, required=False, default=None,
                         help="稳定化Kendall核的蒙特卡洛抽样次数 (默认: 精确期望)")
    build_p.add_argument('--convergence_curves', type=str2bool, required=False, default=False,
                         help="额外计算准确率随抽样次数/窗口大小的曲线")

    # 系统参数
    build_p.add_argument('--cpu', type=int, required=False, default=None,
                         help="并行worker数量")
    build_p.add_argument('--config', type=str, required=False, default=None,
                         help="YAML/JSON配置文件路径 (命令行参数优先)")
    build_p.add_argument('--verbose', type=str2bool, required=False, default=False,
                         help="输出DEBUG日志与完整错误信息")

    return parser


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """解析命令行参数。"""
    parser = create_argument_parser()
    return parser.parse_args(argv)
