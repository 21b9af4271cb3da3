#!/usr/bin/env python3
"""
rankKernel - 基因表达数据分类器评估

比较秩比较分类器（TSP / kTSP / APMV）与多种核函数的核SVM：
- held-out模式：训练集内层CV + 独立测试集
- 嵌套模式：重复外层CV + 内层CV选参
"""

import sys
import warnings
from datetime import datetime

from sklearn.exceptions import ConvergenceWarning

from rankKernel.cli.argument_parser import parse_arguments
from rankKernel.core.exceptions import RankKernelError

warnings.filterwarnings("ignore", category=ConvergenceWarning)


def main(argv=None):
    """主入口函数，根据命令分发到相应的处理器。"""
    args = parse_arguments(argv)

    # 命令处理器映射
    handlers = {
        'build': lambda a: __import__('rankKernel.pipelines.build', fromlist=['handle_build']).handle_build(a),
    }

    cmd = getattr(args, 'command', None)
    handler = handlers.get(cmd)

    if handler is None:
        raise ValueError(f"Unknown command: {cmd}. Supported commands: {', '.join(handlers.keys())}")

    start_time = datetime.now()
    sys.stdout.write(f"================================================================================\n"
                     f"rankKernel 运行日志\n"
                     f"================================================================================\n"
                     f"开始时间: {start_time.strftime('%Y-%m-%d %H:%M:%S')}\n"
                     f"命令: {cmd.upper()}\n"
                     f"================================================================================\n")
    sys.stdout.flush()

    try:
        handler(args)

        end_time = datetime.now()
        sys.stdout.write(f"\n✅ {cmd.upper()} 命令执行完成！\n"
                         f"结束时间: {end_time.strftime('%Y-%m-%d %H:%M:%S')}\n"
                         f"总耗时: {end_time - start_time}\n")
        sys.stdout.flush()

    except KeyboardInterrupt:
        sys.stdout.write(f"\n⚠️ {cmd.upper()} 命令被用户中断\n")
        sys.exit(130)
    except FileNotFoundError as e:
        sys.stdout.write(f"\n❌ 文件未找到: {e}\n")
        sys.exit(2)
    except (RankKernelError, ValueError) as e:
        sys.stdout.write(f"\n❌ 参数错误: {e}\n")
        sys.exit(3)
    except ImportError as e:
        sys.stdout.write(f"\n❌ 导入错误: {e}\n")
        sys.stdout.write("请检查依赖包是否正确安装\n")
        sys.exit(4)
    except Exception as e:
        sys.stdout.write(f"\n❌ {cmd.upper()} 命令执行失败: {e}\n")
        if getattr(args, 'verbose', False):
            import traceback
            sys.stdout.write("\n详细错误信息:\n")
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
