"""
参数构建 - 将输入路径与处理选项映射为外部工具参数

参数顺序固定：
    -i <input> [-Area] [-STD <name>] [-GBK] [-dev]

参数始终以列表形式传给进程（不经过shell），避免命令注入。
"""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from ..models import ProcessingOptions
from ..models.processing import STD_SENTINEL


def build_args(input_path: str | Path, options: ProcessingOptions) -> list[str]:
    """构建外部工具参数列表"""
    args = ["-i", str(input_path)]

    if options.use_area:
        args.append("-Area")

    # STD 为占位值，表示使用工具内置标准品
    if options.std_name and options.std_name != STD_SENTINEL:
        args.extend(["-STD", options.std_name])

    if options.use_gbk:
        args.append("-GBK")

    if options.dev_mode:
        args.append("-dev")

    return args


def build_command(
    executable: Path,
    args: Sequence[str],
    launcher: Sequence[str] | None = None,
) -> list[str]:
    """拼接完整命令行：[launcher...] executable args..."""
    return [*(launcher or []), str(executable), *args]


def format_command(command: Sequence[str]) -> str:
    """仅用于日志展示"""
    return " ".join(f'"{part}"' if " " in part else part for part in command)
