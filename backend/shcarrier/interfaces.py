"""
模块接口契约 - 定义外部协作方接口与异常体系

设计原则：
1. 平台相关能力（系统主题/文件对话框/默认程序打开）通过接口注入
2. 核心模块只依赖接口，便于单元测试和mock替换

使用方式：
    from shcarrier.interfaces import IPathOpener

    class MyOpener(IPathOpener):
        def open_path(self, path: Path) -> None:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models.dialog import DialogResult, FileFilter


# ============================================================================
# 平台协作方接口
# ============================================================================

class IOSThemeProbe(ABC):
    """系统主题探测接口"""

    @abstractmethod
    def is_dark(self) -> bool:
        """
        查询操作系统当前是否为深色模式

        Returns:
            True 表示深色，探测失败时应返回 False
        """
        ...


class IPathOpener(ABC):
    """默认程序打开接口"""

    @abstractmethod
    def open_path(self, path: Path) -> None:
        """
        使用系统默认程序打开文件

        Args:
            path: 文件路径

        Raises:
            OSError: 平台调用失败
        """
        ...


class IFileDialog(ABC):
    """文件选择对话框接口"""

    @abstractmethod
    def show_open_dialog(self, filters: list[FileFilter]) -> DialogResult:
        """
        弹出打开文件对话框

        Args:
            filters: 文件类型过滤器（按顺序展示）

        Returns:
            对话框结果（canceled / file_path）
        """
        ...


# ============================================================================
# 异常定义
# ============================================================================

class ShCarrierError(Exception):
    """系统基础异常"""
    pass


class ConfigError(ShCarrierError):
    """配置错误"""
    pass


class InputNotFoundError(ShCarrierError):
    """输入文件不存在"""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"输入文件不存在: {path}")


class ExecutableNotFoundError(ShCarrierError):
    """外部可执行文件不存在"""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(
            f"可执行文件不存在: {path}，请确认 {path.name} 位于应用程序目录中"
        )


class LaunchError(ShCarrierError):
    """外部进程启动失败"""

    def __init__(self, command: list[str], cause: OSError):
        self.command = command
        self.cause = cause
        super().__init__(f"进程启动失败: {cause}")
