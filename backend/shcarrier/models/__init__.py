"""
数据模型层 - 定义系统核心数据结构

- ThemePreference: 三态主题偏好
- ProcessingOptions/ProcessingRequest: 处理请求
- ArtifactPaths/OutputFiles: 产物路径
- ProcessingResult: 处理结果
- FileFilter/DialogResult: 文件选择
"""

from .dialog import DEFAULT_FILTERS, DialogResult, FileFilter, matches_filters
from .processing import (
    ArtifactPaths,
    ErrorKind,
    OutputFiles,
    ProcessingOptions,
    ProcessingRequest,
    ProcessingResult,
    RunState,
)
from .theme import ThemePreference

__all__ = [
    "ThemePreference",
    "ProcessingOptions",
    "ProcessingRequest",
    "ProcessingResult",
    "ArtifactPaths",
    "OutputFiles",
    "ErrorKind",
    "RunState",
    "FileFilter",
    "DialogResult",
    "DEFAULT_FILTERS",
    "matches_filters",
]
