"""
平台适配 - 外部协作方接口的默认实现

- SystemThemeProbe / StaticThemeProbe: 系统主题探测
- SystemPathOpener: 默认程序打开文件
- TkFileDialog: 打开文件对话框
"""

from .dialogs import TkFileDialog
from .opener import SystemPathOpener
from .theme_probe import StaticThemeProbe, SystemThemeProbe

__all__ = [
    "SystemThemeProbe",
    "StaticThemeProbe",
    "SystemPathOpener",
    "TkFileDialog",
]
