"""
主题模块 - 主题偏好状态与广播
"""

from .broadcaster import ThemeState

__all__ = ["ThemeState"]
