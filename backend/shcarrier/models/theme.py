"""
主题模型 - 三态主题偏好
"""

from __future__ import annotations

from enum import Enum


class ThemePreference(str, Enum):
    """主题偏好枚举"""
    SYSTEM = "system"   # 跟随系统
    LIGHT = "light"
    DARK = "dark"
