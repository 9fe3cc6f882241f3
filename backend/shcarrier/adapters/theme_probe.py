"""
系统主题探测 - 查询操作系统深色/浅色偏好

依赖：
- Windows: 注册表 AppsUseLightTheme
- macOS: defaults read -g AppleInterfaceStyle
- Linux(GNOME): gsettings color-scheme / gtk-theme

任何探测失败都按浅色处理。
"""

from __future__ import annotations

import logging
import subprocess
import sys

from ..interfaces import IOSThemeProbe

logger = logging.getLogger(__name__)

_WINDOWS_PERSONALIZE_KEY = r"Software\Microsoft\Windows\CurrentVersion\Themes\Personalize"


class SystemThemeProbe(IOSThemeProbe):
    """操作系统主题探测"""

    def __init__(self, timeout: float = 2.0):
        self.timeout = timeout

    def is_dark(self) -> bool:
        try:
            if sys.platform.startswith("win"):
                return self._windows_is_dark()
            if sys.platform == "darwin":
                return self._macos_is_dark()
            return self._gnome_is_dark()
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug(f"系统主题探测失败，按浅色处理: {e}")
            return False

    @staticmethod
    def _windows_is_dark() -> bool:
        import winreg

        with winreg.OpenKey(winreg.HKEY_CURRENT_USER, _WINDOWS_PERSONALIZE_KEY) as key:
            value, _ = winreg.QueryValueEx(key, "AppsUseLightTheme")
        return value == 0

    def _macos_is_dark(self) -> bool:
        # 浅色模式下该键不存在，命令返回非零
        result = subprocess.run(
            ["defaults", "read", "-g", "AppleInterfaceStyle"],
            capture_output=True,
            text=True,
            timeout=self.timeout,
        )
        return result.returncode == 0 and "dark" in result.stdout.lower()

    def _gnome_is_dark(self) -> bool:
        for key in ("color-scheme", "gtk-theme"):
            result = subprocess.run(
                ["gsettings", "get", "org.gnome.desktop.interface", key],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
            if result.returncode == 0 and "dark" in result.stdout.lower():
                return True
        return False


class StaticThemeProbe(IOSThemeProbe):
    """固定值探测（无界面环境/测试用），可通过 dark 属性模拟系统切换"""

    def __init__(self, dark: bool = False):
        self.dark = dark

    def is_dark(self) -> bool:
        return self.dark
