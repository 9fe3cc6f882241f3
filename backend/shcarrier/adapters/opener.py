"""
默认程序打开 - 使用操作系统关联程序打开文件
"""

from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

from ..interfaces import IPathOpener


class SystemPathOpener(IPathOpener):
    """系统默认程序打开"""

    def open_path(self, path: Path) -> None:
        if sys.platform.startswith("win"):
            os.startfile(str(path))  # type: ignore[attr-defined]
            return

        opener = "open" if sys.platform == "darwin" else "xdg-open"
        subprocess.Popen(
            [opener, str(path)],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
