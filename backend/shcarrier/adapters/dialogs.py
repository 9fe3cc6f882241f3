"""
文件对话框 - 基于 tkinter 的打开文件对话框
"""

from __future__ import annotations

from pathlib import Path

from ..interfaces import IFileDialog
from ..models import DialogResult, FileFilter


def to_tk_filetypes(filters: list[FileFilter]) -> list[tuple[str, str]]:
    """过滤器 -> tkinter filetypes"""
    filetypes = []
    for f in filters:
        pattern = "*" if f.is_wildcard else " ".join(f"*.{ext.lstrip('.')}" for ext in f.extensions)
        filetypes.append((f.name, pattern))
    return filetypes


class TkFileDialog(IFileDialog):
    """tkinter 打开文件对话框"""

    def __init__(self, title: str = "选择数据文件", parent=None):
        self.title = title
        self.parent = parent

    def show_open_dialog(self, filters: list[FileFilter]) -> DialogResult:
        import tkinter as tk
        from tkinter import filedialog

        root = None
        parent = self.parent
        if parent is None:
            root = tk.Tk()
            root.withdraw()
            parent = root
        try:
            selected = filedialog.askopenfilename(
                parent=parent,
                title=self.title,
                filetypes=to_tk_filetypes(filters),
            )
        finally:
            if root is not None:
                root.destroy()

        if not selected:
            return DialogResult(canceled=True)
        return DialogResult(canceled=False, file_path=Path(selected))
