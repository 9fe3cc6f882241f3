"""
文件对话框模型 - 文件类型过滤器与选择结果
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class FileFilter(BaseModel):
    """文件类型过滤器（extensions 不含点号，空列表表示所有文件）"""
    name: str
    extensions: list[str] = Field(default_factory=list)

    @property
    def is_wildcard(self) -> bool:
        return not self.extensions or "*" in self.extensions

    def matches(self, path: Path) -> bool:
        """判断文件扩展名是否被该过滤器接受"""
        if self.is_wildcard:
            return True
        suffix = Path(path).suffix.lower().lstrip(".")
        return suffix in {ext.lower().lstrip(".") for ext in self.extensions}


DEFAULT_FILTERS: list[FileFilter] = [
    FileFilter(name="Data Files", extensions=["csv", "tsv"]),
    FileFilter(name="All Files", extensions=["*"]),
]


def matches_filters(path: Path, filters: list[FileFilter]) -> bool:
    """文件是否匹配任一非通配过滤器（仅有通配过滤器时视为全部接受）"""
    concrete = [f for f in filters if not f.is_wildcard]
    if not concrete:
        return True
    return any(f.matches(path) for f in concrete)


class DialogResult(BaseModel):
    """打开文件对话框结果"""
    canceled: bool
    file_path: Path | None = None
    rejected_path: Path | None = Field(None, description="因扩展名不匹配被拒绝的文件")

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "frozen": True,
    }
