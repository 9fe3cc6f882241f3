"""
可执行文件定位 - 根据运行模式确定外部工具路径

职责：
- 开发模式：项目根目录（或配置的 development_dir）
- 生产/打包模式：打包资源目录（或配置的 packaged_dir）
- 启动前校验文件存在，每次运行都重新检查（不缓存）

测试要点：
- test_resolve_development_path: 开发模式路径
- test_resolve_packaged_path: 打包模式路径
- test_resolve_missing_executable: 文件不存在
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from ..config import RuntimeConfig, get_config
from ..interfaces import ExecutableNotFoundError

logger = logging.getLogger(__name__)


def is_packaged() -> bool:
    """是否运行在冻结（PyInstaller等）打包产物中"""
    return bool(getattr(sys, "frozen", False))


def project_root() -> Path:
    """开发模式下的项目根目录"""
    return Path(__file__).resolve().parents[3]


def packaged_resource_dir() -> Path:
    """打包模式下的资源目录"""
    bundle_dir = getattr(sys, "_MEIPASS", None)
    if bundle_dir:
        return Path(bundle_dir)
    return Path(sys.executable).resolve().parent


def resolve_executable_path(
    is_packaged_or_production: bool,
    development_base_dir: str | Path,
    packaged_base_dir: str | Path,
    executable_name: str = "SHCarrier.exe",
) -> Path:
    """计算外部工具绝对路径（纯函数，不检查存在性）"""
    base_dir = packaged_base_dir if is_packaged_or_production else development_base_dir
    return (Path(base_dir) / executable_name).absolute()


class ExecutableResolver:
    """外部工具定位器"""

    def __init__(self, config: RuntimeConfig | None = None):
        self.config = config or get_config()

    @property
    def production(self) -> bool:
        return self.config.executable.production or is_packaged()

    def candidate_path(self) -> Path:
        exe = self.config.executable
        return resolve_executable_path(
            self.production,
            exe.development_dir or project_root(),
            exe.packaged_dir or packaged_resource_dir(),
            exe.name,
        )

    def resolve(self) -> Path:
        """
        定位并校验外部工具

        Raises:
            ExecutableNotFoundError: 文件不存在（携带尝试的绝对路径）
        """
        exe_path = self.candidate_path()
        logger.debug(f"生产模式: {self.production}, 可执行文件路径: {exe_path}")
        if not exe_path.is_file():
            logger.error(f"可执行文件不存在: {exe_path}")
            raise ExecutableNotFoundError(exe_path)
        return exe_path
