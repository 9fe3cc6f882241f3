"""
运行期配置 - 读取 config/shcarrier_runtime.yaml

职责：
- 加载可执行文件定位/进程/对话框/日志等运行参数
- 提供环境变量覆盖机制（SHCARRIER_ 前缀，嵌套用 __ 分隔）
- 类型安全的配置访问
"""

from __future__ import annotations

import codecs
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from ..interfaces import ConfigError
from ..models.dialog import DEFAULT_FILTERS, FileFilter

DEFAULT_CONFIG_PATH = Path("config/shcarrier_runtime.yaml")


class ExecutableConfig(BaseModel):
    """外部工具定位配置"""

    name: str = "SHCarrier.exe"
    production: bool = False  # 等同于打包运行
    development_dir: str | None = None  # 默认：项目根目录
    packaged_dir: str | None = None  # 默认：打包资源目录
    launcher: list[str] = Field(default_factory=list)  # 如非Windows平台使用 ["wine"]


class ProcessConfig(BaseModel):
    """进程执行配置"""

    timeout_sec: float | None = None  # 不设置则不限时
    encoding: str = "utf-8"
    chunk_size: int = 4096

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as e:
            raise ValueError(f"未知编码: {value}") from e
        return value

    @field_validator("chunk_size")
    @classmethod
    def _positive_chunk(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("chunk_size 必须为正数")
        return value

    @field_validator("timeout_sec")
    @classmethod
    def _positive_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            return None
        return value


class DialogConfig(BaseModel):
    """文件对话框配置"""

    filters: list[FileFilter] = Field(default_factory=lambda: list(DEFAULT_FILTERS))
    enforce_extensions: bool = True


class LoggingConfig(BaseModel):
    """日志配置"""

    log_level: str = "INFO"
    log_to_file: bool = False
    log_file: str = "logs/shcarrier.log"


class RuntimeConfig(BaseSettings):
    """运行期配置（支持环境变量覆盖）"""

    executable: ExecutableConfig = Field(default_factory=ExecutableConfig)
    process: ProcessConfig = Field(default_factory=ProcessConfig)
    dialog: DialogConfig = Field(default_factory=DialogConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {
        "env_prefix": "SHCARRIER_",
        "env_nested_delimiter": "__",
        "arbitrary_types_allowed": True,
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # 环境变量优先于YAML
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> RuntimeConfig:
        """从YAML文件加载配置"""
        path = Path(yaml_path)
        if not path.exists():
            return cls()

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"配置文件解析失败: {path}: {e}") from e

        runtime_opts = data.get("runtime_options", {}) or {}

        config = cls(
            executable=cls._extract(runtime_opts, "executable"),
            process=cls._extract(runtime_opts, "process"),
            dialog=cls._extract(runtime_opts, "dialog"),
            logging=cls._extract(runtime_opts, "logging"),
        )

        config._resolve_paths(base_dir=path.parent)
        return config

    @staticmethod
    def _extract(data: dict[str, Any], key: str) -> dict[str, Any]:
        """提取并展平配置"""
        section = data.get(key, {}) or {}
        result = {}
        for k, v in section.items():
            if isinstance(v, dict) and "default" in v:
                result[k] = v["default"]
            elif not isinstance(v, dict):
                result[k] = v
        return result

    def _resolve_paths(self, base_dir: Path) -> None:
        """解析相对路径配置为绝对路径（基于配置文件所在目录）"""
        if self.executable.development_dir:
            dev_dir = Path(self.executable.development_dir)
            if not dev_dir.is_absolute():
                self.executable.development_dir = str((base_dir / dev_dir).resolve())
        if self.executable.packaged_dir:
            packaged_dir = Path(self.executable.packaged_dir)
            if not packaged_dir.is_absolute():
                self.executable.packaged_dir = str((base_dir / packaged_dir).resolve())
        if self.logging.log_file:
            log_file = Path(self.logging.log_file)
            if not log_file.is_absolute():
                self.logging.log_file = str((base_dir / log_file).resolve())


# 全局配置实例
_config: RuntimeConfig | None = None


def get_config() -> RuntimeConfig:
    """获取全局配置（惰性加载）"""
    global _config
    if _config is None:
        _config = RuntimeConfig.from_yaml(DEFAULT_CONFIG_PATH)
    return _config


def reload_config(yaml_path: str | Path | None = None) -> RuntimeConfig:
    """重新加载配置"""
    global _config
    path = yaml_path or DEFAULT_CONFIG_PATH
    _config = RuntimeConfig.from_yaml(path)
    return _config
