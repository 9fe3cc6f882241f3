"""
配置层 - 加载运行期配置与日志初始化

职责：
- 加载 config/shcarrier_runtime.yaml（运行期参数）
- 提供类型安全的配置访问接口
- 按配置初始化日志
"""

from .logging_setup import configure_logging
from .runtime_config import (
    DialogConfig,
    ExecutableConfig,
    LoggingConfig,
    ProcessConfig,
    RuntimeConfig,
    get_config,
    reload_config,
)

__all__ = [
    "RuntimeConfig",
    "ExecutableConfig",
    "ProcessConfig",
    "DialogConfig",
    "LoggingConfig",
    "get_config",
    "reload_config",
    "configure_logging",
]
