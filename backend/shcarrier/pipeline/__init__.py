"""
处理流水线 - 参数构建/可执行文件定位/进程编排/结果汇报

子模块：
- command_builder: 外部工具参数构建
- resolver: 可执行文件定位与校验
- events: 观察者注册表与运行事件源
- orchestrator: 进程编排（核心状态机）
- reporter: 结果汇报与打开产物
"""

from .command_builder import build_args, build_command
from .events import ObserverRegistry, RunEvents, StreamChunk, Subscription
from .orchestrator import ProcessingRun, ProcessOrchestrator
from .reporter import ResultReporter
from .resolver import ExecutableResolver, is_packaged, resolve_executable_path

__all__ = [
    "build_args",
    "build_command",
    "ObserverRegistry",
    "RunEvents",
    "StreamChunk",
    "Subscription",
    "ProcessingRun",
    "ProcessOrchestrator",
    "ResultReporter",
    "ExecutableResolver",
    "is_packaged",
    "resolve_executable_path",
]
