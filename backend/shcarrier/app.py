"""
边界门面 - UI 层调用的全部操作

职责：
- 主题：设置/切换/恢复系统/订阅
- 文件选择：打开对话框并按扩展名过滤
- 文件处理：提交请求，返回可等待的运行句柄（进度/错误事件 + 唯一终态结果）
- 打开产物文件

使用方式：
    core = ShellCore()
    run = core.submit_processing_request(path, {"useArea": True})
    run.events.on_progress(lambda chunk: print(chunk.text, end=""))
    result = await run
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Mapping

from .adapters import TkFileDialog
from .config import RuntimeConfig, get_config
from .interfaces import IFileDialog
from .models import (
    DialogResult,
    ProcessingOptions,
    ProcessingRequest,
    ProcessingResult,
    ThemePreference,
    matches_filters,
)
from .pipeline import (
    ObserverRegistry,
    ProcessingRun,
    ProcessOrchestrator,
    ResultReporter,
    StreamChunk,
    Subscription,
)
from .theme import ThemeState

logger = logging.getLogger(__name__)


class ShellCore:
    """桌面外壳核心"""

    def __init__(
        self,
        config: RuntimeConfig | None = None,
        *,
        theme: ThemeState | None = None,
        reporter: ResultReporter | None = None,
        orchestrator: ProcessOrchestrator | None = None,
        dialog: IFileDialog | None = None,
    ):
        self.config = config or get_config()
        self.theme = theme or ThemeState()
        self.reporter = reporter or ResultReporter()
        self.orchestrator = orchestrator or ProcessOrchestrator(self.config, reporter=self.reporter)
        self.dialog = dialog or TkFileDialog()
        self._runs: dict[str, ProcessingRun] = {}

        # 全部运行共享的事件源（所有窗口/观察者都能收到）
        self._progress: ObserverRegistry[StreamChunk] = ObserverRegistry("processing:progress")
        self._errors: ObserverRegistry[StreamChunk] = ObserverRegistry("processing:error")
        self._complete: ObserverRegistry[ProcessingResult] = ObserverRegistry("processing:complete")

    # ------------------------------------------------------------------ 主题

    def set_theme(self, preference: ThemePreference | str) -> bool:
        return self.theme.set_preference(preference)

    def toggle_theme(self) -> bool:
        return self.theme.toggle()

    def reset_theme_to_system(self) -> None:
        self.theme.reset_to_system()

    def get_effective_theme(self) -> bool:
        return self.theme.get_effective()

    def subscribe_theme_updates(self, callback: Callable[[bool], None], *, weak: bool = False) -> Subscription:
        return self.theme.subscribe(callback, weak=weak)

    # ------------------------------------------------------------------ 文件选择

    def select_input_file(self) -> DialogResult:
        """打开文件对话框；启用扩展名过滤时拒绝不匹配的文件"""
        filters = self.config.dialog.filters
        result = self.dialog.show_open_dialog(filters)
        if result.canceled or result.file_path is None:
            return DialogResult(canceled=True)

        if self.config.dialog.enforce_extensions and not matches_filters(result.file_path, filters):
            logger.warning(f"不支持的文件类型: {result.file_path}")
            return DialogResult(canceled=True, rejected_path=result.file_path)
        return result

    # ------------------------------------------------------------------ 文件处理

    def submit_processing_request(
        self,
        input_path: str | Path,
        options: ProcessingOptions | Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> ProcessingRun:
        """提交处理请求（需在事件循环中调用），返回可等待的运行句柄"""
        request = ProcessingRequest(
            input_path=Path(input_path).expanduser().absolute(),
            options=_coerce_options(options),
        )
        run = self.orchestrator.submit(request, timeout=timeout)
        self._runs[run.run_id] = run
        run.events.on_progress(self._progress.emit)
        run.events.on_error(self._errors.emit)
        run.events.on_complete(self._on_run_complete)
        return run

    def _on_run_complete(self, result: ProcessingResult) -> None:
        self._runs.pop(result.run_id, None)
        self._complete.emit(result)

    def subscribe_processing_progress(
        self, callback: Callable[[StreamChunk], None], *, weak: bool = False
    ) -> Subscription:
        """订阅所有运行的 stdout 片段（以 run_id 区分）"""
        return self._progress.subscribe(callback, weak=weak)

    def subscribe_processing_errors(
        self, callback: Callable[[StreamChunk], None], *, weak: bool = False
    ) -> Subscription:
        """订阅所有运行的 stderr 片段"""
        return self._errors.subscribe(callback, weak=weak)

    def subscribe_processing_complete(
        self, callback: Callable[[ProcessingResult], None], *, weak: bool = False
    ) -> Subscription:
        """订阅所有运行的终态结果"""
        return self._complete.subscribe(callback, weak=weak)

    def process_file(
        self,
        input_path: str | Path,
        options: ProcessingOptions | Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
        on_progress: Callable[[StreamChunk], None] | None = None,
        on_error: Callable[[StreamChunk], None] | None = None,
    ) -> ProcessingResult:
        """同步处理（脚本/命令行使用），内部运行事件循环"""

        async def _main() -> ProcessingResult:
            run = self.submit_processing_request(input_path, options, timeout=timeout)
            if on_progress is not None:
                run.events.on_progress(on_progress)
            if on_error is not None:
                run.events.on_error(on_error)
            return await run

        return asyncio.run(_main())

    @property
    def active_runs(self) -> list[ProcessingRun]:
        """尚未结束的运行（仅供展示，不做互斥）"""
        return [run for run in self._runs.values() if not run.done]

    def open_artifact(self, path: str | Path) -> bool:
        return self.reporter.open_artifact(path)


def _coerce_options(options: ProcessingOptions | Mapping[str, Any] | None) -> ProcessingOptions:
    if options is None:
        return ProcessingOptions()
    if isinstance(options, ProcessingOptions):
        return options
    return ProcessingOptions.model_validate(dict(options))
