"""
进程编排器 - 启动外部工具、转发输出、判定结果

职责：
1. 校验输入文件、定位可执行文件、构建参数
2. 以参数列表方式启动进程（工作目录为输入文件所在目录，不经过shell）
3. 流式读取 stdout/stderr，逐块累积并立即转发给观察者
4. 进程结束后排空输出，判定退出码并检查产物文件
5. 支持取消与超时（终止子进程）

状态流转：
    idle -> validating -> launching -> running -> finalizing -> succeeded | failed

所有失败都以 ProcessingResult(success=False, error_kind=...) 返回，不向调用方抛出；
不做自动重试。

测试要点：
- test_input_not_found: 输入文件不存在，不启动进程
- test_executable_not_found: 可执行文件不存在，不启动进程
- test_launch_failed: 进程启动失败
- test_success_with_artifacts: 退出码0，产物按存在性返回
- test_non_zero_exit: 非零退出码保留完整输出
- test_killed_by_signal: 信号终止
- test_streaming_progress: 运行期间即时转发输出
- test_concurrent_runs_isolated: 并发运行互不干扰
- test_cancel / test_timeout: 取消与超时
"""

from __future__ import annotations

import asyncio
import codecs
import logging
import signal
import uuid
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from ..config import RuntimeConfig, get_config
from ..interfaces import ExecutableNotFoundError, InputNotFoundError, LaunchError
from ..models import (
    ArtifactPaths,
    ErrorKind,
    OutputFiles,
    ProcessingRequest,
    ProcessingResult,
    RunState,
)
from .command_builder import build_args, build_command, format_command
from .events import ObserverRegistry, RunEvents, StreamChunk
from .reporter import ResultReporter
from .resolver import ExecutableResolver

if TYPE_CHECKING:
    from asyncio.subprocess import Process

logger = logging.getLogger(__name__)

# 被终止后等待输出管道关闭的上限（孙进程可能继续持有管道）
DRAIN_TIMEOUT_AFTER_KILL_SEC = 5.0


class ProcessingRun:
    """一次处理运行（由编排器独占，结果产生后即结束）"""

    def __init__(self, request: ProcessingRequest):
        self.run_id = uuid.uuid4().hex[:12]
        self.request = request
        self.state = RunState.IDLE
        self.events = RunEvents(self.run_id)

        self.process: Process | None = None
        self.stdout_chunks: list[str] = []
        self.stderr_chunks: list[str] = []
        self.exit_code: int | None = None
        self.error_kind: ErrorKind | None = None
        self.error: str | None = None
        self.attempted_path: Path | None = None
        self.output_files = OutputFiles()

        self.started_at = datetime.now()
        self.finished_at: datetime | None = None
        self.result: ProcessingResult | None = None

        self._cancel_event = asyncio.Event()
        self._task: asyncio.Task[ProcessingResult] | None = None

    @property
    def stdout(self) -> str:
        return "".join(self.stdout_chunks)

    @property
    def stderr(self) -> str:
        return "".join(self.stderr_chunks)

    @property
    def done(self) -> bool:
        return self.result is not None

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_event.is_set()

    def cancel(self) -> bool:
        """请求取消；进程已退出（进入收尾）或已结束的运行返回 False"""
        if self.done or self.state in (RunState.FINALIZING, RunState.SUCCEEDED, RunState.FAILED):
            return False
        logger.info(f"[{self.run_id}] 收到取消请求")
        self._cancel_event.set()
        return True

    async def wait(self) -> ProcessingResult:
        """等待运行结束（等待方被取消不影响运行本身）"""
        if self._task is None:
            raise RuntimeError(f"运行尚未提交: {self.run_id}")
        return await asyncio.shield(self._task)

    def __await__(self):
        return self.wait().__await__()

    def transition(self, state: RunState) -> None:
        logger.debug(f"[{self.run_id}] {self.state.value} -> {state.value}")
        self.state = state

    def succeed(self, output_files: OutputFiles) -> None:
        self.output_files = output_files
        self.transition(RunState.SUCCEEDED)

    def fail(self, kind: ErrorKind, message: str | None = None) -> None:
        self.error_kind = kind
        self.error = message
        self.transition(RunState.FAILED)


class ProcessOrchestrator:
    """进程编排器"""

    def __init__(
        self,
        config: RuntimeConfig | None = None,
        resolver: ExecutableResolver | None = None,
        reporter: ResultReporter | None = None,
    ):
        self.config = config or get_config()
        self.resolver = resolver or ExecutableResolver(self.config)
        self.reporter = reporter or ResultReporter()

    def submit(self, request: ProcessingRequest, *, timeout: float | None = None) -> ProcessingRun:
        """
        提交处理请求（需在事件循环中调用）

        立即返回运行句柄；在调用方下一次让出控制权之前注册的观察者可收到全部事件。
        """
        loop = asyncio.get_running_loop()
        run = ProcessingRun(request)
        run._task = loop.create_task(
            self._execute(run, timeout), name=f"shcarrier-run-{run.run_id}"
        )
        return run

    async def execute(self, request: ProcessingRequest, *, timeout: float | None = None) -> ProcessingResult:
        """提交并等待结果"""
        return await self.submit(request, timeout=timeout)

    async def _execute(self, run: ProcessingRun, timeout: float | None) -> ProcessingResult:
        request = run.request
        logger.info(f"[{run.run_id}] 处理文件: {request.input_path}")
        logger.info(f"[{run.run_id}] 选项: {request.options.model_dump(by_alias=True)}")

        try:
            await self._run_stages(run, timeout)
        except asyncio.CancelledError:
            self._kill(run.process)
            raise
        except Exception as e:
            logger.exception(f"[{run.run_id}] 处理过程异常")
            self._kill(run.process)
            run.fail(ErrorKind.PROCESS_ERROR, str(e))

        return self._finish(run)

    async def _run_stages(self, run: ProcessingRun, timeout: float | None) -> None:
        request = run.request

        # ---------------------------------------------------------------- 校验
        run.transition(RunState.VALIDATING)
        try:
            self._validate(request)
        except InputNotFoundError as e:
            run.fail(ErrorKind.INPUT_NOT_FOUND, str(e))
            return
        if run.cancel_requested:
            run.fail(ErrorKind.CANCELLED, "处理已取消")
            return

        # ---------------------------------------------------------------- 启动
        run.transition(RunState.LAUNCHING)
        try:
            exe_path = self.resolver.resolve()
        except ExecutableNotFoundError as e:
            run.attempted_path = e.path
            run.fail(ErrorKind.EXECUTABLE_NOT_FOUND, str(e))
            return

        command = build_command(
            exe_path,
            build_args(request.input_path, request.options),
            self.config.executable.launcher,
        )
        cwd = request.input_path.parent
        logger.info(f"[{run.run_id}] 命令: {format_command(command)}")
        logger.info(f"[{run.run_id}] 工作目录: {cwd}")

        if run.cancel_requested:
            run.fail(ErrorKind.CANCELLED, "处理已取消")
            return

        try:
            process = await self._launch(command, cwd)
        except LaunchError as e:
            logger.error(f"[{run.run_id}] {e}")
            run.fail(ErrorKind.LAUNCH_FAILED, str(e))
            return

        run.process = process
        logger.debug(f"[{run.run_id}] 进程已启动: pid={process.pid}")

        # ---------------------------------------------------------------- 运行
        run.transition(RunState.RUNNING)
        pumps = [
            asyncio.ensure_future(
                self._pump(run, process.stdout, run.stdout_chunks, run.events.progress, is_error=False)
            ),
            asyncio.ensure_future(
                self._pump(run, process.stderr, run.stderr_chunks, run.events.error, is_error=True)
            ),
        ]
        effective_timeout = timeout if timeout is not None else self.config.process.timeout_sec
        interrupted = await self._supervise(run, process, effective_timeout)

        # ---------------------------------------------------------------- 收尾
        run.transition(RunState.FINALIZING)
        pump_errors = await self._drain(run, pumps, bounded=interrupted is not None)
        run.exit_code = process.returncode
        logger.info(f"[{run.run_id}] 进程退出码: {run.exit_code}")

        if interrupted == ErrorKind.TIMED_OUT:
            run.fail(interrupted, f"进程执行超时（{effective_timeout}秒），已终止")
            return
        if interrupted == ErrorKind.CANCELLED:
            run.fail(interrupted, "处理已取消，进程已终止")
            return
        if pump_errors:
            run.fail(ErrorKind.PROCESS_ERROR, f"读取进程输出失败: {pump_errors[0]}")
            return

        self._classify_exit(run)

    @staticmethod
    async def _launch(command: list[str], cwd: Path) -> Process:
        """以参数列表启动进程（不经过shell）"""
        try:
            return await asyncio.create_subprocess_exec(
                *command,
                cwd=str(cwd),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise LaunchError(command, e) from e

    @staticmethod
    def _validate(request: ProcessingRequest) -> None:
        if not request.input_path.is_file():
            raise InputNotFoundError(request.input_path)

    async def _supervise(
        self, run: ProcessingRun, process: Process, timeout: float | None
    ) -> ErrorKind | None:
        """等待进程退出；取消或超时则终止进程并返回中断原因"""
        exit_waiter = asyncio.ensure_future(process.wait())
        cancel_waiter = asyncio.ensure_future(run._cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                {exit_waiter, cancel_waiter},
                timeout=timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            exit_waiter.cancel()
            raise
        finally:
            cancel_waiter.cancel()

        if exit_waiter in done:
            return None

        reason = ErrorKind.CANCELLED if cancel_waiter in done else ErrorKind.TIMED_OUT
        logger.warning(f"[{run.run_id}] 终止进程: {reason.value}")
        self._kill(process)
        await exit_waiter
        return reason

    async def _drain(
        self, run: ProcessingRun, pumps: list[asyncio.Future], *, bounded: bool
    ) -> list[BaseException]:
        """排空输出管道，返回读取过程中的异常"""
        done, pending = await asyncio.wait(
            pumps, timeout=DRAIN_TIMEOUT_AFTER_KILL_SEC if bounded else None
        )
        for task in pending:
            logger.warning(f"[{run.run_id}] 输出管道未关闭，放弃剩余输出")
            task.cancel()
        errors = []
        for task in done:
            if not task.cancelled() and task.exception() is not None:
                errors.append(task.exception())
        return errors

    async def _pump(
        self,
        run: ProcessingRun,
        stream: asyncio.StreamReader,
        sink: list[str],
        registry: ObserverRegistry[StreamChunk],
        *,
        is_error: bool,
    ) -> None:
        """逐块读取输出：累积并立即转发"""
        decoder = codecs.getincrementaldecoder(self.config.process.encoding)(errors="replace")
        chunk_size = self.config.process.chunk_size

        while True:
            data = await stream.read(chunk_size)
            final = not data
            # 增量解码，跨块的多字节字符不会被截断
            text = decoder.decode(data, final=final)
            if text:
                sink.append(text)
                if is_error:
                    logger.warning(f"[{run.run_id}] 错误输出: {text.rstrip()}")
                else:
                    logger.debug(f"[{run.run_id}] 输出: {text.rstrip()}")
                registry.emit(StreamChunk(run_id=run.run_id, text=text))
            if final:
                break

    def _classify_exit(self, run: ProcessingRun) -> None:
        code = run.exit_code

        if code == 0:
            artifacts = ArtifactPaths.from_input(run.request.input_path)
            output_files = artifacts.existing()
            # 产物缺失不视为失败（工具可能只生成其中一个）
            if output_files.summary is None:
                logger.warning(f"[{run.run_id}] 未找到汇总文件: {artifacts.summary}")
            if output_files.calculation is None:
                logger.warning(f"[{run.run_id}] 未找到计算文件: {artifacts.calculation}")
            run.succeed(output_files)
        elif code is not None and code < 0:
            run.fail(ErrorKind.PROCESS_ERROR, f"进程被信号终止: {_signal_name(-code)}")
        else:
            run.fail(ErrorKind.NON_ZERO_EXIT)

    def _finish(self, run: ProcessingRun) -> ProcessingResult:
        run.finished_at = datetime.now()
        result = self.reporter.report(run)
        run.result = result

        if result.success:
            logger.info(f"[{run.run_id}] 处理成功: {result.output_files.model_dump(mode='json')}")
        else:
            logger.error(
                f"[{run.run_id}] 处理失败: {result.error_kind.value}"
                + (f" - {result.error}" if result.error else "")
            )

        # 终态事件永远是最后一个事件
        run.events.complete.emit(result)
        run.events.close()
        return result

    @staticmethod
    def _kill(process: Process | None) -> None:
        if process is None or process.returncode is not None:
            return
        try:
            process.kill()
        except ProcessLookupError:
            pass


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return str(signum)
