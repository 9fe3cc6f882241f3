"""
结果汇报 - 将终态运行转换为处理结果，并提供打开产物文件的动作

测试要点：
- test_report_success: 成功结果
- test_report_failure: 失败结果保留 stdout/stderr
- test_open_artifact_missing: 文件已删除时返回 False 而不抛异常
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ..adapters import SystemPathOpener
from ..interfaces import IPathOpener, ShCarrierError
from ..models import ErrorKind, ProcessingResult, RunState

if TYPE_CHECKING:
    from .orchestrator import ProcessingRun

logger = logging.getLogger(__name__)


class ResultReporter:
    """结果汇报器"""

    def __init__(self, opener: IPathOpener | None = None):
        self.opener = opener or SystemPathOpener()

    def report(self, run: ProcessingRun) -> ProcessingResult:
        """终态运行 -> 处理结果"""
        if not run.state.is_terminal:
            raise ShCarrierError(f"运行尚未结束: {run.run_id} ({run.state.value})")

        return ProcessingResult(
            run_id=run.run_id,
            input_path=run.request.input_path,
            success=run.state == RunState.SUCCEEDED,
            exit_code=run.exit_code,
            stdout=run.stdout,
            stderr=run.stderr,
            output_files=run.output_files,
            error_kind=run.error_kind,
            error=run.error,
            attempted_path=run.attempted_path,
            started_at=run.started_at,
            finished_at=run.finished_at,
        )

    def open_artifact(self, path: str | Path) -> bool:
        """使用系统默认程序打开产物文件，文件不存在或打开失败时返回 False"""
        path = Path(path)
        if not path.exists():
            logger.warning(f"[{ErrorKind.ARTIFACT_OPEN_FAILED.value}] 文件不存在: {path}")
            return False

        try:
            self.opener.open_path(path)
        except OSError as e:
            logger.warning(f"[{ErrorKind.ARTIFACT_OPEN_FAILED.value}] 打开文件失败: {path}: {e}")
            return False

        logger.info(f"已打开文件: {path}")
        return True
