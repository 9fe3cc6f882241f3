"""
处理模型 - 定义一次文件处理的请求、状态与结果

UI 边界上的字段名沿用驼峰形式（useArea/stdName/exitCode/outputFiles...），
模型内部统一使用下划线命名，两者通过别名互通。
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

SUMMARY_SUFFIX = "-summary.tsv"
CALCULATION_SUFFIX = "-cal.tsv"
STD_SENTINEL = "STD"


class RunState(str, Enum):
    """处理运行状态"""
    IDLE = "idle"
    VALIDATING = "validating"
    LAUNCHING = "launching"
    RUNNING = "running"
    FINALIZING = "finalizing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.SUCCEEDED, RunState.FAILED)


class ErrorKind(str, Enum):
    """错误类型"""
    INPUT_NOT_FOUND = "input_not_found"
    EXECUTABLE_NOT_FOUND = "executable_not_found"
    LAUNCH_FAILED = "launch_failed"
    PROCESS_ERROR = "process_error"
    NON_ZERO_EXIT = "non_zero_exit"
    ARTIFACT_OPEN_FAILED = "artifact_open_failed"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"


class ProcessingOptions(BaseModel):
    """处理选项（每次运行由调用方重新提供）"""
    use_area: bool = Field(False, description="追加 -Area")
    std_name: str = Field(STD_SENTINEL, description="标准品名称，STD 表示不指定")
    use_gbk: bool = Field(False, alias="useGBK", description="追加 -GBK")
    dev_mode: bool = Field(False, description="追加 -dev")

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "frozen": True,
    }


class ProcessingRequest(BaseModel):
    """处理请求"""
    input_path: Path
    options: ProcessingOptions = Field(default_factory=ProcessingOptions)

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "frozen": True,
    }


class ArtifactPaths(BaseModel):
    """预期产物路径（由输入路径按命名规则推导）"""
    summary: Path
    calculation: Path

    model_config = {"frozen": True}

    @classmethod
    def from_input(cls, input_path: Path) -> ArtifactPaths:
        """<dir>/<stem>.<ext> -> <dir>/<stem>-summary.tsv, <dir>/<stem>-cal.tsv"""
        input_path = Path(input_path)
        stem = input_path.stem
        return cls(
            summary=input_path.parent / f"{stem}{SUMMARY_SUFFIX}",
            calculation=input_path.parent / f"{stem}{CALCULATION_SUFFIX}",
        )

    def existing(self) -> OutputFiles:
        """逐个检查产物是否存在，不存在的字段置空"""
        return OutputFiles(
            summary=self.summary if self.summary.exists() else None,
            calculation=self.calculation if self.calculation.exists() else None,
        )


class OutputFiles(BaseModel):
    """实际产出的文件"""
    summary: Path | None = None
    calculation: Path | None = None

    model_config = {"frozen": True}


class ProcessingResult(BaseModel):
    """处理结果（每次运行只产生一次）"""
    run_id: str
    input_path: Path
    success: bool
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    output_files: OutputFiles = Field(default_factory=OutputFiles)
    error_kind: ErrorKind | None = None
    error: str | None = Field(None, description="错误描述（进程非零退出时不合成，见 stderr）")
    attempted_path: Path | None = Field(None, description="未找到可执行文件时尝试的路径")

    # 时间戳
    started_at: datetime | None = None
    finished_at: datetime | None = None

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "frozen": True,
    }

    @property
    def duration_sec(self) -> float | None:
        if self.started_at is None or self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()

    def to_payload(self) -> dict[str, Any]:
        """导出为 UI 层使用的驼峰 JSON 结构"""
        return self.model_dump(mode="json", by_alias=True)
