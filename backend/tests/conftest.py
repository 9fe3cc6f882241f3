"""
pytest 配置与公共 fixtures

使用方式：
    def test_something(orchestrator, make_input):
        path = make_input("sample.csv", stdout=["ok\\n"], exit=0)
        ...

外部工具由 fake_tool.py 模拟（通过 sys.executable 作为 launcher 启动），
其行为由输入文件中的 JSON 计划控制：
    stdout / stderr     逐块写出的文本
    stdout_hex          逐块写出的原始字节（十六进制）
    delay               每块之间的间隔秒数
    artifacts           生成的产物（summary / cal）
    sleep               退出前等待秒数
    signal              以 SIGKILL 结束自身
    exit                退出码
工具会把收到的参数写入工作目录下的 <stem>-argv.json。
"""

from __future__ import annotations

import json
import sys
import tempfile
from pathlib import Path
from typing import Callable, Generator

import pytest

from shcarrier.config import ExecutableConfig, RuntimeConfig
from shcarrier.interfaces import IFileDialog, IPathOpener
from shcarrier.models import DialogResult, FileFilter
from shcarrier.pipeline import ProcessOrchestrator, ResultReporter

FAKE_TOOL_NAME = "fake_tool.py"

FAKE_TOOL_SOURCE = '''
import json
import os
import signal
import sys
import time
from pathlib import Path

argv = sys.argv[1:]
input_path = Path(argv[argv.index("-i") + 1])
plan = json.loads(input_path.read_text(encoding="utf-8") or "{}")
Path(input_path.stem + "-argv.json").write_text(json.dumps(argv), encoding="utf-8")

delay = plan.get("delay", 0)
for chunk in plan.get("stdout", []):
    sys.stdout.buffer.write(chunk.encode("utf-8"))
    sys.stdout.buffer.flush()
    time.sleep(delay)
for chunk in plan.get("stdout_hex", []):
    sys.stdout.buffer.write(bytes.fromhex(chunk))
    sys.stdout.buffer.flush()
    time.sleep(delay)
for chunk in plan.get("stderr", []):
    sys.stderr.buffer.write(chunk.encode("utf-8"))
    sys.stderr.buffer.flush()
    time.sleep(delay)
for name in plan.get("artifacts", []):
    Path(input_path.stem + "-" + name + ".tsv").write_text("id\\tvalue\\n", encoding="utf-8")
time.sleep(plan.get("sleep", 0))
if plan.get("signal"):
    os.kill(os.getpid(), signal.SIGKILL)
sys.exit(plan.get("exit", 0))
'''


# ============================================================================
# 文件 Fixtures
# ============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """临时目录"""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def tool_dir(temp_dir: Path) -> Path:
    """模拟工具所在目录（与数据目录分开）"""
    path = temp_dir / "app"
    path.mkdir()
    (path / FAKE_TOOL_NAME).write_text(FAKE_TOOL_SOURCE, encoding="utf-8")
    return path


@pytest.fixture
def data_dir(temp_dir: Path) -> Path:
    """输入数据目录"""
    path = temp_dir / "data"
    path.mkdir()
    return path


@pytest.fixture
def make_input(data_dir: Path) -> Callable[..., Path]:
    """生成输入文件，内容为模拟工具的执行计划"""

    def _make(name: str = "sample.csv", **plan) -> Path:
        path = data_dir / name
        path.write_text(json.dumps(plan), encoding="utf-8")
        return path

    return _make


def _read_argv(input_path: Path) -> list[str] | None:
    argv_file = input_path.parent / f"{input_path.stem}-argv.json"
    if not argv_file.exists():
        return None
    return json.loads(argv_file.read_text(encoding="utf-8"))


@pytest.fixture
def read_argv() -> Callable[[Path], list[str] | None]:
    """读取模拟工具记录的参数（未启动则返回 None）"""
    return _read_argv


# ============================================================================
# 配置 Fixtures
# ============================================================================

@pytest.fixture
def runtime_config(tool_dir: Path) -> RuntimeConfig:
    """运行期配置（指向模拟工具）"""
    return RuntimeConfig(
        executable=ExecutableConfig(
            name=FAKE_TOOL_NAME,
            development_dir=str(tool_dir),
            launcher=[sys.executable],
        )
    )


# ============================================================================
# 协作方替身
# ============================================================================

class RecordingOpener(IPathOpener):
    """记录打开请求的默认程序替身"""

    def __init__(self, error: OSError | None = None):
        self.opened: list[Path] = []
        self.error = error

    def open_path(self, path: Path) -> None:
        if self.error is not None:
            raise self.error
        self.opened.append(path)


class FakeDialog(IFileDialog):
    """返回预设结果的文件对话框替身"""

    def __init__(self, result: DialogResult):
        self.result = result
        self.seen_filters: list[FileFilter] | None = None

    def show_open_dialog(self, filters: list[FileFilter]) -> DialogResult:
        self.seen_filters = filters
        return self.result


@pytest.fixture
def opener() -> RecordingOpener:
    return RecordingOpener()


@pytest.fixture
def reporter(opener: RecordingOpener) -> ResultReporter:
    return ResultReporter(opener=opener)


@pytest.fixture
def orchestrator(runtime_config: RuntimeConfig, reporter: ResultReporter) -> ProcessOrchestrator:
    return ProcessOrchestrator(runtime_config, reporter=reporter)


@pytest.fixture
def make_dialog() -> Callable[[DialogResult], FakeDialog]:
    return FakeDialog
