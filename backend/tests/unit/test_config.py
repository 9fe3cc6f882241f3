"""
配置加载单元测试

每个模块完成后必须运行：pytest tests/unit/test_config.py -v
"""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from shcarrier.config import ProcessConfig, RuntimeConfig, configure_logging
from shcarrier.config.runtime_config import LoggingConfig
from shcarrier.interfaces import ConfigError

SAMPLE_YAML = """
runtime_options:
  executable:
    name:
      default: Tool.exe
      desc: 工具文件名
    development_dir: bin
    launcher: [wine]
  process:
    encoding:
      default: gbk
    chunk_size: 1024
  dialog:
    filters:
      - name: Data Files
        extensions: [csv]
  logging:
    log_file: logs/app.log
"""


class TestRuntimeConfig:
    """运行期配置测试"""

    def test_default_config(self):
        """测试默认配置"""
        config = RuntimeConfig()
        assert config.executable.name == "SHCarrier.exe"
        assert config.executable.production is False
        assert config.executable.launcher == []
        assert config.process.timeout_sec is None
        assert config.process.encoding == "utf-8"
        assert config.dialog.enforce_extensions is True
        assert [f.name for f in config.dialog.filters] == ["Data Files", "All Files"]

    def test_from_yaml(self, temp_dir: Path):
        """测试从YAML加载并展平 default 写法"""
        yaml_path = temp_dir / "runtime.yaml"
        yaml_path.write_text(SAMPLE_YAML, encoding="utf-8")

        config = RuntimeConfig.from_yaml(yaml_path)

        assert config.executable.name == "Tool.exe"
        assert config.executable.launcher == ["wine"]
        assert config.process.encoding == "gbk"
        assert config.process.chunk_size == 1024
        assert [f.extensions for f in config.dialog.filters] == [["csv"]]

    def test_relative_paths_resolved(self, temp_dir: Path):
        """测试相对路径基于配置文件目录解析"""
        yaml_path = temp_dir / "runtime.yaml"
        yaml_path.write_text(SAMPLE_YAML, encoding="utf-8")

        config = RuntimeConfig.from_yaml(yaml_path)

        assert Path(config.executable.development_dir) == (temp_dir / "bin").resolve()
        assert Path(config.logging.log_file) == (temp_dir / "logs" / "app.log").resolve()

    def test_missing_yaml_defaults(self, temp_dir: Path):
        config = RuntimeConfig.from_yaml(temp_dir / "absent.yaml")
        assert config.executable.name == "SHCarrier.exe"

    def test_invalid_yaml(self, temp_dir: Path):
        yaml_path = temp_dir / "broken.yaml"
        yaml_path.write_text("runtime_options: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigError):
            RuntimeConfig.from_yaml(yaml_path)

    def test_env_override(self, temp_dir: Path, monkeypatch):
        """测试环境变量覆盖YAML"""
        yaml_path = temp_dir / "runtime.yaml"
        yaml_path.write_text(SAMPLE_YAML, encoding="utf-8")
        monkeypatch.setenv("SHCARRIER_PROCESS__TIMEOUT_SEC", "30")
        monkeypatch.setenv("SHCARRIER_EXECUTABLE__PRODUCTION", "true")

        config = RuntimeConfig.from_yaml(yaml_path)

        assert config.process.timeout_sec == 30
        assert config.process.encoding == "gbk"
        assert config.executable.production is True
        assert config.executable.name == "Tool.exe"


class TestProcessConfig:
    """进程配置校验测试"""

    def test_unknown_encoding(self):
        with pytest.raises(ValidationError):
            ProcessConfig(encoding="no-such-codec")

    def test_non_positive_chunk_size(self):
        with pytest.raises(ValidationError):
            ProcessConfig(chunk_size=0)

    def test_non_positive_timeout_disabled(self):
        assert ProcessConfig(timeout_sec=0).timeout_sec is None


class TestConfigureLogging:
    """日志初始化测试"""

    def test_level_from_config(self, monkeypatch):
        monkeypatch.delenv("SHCARRIER_LOG_LEVEL", raising=False)
        root = logging.getLogger()
        previous = root.level
        try:
            assert configure_logging(LoggingConfig(log_level="WARNING")) == logging.WARNING
            assert root.level == logging.WARNING
        finally:
            root.setLevel(previous)

    def test_env_overrides_level(self, monkeypatch):
        monkeypatch.setenv("SHCARRIER_LOG_LEVEL", "debug")
        root = logging.getLogger()
        previous = root.level
        try:
            assert configure_logging(LoggingConfig(log_level="ERROR")) == logging.DEBUG
        finally:
            root.setLevel(previous)

    def test_file_handler(self, temp_dir: Path, monkeypatch):
        monkeypatch.delenv("SHCARRIER_LOG_LEVEL", raising=False)
        log_file = temp_dir / "logs" / "shcarrier.log"
        root = logging.getLogger()
        previous = root.level
        before = list(root.handlers)
        try:
            configure_logging(LoggingConfig(log_to_file=True, log_file=str(log_file)))
            configure_logging(LoggingConfig(log_to_file=True, log_file=str(log_file)))
            added = [
                h for h in root.handlers
                if h not in before and isinstance(h, logging.FileHandler)
            ]
            assert len(added) == 1
            logging.getLogger("shcarrier.test").info("写入日志")
            added[0].flush()
            assert "写入日志" in log_file.read_text(encoding="utf-8")
        finally:
            for handler in root.handlers[:]:
                if handler not in before:
                    root.removeHandler(handler)
                    handler.close()
            root.setLevel(previous)
