from __future__ import annotations

import logging
import os
from pathlib import Path

from .runtime_config import LoggingConfig

_DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DEFAULT_DATEFMT = "%H:%M:%S"
_LEVEL_ENV_VAR = "SHCARRIER_LOG_LEVEL"


def _coerce_level(value: str | None, fallback: int) -> int:
    if not value:
        return fallback
    text = value.strip()
    if not text:
        return fallback
    if text.isdigit():
        return int(text)
    candidate = getattr(logging, text.upper(), None)
    if isinstance(candidate, int):
        return candidate
    return fallback


def configure_logging(config: LoggingConfig | None = None) -> int:
    """
    Configure the root logger once and return the effective level.

    SHCARRIER_LOG_LEVEL overrides the configured level. Existing root
    handlers are kept so embedding applications stay in control.
    """
    config = config or LoggingConfig()
    level = _coerce_level(config.log_level, logging.INFO)
    level = _coerce_level(os.getenv(_LEVEL_ENV_VAR), level)

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=_DEFAULT_FORMAT, datefmt=_DEFAULT_DATEFMT)
    root.setLevel(level)

    if config.log_to_file and config.log_file:
        log_file = Path(config.log_file)
        if not any(
            isinstance(h, logging.FileHandler) and Path(h.baseFilename) == log_file.absolute()
            for h in root.handlers
        ):
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(log_file, encoding="utf-8")
            handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
            root.addHandler(handler)
    return level
