"""Logging for the API: console output, rotating JSON file, per-run session log.

Services log through :func:`get_logger` and attach structured context with
``extra={...}`` such as budget ids and amounts. The JSON file keeps
those fields under ``extra`` and, for lines emitted while serving a request,
the HTTP method and path under ``request``.
"""

from __future__ import annotations

import atexit
import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List

from flask import has_request_context, request

from .config import BaseConfig

ROOT_LOGGER_NAME = "smartfinance"
LOG_FILE_NAME = "smartfinance.log"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5

_SESSION_BUFFER: List[str] = []
_SESSION_START = datetime.now()
_SESSION_LOG_PATH: Path | None = None
_FLUSH_REGISTERED = False

# Attributes every LogRecord carries; anything else arrived via ``extra``.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}


class SessionBufferHandler(logging.Handler):
    """Keeps this run's console-formatted lines for the exit-time session log."""

    def __init__(self, formatter: logging.Formatter):
        super().__init__()
        self.setFormatter(formatter)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            _SESSION_BUFFER.append(self.format(record))
        except Exception:  # pragma: no cover
            self.handleError(record)


class JSONFormatter(logging.Formatter):
    """One JSON object per line for the rotating log file."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if has_request_context():
            entry["request"] = {"method": request.method, "path": request.path}

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": self.formatException(record.exc_info),
            }

        extra = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=str)


def _console_handler(config: BaseConfig) -> logging.StreamHandler:
    if config.DEV_MODE:
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)-8s [%(name)s.%(funcName)s:%(lineno)d] %(message)s",
            datefmt="%H:%M:%S",
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    handler = logging.StreamHandler()
    handler.setLevel(logging.INFO if config.DEV_MODE else logging.WARNING)
    handler.setFormatter(formatter)
    return handler


def _file_handler(log_file: Path) -> logging.handlers.RotatingFileHandler:
    handler = logging.handlers.RotatingFileHandler(
        filename=log_file,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(logging.INFO)
    handler.setFormatter(JSONFormatter())
    return handler


def setup_logging(config: BaseConfig) -> logging.Logger:
    """Install the ``smartfinance`` handlers and register the session log flush.

    Safe to call once per app instance; earlier handlers are closed and replaced.
    """
    logs_dir = Path(config.DATA_DIR) / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.INFO)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = _console_handler(config)
    log_file = logs_dir / LOG_FILE_NAME
    session = SessionBufferHandler(console.formatter)
    session.setLevel(logging.DEBUG)
    for handler in (console, _file_handler(log_file), session):
        logger.addHandler(handler)

    global _SESSION_LOG_PATH, _FLUSH_REGISTERED  # noqa: PLW0603
    _SESSION_LOG_PATH = logs_dir / _SESSION_START.strftime("session_%Y%m%d_%H%M%S.log")
    if not _FLUSH_REGISTERED:
        atexit.register(_flush_session)
        _FLUSH_REGISTERED = True

    logger.info(
        "Logging initialized",
        extra={
            "dev_mode": config.DEV_MODE,
            "log_file": str(log_file),
            "data_dir": str(config.DATA_DIR),
        },
    )
    return logger


def _flush_session() -> None:  # pragma: no cover - runs at interpreter exit
    if not _SESSION_BUFFER or _SESSION_LOG_PATH is None:
        return
    header = (
        "# Smart Finance Tracker session log\n"
        f"# Started: {_SESSION_START.isoformat()}\n"
        f"# Entries: {len(_SESSION_BUFFER)}\n\n"
    )
    try:
        _SESSION_LOG_PATH.parent.mkdir(parents=True, exist_ok=True)
        _SESSION_LOG_PATH.write_text(header + "\n".join(_SESSION_BUFFER) + "\n", encoding="utf-8")
    except OSError as exc:
        sys.stderr.write(f"Failed to flush session log: {exc}\n")


def get_logger(name: str) -> logging.Logger:
    """Logger under ``smartfinance``; already-qualified names pass through."""

    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def session_log_path() -> Path | None:
    return _SESSION_LOG_PATH
