"""
Logging setup for SoundScope.

Console output goes to stderr so the CLI can keep stdout for results.
Log files are always JSON, one record per line. Per-call context such as
the recognition ``call_id`` travels in ``extra`` and ends up in the JSON
``extra`` object.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
TEXT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Attributes every LogRecord carries; anything else was passed via ``extra``.
_RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({})).keys()) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with ``extra=`` fields nested under ``extra``."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if extra:
            payload["extra"] = extra

        return json.dumps(payload, default=str)


class ColoredFormatter(logging.Formatter):
    """Text formatter that colours the level name for terminals."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        # Records are shared between handlers; restore the plain level name
        plain = record.levelname
        record.levelname = f"{self.LEVEL_COLORS.get(plain, '')}{plain}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


def _console_formatter(log_format: str, colored: bool) -> logging.Formatter:
    if log_format == "json":
        return JSONFormatter()
    if colored:
        return ColoredFormatter(TEXT_FORMAT, TEXT_DATE_FORMAT)
    return logging.Formatter(TEXT_FORMAT, TEXT_DATE_FORMAT)


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[str] = None,
    max_bytes: int = 10485760,
    backup_count: int = 5,
    console_enabled: bool = True,
    colored: bool = True,
) -> None:
    """
    Replace the root logger's handlers with SoundScope's.

    Args:
        level: Root log level name
        log_format: Console format, "json" or "text"
        log_file: Rotating JSON log file, created with its parent directory
        max_bytes: Size at which the log file rotates
        backup_count: Rotated files to keep
        console_enabled: Log to stderr
        colored: Colour level names in text console output
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))
    root.handlers = []

    if console_enabled:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(_console_formatter(log_format, colored))
        root.addHandler(console)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count)
        file_handler.setFormatter(JSONFormatter())
        root.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LoggerAdapter(logging.LoggerAdapter):
    """Adds fixed context (e.g. ``call_id``) to every record's extra fields."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> "tuple[str, Dict[str, Any]]":
        kwargs["extra"] = {**(kwargs.get("extra") or {}), **self.extra}
        return msg, kwargs


def create_logger_with_context(name: str, context: Dict[str, Any]) -> LoggerAdapter:
    """
    Logger that tags each record with ``context``.

    The orchestrator creates one per recognition call:
        log = create_logger_with_context(__name__, {"call_id": "3f9a1c2e"})
        log.warning("energy unavailable: timed out after 5.0s")
    """
    return LoggerAdapter(get_logger(name), context)
