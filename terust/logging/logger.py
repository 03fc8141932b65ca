# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for terust.

Every log entry is a single JSON line with a timestamp, level, source module
and message. Log lines go to stderr; stdout belongs to the test report, so a
user can pipe the report somewhere without dragging diagnostics along.

How this works:
  - We use Python's standard `logging` module under the hood, but replace the
    default formatter with JsonFormatter, which serializes every log record
    into a single JSON line.
  - One handler for stderr, and optionally one for a file.
  - The factory function `get_logger` is the only way to create loggers.

The JSON structure looks like:
  {"ts": "2026-...", "level": "INFO", "module": "terust.harness.loop", "msg": "page fetched", ...}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, TextIO

# LogRecord attributes that are plumbing, not caller context.
_STANDARD_ATTRS: frozenset[str] = frozenset({
    "name",
    "msg",
    "args",
    "created",
    "relativeCreated",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "pathname",
    "filename",
    "module",
    "levelno",
    "levelname",
    "processName",
    "process",
    "threadName",
    "thread",
    "message",
    "msecs",
    "taskName",
})


class JsonFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Each log entry contains four mandatory fields:
      ts    : ISO 8601 UTC timestamp
      level : log level name
      module: the logger name (usually the Python module path)
      msg   : the formatted message string

    If the log call includes `extra` keyword args, those get merged into the
    JSON object as additional context fields. This is how the harness attaches
    structured data like item ids, exit codes and cursors.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)


def get_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Create a structured JSON logger.

    This is the only sanctioned way to get a logger in terust. Every module
    should call this once at the top and use the returned logger instance.

    Args:
        name: Logger name, typically __name__ of the calling module.
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
        log_file: Optional path to a log file. If provided, logs go to both
                  the stream and the file.
        stream: Where console log lines go. Defaults to sys.stderr at the time
                the handler is created.

    Returns:
        A configured logging.Logger that outputs structured JSON.
    """
    logger = logging.getLogger(name)
    level = _resolve_log_level(log_level)
    logger.setLevel(level)

    # Avoid stacking handlers if get_logger is called multiple times for the
    # same name (happens in tests).
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    formatter = JsonFormatter()

    stream_handler = logging.StreamHandler(stream=stream if stream is not None else sys.stderr)
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Don't propagate to root logger; we handle all output ourselves.
    logger.propagate = False

    return logger


def set_package_log_level(log_level: str, prefix: str = "terust") -> None:
    """
    Re-level every logger already created under `prefix`.

    Module loggers are created at import time with the default level, before
    the CLI knows what --log-level the user asked for. Bootstrap calls this
    once the config is loaded.
    """
    level = _resolve_log_level(log_level)
    for name in list(logging.Logger.manager.loggerDict):
        if name == prefix or name.startswith(prefix + "."):
            existing = logging.getLogger(name)
            existing.setLevel(level)
            for handler in existing.handlers:
                handler.setLevel(level)


def attach_package_log_file(log_file: Path, prefix: str = "terust") -> logging.FileHandler:
    """
    Send every logger under `prefix` to one shared JSON log file as well.

    Like the level, the file is only known after the config is loaded, and
    by then the module loggers already exist with their stderr handler. A
    logger that already writes to this file is left alone, so calling this
    twice doesn't duplicate lines.

    Returns:
        The shared file handler.
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)
    target = str(log_file.resolve())

    # No handler level: each logger's own level does the filtering.
    shared = logging.FileHandler(target, encoding="utf-8")
    shared.setFormatter(JsonFormatter())

    for name, existing in list(logging.Logger.manager.loggerDict.items()):
        if name != prefix and not name.startswith(prefix + "."):
            continue
        if not isinstance(existing, logging.Logger):
            continue
        already = any(
            isinstance(handler, logging.FileHandler) and handler.baseFilename == target
            for handler in existing.handlers
        )
        if already:
            continue
        existing.addHandler(shared)

    return shared
