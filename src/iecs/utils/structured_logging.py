"""Structured logging utilities for iecs."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

__all__ = ["JSONFormatter", "setup_structured_logging"]

_LOG_FILENAME = "iecs.jsonl"
_NOISY_THIRD_PARTY_LOGGERS = (
    "asyncio",
    "boto3",
    "botocore",
    "urllib3",
)

_LOG_RECORD_IGNORED_FIELDS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "exc_info",
    "exc_text",
    "stack_info",
    "taskName",
    "getMessage",
}


class JSONFormatter(logging.Formatter):
    """Format log records as JSON Lines."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        entry = {
            "timestamp": _to_iso_millis(
                datetime.fromtimestamp(record.created, tz=timezone.utc)
            ),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _LOG_RECORD_IGNORED_FIELDS:
                continue
            entry[key] = _json_safe(value)

        return json.dumps(entry)


def setup_structured_logging(
    logs_dir: Optional[Path],
    *,
    verbose: bool = False,
    level: str = "INFO",
) -> Optional[Path]:
    """Route iecs logs to a JSONL file and, when verbose, to stderr.

    Returns the log file path, or ``None`` if the directory is not writable
    (logging then stays console-only).
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.DEBUG)

    log_file = _add_file_handler(root_logger, logs_dir, level)
    if verbose:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(
            logging.Formatter("%(levelname)s %(name)s: %(message)s")
        )
        root_logger.addHandler(console_handler)

    _limit_third_party_noise()
    return log_file


def _add_file_handler(
    root_logger: logging.Logger, logs_dir: Optional[Path], level: str
) -> Optional[Path]:
    if logs_dir is None:
        return None
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        path = logs_dir / _LOG_FILENAME
        handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    except OSError:
        return None
    handler.setLevel(logging.getLevelName(str(level).upper()))
    handler.setFormatter(JSONFormatter())
    root_logger.addHandler(handler)
    return path


def _limit_third_party_noise() -> None:
    for name in _NOISY_THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _to_iso_millis(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def _json_safe(value: object) -> object:
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value
