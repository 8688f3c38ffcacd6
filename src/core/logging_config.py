"""
Philosearch Logging Setup
=========================

Root logger configuration for the CLI and for services embedding the
retrieval library.

Two output formats:
- text: one aligned line per record, for terminals
- json: one object per line, for log shippers

Retrieval runs its embedding and corpus calls on worker threads named
``retrieval_N``; both formats record the thread so a slow pool query can
be traced back to its request.

Usage:
    from src.core.logging_config import setup_logging

    setup_logging()                              # LOG_LEVEL / LOG_JSON / LOG_FILE
    setup_logging(level="DEBUG", json_output=True)
"""

import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from typing import Optional

from .config import LoggingConfig

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(threadName)-12s %(name)s: %(message)s"
TEXT_DATEFMT = "%H:%M:%S"

# Loggers of HTTP clients used by openai; INFO there is one line per request
NOISY_LOGGERS = ("openai", "httpx", "httpcore")


class JSONFormatter(logging.Formatter):
    """
    Renders a record as a single JSON object.

    Keys always present: ts, level, logger, thread, msg. Retrieval code
    may attach any of STRUCTURED_FIELDS through ``extra=``; unset ones
    are omitted.
    """

    STRUCTURED_FIELDS = ("pool_id", "author", "top_k", "duration", "stage")

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "msg": record.getMessage(),
        }
        entry.update(
            (name, getattr(record, name))
            for name in self.STRUCTURED_FIELDS
            if getattr(record, name, None) is not None
        )
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _rotating_handler(path: str, max_bytes: int, backup_count: int) -> logging.Handler:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    return logging.handlers.RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)


def setup_logging(
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
    log_file: Optional[str] = None,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> logging.Logger:
    """
    Replace the root logger's handlers.

    Arguments left as None fall back to LoggingConfig (LOG_LEVEL,
    LOG_JSON, LOG_FILE).

    Args:
        level: Level name; unknown names mean INFO
        json_output: Emit JSON lines instead of text
        log_file: Also write to this file, rotated at max_bytes
        max_bytes: Rotation size of the log file
        backup_count: Rotated files kept

    Returns:
        The configured root logger
    """
    defaults = LoggingConfig()
    level = (level or defaults.level).upper()
    json_output = defaults.json_logs if json_output is None else json_output
    log_file = log_file or defaults.log_file

    if json_output:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATEFMT)

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(_rotating_handler(log_file, max_bytes, backup_count))

    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.debug(f"Logging ready (level={level}, json={json_output}, file={log_file or '-'})")
    return root
