"""Structured logging configuration"""
import json
import logging
import os
import sys
from datetime import date, datetime, timezone
from typing import Any, Dict

LOGGER_NAME = "blog_api"


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with caller information."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).strftime(
                "%Y-%m-%d %H:%M:%S"
            ),
            "level": record.levelname,
            "logger": record.name,
            "caller": f"{record.module}:{record.lineno}",
            "message": record.getMessage(),
        }

        for key in ("user_id", "method", "path", "status", "duration_ms"):
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False)


def setup_logging(log_level: str = "INFO", log_dir: str | None = None) -> logging.Logger:
    """
    Configure the ``blog_api`` logger tree.

    Logs go to stdout; when *log_dir* is given they are also appended to
    ``<log_dir>/<YYYY-MM-DD>.log``.  Calling this again replaces the
    handlers rather than stacking them.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level.upper())
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    formatter = JSONFormatter()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        path = os.path.join(log_dir, f"{date.today().isoformat()}.log")
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
