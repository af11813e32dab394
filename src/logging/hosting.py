"""Structured JSON logging for the Lambda hosting layer.

Logs go to stdout as JSON lines, which CloudWatch Logs ingests as-is.
Optional file output via the LOG_FILE env var.
"""

import json
import logging
import sys
import time
from contextvars import ContextVar
from datetime import datetime, timezone

from src.config.settings import get_settings

LOGGER_NAME = "lambda_hosting"

# Lambda request id of the invocation being processed
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": request_id_var.get(""),
        }
        # Merge any extra fields passed via `extra={"log_data": {...}}`
        if hasattr(record, "log_data"):
            log_entry.update(record.log_data)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def setup_logging() -> None:
    """Configure the hosting logger with JSON output."""
    settings = get_settings()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    logger.handlers.clear()

    formatter = JSONFormatter()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    logger.addHandler(stdout_handler)

    if settings.log_file:
        file_handler = logging.FileHandler(settings.log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # Lambda also captures the root logger; avoid duplicate lines
    logger.propagate = False


def get_logger(name: str = "") -> logging.Logger:
    """Return the hosting logger, or a child of it."""
    if name:
        return logging.getLogger(f"{LOGGER_NAME}.{name}")
    return logging.getLogger(LOGGER_NAME)


class RequestTimer:
    """Context manager to measure invocation latency."""

    def __init__(self):
        self.start_time: float = 0
        self.elapsed_ms: float = 0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed_ms = round((time.perf_counter() - self.start_time) * 1000, 2)
