"""
Logging setup.

JSON lines (python-json-logger) in deployed environments, a plain one-line
format for local runs. Records logged with `extra={"job_id": ..., "sourcer_id": ...}`
keep those keys as top-level JSON fields.
"""

import logging
import sys
from typing import Any, Dict
from datetime import datetime, timezone
from pythonjsonlogger import jsonlogger

# Third-party loggers and the level they are capped at
QUIET_LOGGERS: Dict[str, int] = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "anthropic": logging.WARNING,
    "openai": logging.WARNING,
    "kombu": logging.WARNING,
    "celery": logging.INFO,
}

JSON_FORMAT = "%(timestamp)s %(level)s %(logger)s %(message)s"
TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Adds timestamp, level and origin to every record; file and line from WARNING up."""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat().replace("+00:00", "Z")
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["module"] = record.module
        log_record["function"] = record.funcName

        if record.levelno >= logging.WARNING:
            log_record["line"] = record.lineno
            log_record["pathname"] = record.pathname


def _build_formatter(json_logs: bool) -> logging.Formatter:
    if json_logs:
        return CustomJsonFormatter(JSON_FORMAT)
    return logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def setup_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    """
    Replace the root logger's handlers with a single stdout handler.

    Args:
        log_level: Level name; unknown names fall back to INFO
        json_logs: JSON output when True, plain text otherwise
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_build_formatter(json_logs))

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root_logger.addHandler(handler)

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)
