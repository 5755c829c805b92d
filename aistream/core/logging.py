"""
Logging configuration for AIStream application.

Human-readable lines go to stdout, JSON lines to a daily file under
LOG_DIR. Records logged through a context logger carry the group and
reply correlation id into the JSON output.
"""

import json
import logging
import os
import sys
import time
import traceback
from typing import Any, Dict

from aistream.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Force DEBUG through env without touching .env
FORCE_DEBUG = os.getenv('FORCE_DEBUG', 'False').lower() == 'true'


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with any attached context merged in."""

    def format(self, record):
        log_data = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info)
            }

        context = getattr(record, "context", None)
        if context:
            log_data.update(context)

        return json.dumps(log_data, default=str)


def setup_logging(force_debug: bool = False):
    """
    Configure the root logger. Safe to call again: previous handlers
    are closed before new ones are installed.

    Args:
        force_debug: Force DEBUG level regardless of settings
    """
    level = logging.DEBUG if (force_debug or FORCE_DEBUG or settings.DEBUG) else logging.INFO

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        if isinstance(handler, logging.FileHandler):
            handler.close()
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(console_handler)

    os.makedirs(settings.LOG_DIR, exist_ok=True)
    log_file = os.path.join(settings.LOG_DIR, f"aistream_{time.strftime('%Y%m%d')}.log")
    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(level)
    file_handler.setFormatter(JsonFormatter())
    root_logger.addHandler(file_handler)

    # uvicorn installs its own handlers; keep one copy of each line
    for logger_name in ["uvicorn", "uvicorn.access", "uvicorn.error"]:
        uvicorn_logger = logging.getLogger(logger_name)
        for handler in list(uvicorn_logger.handlers):
            uvicorn_logger.removeHandler(handler)
        uvicorn_logger.propagate = False

    # The OpenAI SDK logs every HTTP request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    root_logger.info(
        f"Logging system initialized. Application: {settings.APP_NAME}, "
        f"Version: {settings.VERSION}, Level: {logging.getLevelName(level)}"
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class ContextLogger(logging.LoggerAdapter):
    """Attaches a fixed context dict to every record as ``record.context``."""

    def process(self, msg, kwargs):
        extra = kwargs.setdefault("extra", {})
        extra["context"] = {**self.extra, **extra.get("context", {})}
        return msg, kwargs


def get_context_logger(name: str, context: Dict[str, Any]) -> ContextLogger:
    """
    Get a logger that tags its records with the given context, e.g.
    ``{"group": "room1", "correlation_id": "..."}``.
    """
    return ContextLogger(get_logger(name), context)
