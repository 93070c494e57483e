#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Logging configuration for Playlength.

Structured JSON logging, a context-carrying logger wrapper and the
setup function called by the server entry point.
"""

import json
import logging
import logging.handlers
import sys
from typing import Any, Dict, Optional

LOG_FILE = "playlength_backend.log"


class JSONFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record):
        log_data = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "name": record.name,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info)
            }

        # Context fields attached by StructuredLogger
        extra_data = getattr(record, "data", None)
        if isinstance(extra_data, dict):
            for key, value in extra_data.items():
                log_data.setdefault(key, value)

        return json.dumps(log_data, default=str)


class StructuredLogger:
    """Logger that attaches keyword arguments as structured context.

    ``logger.info("Fetched page", playlist_id=pid, page=3)`` keeps the message
    readable in plain-text output while the JSON formatter emits the keywords
    as separate fields.
    """

    def __init__(self, name: str, extra: Optional[Dict[str, Any]] = None):
        self.logger = logging.getLogger(name)
        self.extra = extra or {}

    def bind(self, **context) -> "StructuredLogger":
        """Return a logger for the same name with additional fixed context."""
        return StructuredLogger(self.logger.name, {**self.extra, **context})

    def _log(self, level: int, message: str, exc_info=None, **kwargs):
        if not self.logger.isEnabledFor(level):
            return
        extra_data = {**self.extra, **kwargs}
        self.logger.log(level, message, exc_info=exc_info, extra={"data": extra_data})

    def debug(self, message: str, **kwargs):
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info=False, **kwargs):
        """Log an error; pass ``exc_info=True`` from inside an except block for the traceback."""
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def critical(self, message: str, exc_info=True, **kwargs):
        self._log(logging.CRITICAL, message, exc_info=exc_info, **kwargs)


def setup_logging(log_level_console=logging.INFO, log_level_file=logging.DEBUG,
                  structured=True, log_file: Optional[str] = LOG_FILE):
    """Configure logging to console and, unless ``log_file`` is None, a rotating file."""
    root_logger = logging.getLogger()

    # Remove any existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    formatter = JSONFormatter() if structured else logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    levels = [log_level_console]
    if log_file:
        try:
            file_handler = logging.handlers.RotatingFileHandler(
                log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
            )
            file_handler.setFormatter(formatter)
            file_handler.setLevel(log_level_file)
            root_logger.addHandler(file_handler)
            levels.append(log_level_file)
        except OSError as e:
            print(f"Warning: Could not create log file '{log_file}': {e}", file=sys.stderr)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level_console)
    root_logger.addHandler(console_handler)

    root_logger.setLevel(min(levels))

    # Quieten the Google client's own discovery logging
    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)

    logging.getLogger(__name__).info("Logging setup complete.")
