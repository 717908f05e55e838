"""
Logging setup for custos.

The library only creates loggers under the ``custos`` tree; it never
installs handlers on import. Applications call configure_logging once.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from custos.core.config import Config

LOGGER_NAME = "custos"

_TEXT_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JsonFormatter(logging.Formatter):
    """One JSON object per line; messages with quotes stay valid JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, _DATE_FORMAT),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def _resolve_level(level: int | str | None) -> int | str:
    if level is None:
        level = os.environ.get("CUSTOS_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        return level.upper()
    return level


def configure_logging(
    level: int | str | None = None,
    json_format: bool = False,
) -> logging.Logger:
    """
    Configure the custos logger.

    Args:
        level: Logging level (e.g., logging.INFO, "debug"). Defaults to
               CUSTOS_LOG_LEVEL, then INFO.
        json_format: Whether to emit one JSON object per line

    Returns:
        The configured logger instance.
    """
    level = _resolve_level(level)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Re-configuring replaces the previous handler
    if logger.handlers:
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT, datefmt=_DATE_FORMAT))

    logger.addHandler(handler)
    logger.propagate = False
    return logger


def configure_from_config(config: Config) -> logging.Logger:
    """Configure logging from a Config; production environments log JSON."""
    return configure_logging(config.log_level, json_format=config.env == "production")


def get_logger(name: str | None = None) -> logging.Logger:
    """Get a child logger of custos."""
    if name:
        return logging.getLogger(f"{LOGGER_NAME}.{name}")
    return logging.getLogger(LOGGER_NAME)
