"""
Logging Setup Module.

Builds the application logger used across the health report pipeline.
Structured (dict) log messages are rendered as single-line JSON so they can be
grepped and shipped as-is; plain string messages are left untouched.
"""

import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional


class StructuredFormatter(logging.Formatter):
    """Formatter that serializes dict messages to JSON."""

    def format(self, record: logging.LogRecord) -> str:
        if isinstance(record.msg, dict):
            payload = {
                "time": self.formatTime(record, self.datefmt),
                "level": record.levelname,
                "logger": record.name,
                **record.msg,
            }
            if record.exc_info:
                payload["exception"] = self.formatException(record.exc_info)
            return json.dumps(payload, default=str)
        return super().format(record)


class LogManager:
    """
    Creates and configures the named application logger.

    Attributes:
        logger (logging.Logger): Configured logger instance
    """

    def __init__(
        self,
        app_name: str,
        log_dir: Optional[str] = None,
        development: bool = False,
        level: int = logging.INFO,
    ):
        """
        Initialize logging handlers.

        Args:
            app_name (str): Logger name
            log_dir (Optional[str]): Directory for the rotating log file, if any
            development (bool): Force debug level on the console handler
            level (int): Logging level
        """
        self.logger = logging.getLogger(app_name)
        self.logger.setLevel(logging.DEBUG if development else level)
        self.logger.propagate = False

        # Re-importing config must not stack handlers
        if self.logger.handlers:
            return

        formatter = StructuredFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        )

        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(formatter)
        self.logger.addHandler(console)

        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                os.path.join(log_dir, f"{app_name}.log"),
                maxBytes=5 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)
