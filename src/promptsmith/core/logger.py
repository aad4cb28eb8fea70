"""Structured JSON logging system.

PromptSmithLogger emits one JSON object per line. Console output is always on;
a rotating file handler is added only when a log directory is configured.
"""

import json
import logging
import os
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

LOGGER_NAME = "promptsmith"


class PromptSmithLogger:
    """Structured JSON logger with optional rotation and timing utilities.

    Supports structured key-value logging and operation timing.
    """

    log_dir: Path | None
    log_file: Path | None

    def __init__(
        self,
        log_dir: str | None = None,
        max_bytes: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5,
        level: str | None = None,
    ) -> None:
        """Initialize logger.

        Args:
            log_dir: Directory for log files (falls back to PROMPTSMITH_LOG_DIR;
                no file logging when neither is set)
            max_bytes: Maximum size before rotation (default 10MB)
            backup_count: Number of backup files to keep (default 5)
            level: Log level (DEBUG/INFO/WARN/ERROR), reads from PROMPTSMITH_LOG_LEVEL env if not provided
        """
        self._logger = logging.getLogger(LOGGER_NAME)
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False

        for handler in self._logger.handlers[:]:
            handler.close()
            self._logger.removeHandler(handler)

        directory = log_dir or os.environ.get("PROMPTSMITH_LOG_DIR")
        if directory:
            self.log_dir = Path(directory).expanduser()
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = self.log_dir / "promptsmith.log"

            file_handler = RotatingFileHandler(
                self.log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
            )
            file_handler.setFormatter(JSONFormatter())
            self._logger.addHandler(file_handler)
        else:
            self.log_dir = None
            self.log_file = None

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(JSONFormatter())
        self._logger.addHandler(console_handler)

        log_level = level or os.environ.get("PROMPTSMITH_LOG_LEVEL", "WARNING")
        self.set_level(log_level)

    def set_level(self, level: str) -> None:
        """Set logging level.

        Args:
            level: One of DEBUG, INFO, WARN/WARNING, ERROR
        """
        level_upper = level.upper()
        if level_upper == "WARN":
            level_upper = "WARNING"

        numeric_level = getattr(logging, level_upper, logging.INFO)
        self._logger.setLevel(numeric_level)

    def is_enabled_for(self, level: str) -> bool:
        """Check whether records at ``level`` would be emitted."""
        level_upper = level.upper()
        if level_upper == "WARN":
            level_upper = "WARNING"
        return self._logger.isEnabledFor(getattr(logging, level_upper, logging.INFO))

    def debug(self, msg: str, **kv: Any) -> None:
        """Log debug message with optional key-value pairs."""
        self._logger.debug(msg, extra={"kv": kv})

    def info(self, msg: str, **kv: Any) -> None:
        """Log info message with optional key-value pairs."""
        self._logger.info(msg, extra={"kv": kv})

    def warn(self, msg: str, **kv: Any) -> None:
        """Log warning message with optional key-value pairs."""
        self._logger.warning(msg, extra={"kv": kv})

    def error(self, msg: str, **kv: Any) -> None:
        """Log error message with optional key-value pairs."""
        self._logger.error(msg, extra={"kv": kv})

    @contextmanager
    def operation(self, operation_name: str, **kv: Any) -> Iterator[None]:
        """Context manager for operation timing.

        Logs operation start and end (with duration) at debug level.

        Args:
            operation_name: Name of the operation
            **kv: Additional key-value pairs to include

        Example:
            with logger.operation("prompt_render", format="toon"):
                ...
        """
        start_time = time.time()
        self.debug(f"{operation_name}_start", **kv)

        try:
            yield
        finally:
            duration_ms = (time.time() - start_time) * 1000
            self.debug(f"{operation_name}_end", duration_ms=duration_ms, **kv)


class JSONFormatter(logging.Formatter):
    """Formats log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON string
        """
        dt = datetime.fromtimestamp(record.created, tz=UTC)
        timestamp = dt.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

        log_data = {
            "timestamp": timestamp,
            "level": record.levelname,
            "message": record.getMessage(),
        }

        if hasattr(record, "kv") and record.kv:
            log_data.update(record.kv)

        return json.dumps(log_data, default=str, ensure_ascii=False)


_default_logger: PromptSmithLogger | None = None


def get_logger() -> PromptSmithLogger:
    """Return the shared package logger, creating it on first use."""
    global _default_logger
    if _default_logger is None:
        _default_logger = PromptSmithLogger()
    return _default_logger
