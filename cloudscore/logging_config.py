"""
Structured logging configuration for cloudscore.

Provides JSON-formatted logging with automatic context propagation and
configurable output handlers. The SDK never configures logging on import;
applications call configure_logging() if they want the SDK's formatters.

Usage:
    from cloudscore.logging_config import configure_logging, get_logger

    # Configure at application entry point
    configure_logging(level="INFO", json_output=True)

    # Get a structured logger
    logger = get_logger(__name__)
    logger.info("Fetching page", board="arena", page=2)

    # Automatic context propagation
    with LogContext(request_id="req_001234", board="arena"):
        logger.info("Request started")  # Includes request_id and board
"""

import json
import logging
import logging.handlers
import os
import sys
import threading
import time
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Context variables for automatic field injection
_log_context: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})

# Environment configuration
LOG_LEVEL = os.environ.get("CLOUDSCORE_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.environ.get("CLOUDSCORE_LOG_FORMAT", "text")  # "json" or "text"
LOG_FILE = os.environ.get("CLOUDSCORE_LOG_FILE", "")

# Log rotation configuration (for file logging)
LOG_MAX_BYTES = int(os.environ.get("CLOUDSCORE_LOG_MAX_BYTES", 5 * 1024 * 1024))
LOG_BACKUP_COUNT = int(os.environ.get("CLOUDSCORE_LOG_BACKUP_COUNT", 3))

# Context keys promoted to top-level record fields
_CONTEXT_KEYS = ("request_id", "board", "domain")


@dataclass
class LogRecord:
    """Structured log record with all context fields."""

    timestamp: str
    level: str
    logger: str
    message: str
    fields: Dict[str, Any] = field(default_factory=dict)
    request_id: Optional[str] = None
    board: Optional[str] = None
    domain: Optional[str] = None
    exception: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: Dict[str, Any] = {
            "ts": self.timestamp,
            "level": self.level,
            "logger": self.logger,
            "msg": self.message,
        }
        for key in _CONTEXT_KEYS:
            value = getattr(self, key)
            if value:
                result[key] = value
        if self.fields:
            result.update(self.fields)
        if self.exception:
            result["exception"] = self.exception
        return result

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), default=str)

    def to_text(self) -> str:
        """Format as human-readable text."""
        parts = [
            self.timestamp,
            f"[{self.level}]",
            f"[{self.logger}]",
        ]
        if self.request_id:
            parts.append(f"[{self.request_id}]")
        if self.board:
            parts.append(f"[{self.domain or '-'}/{self.board}]")
        parts.append(self.message)
        if self.fields:
            parts.append(" ".join(f"{k}={v}" for k, v in self.fields.items()))
        if self.exception:
            parts.append(f"\n{self.exception.get('traceback', '')}")
        return " ".join(parts)


def _build_record(record: logging.LogRecord, timestamp: str, logger_name: str) -> LogRecord:
    ctx = _log_context.get()
    return LogRecord(
        timestamp=timestamp,
        level=record.levelname,
        logger=logger_name,
        message=record.getMessage(),
        fields=getattr(record, "structured_fields", {}),
        request_id=ctx.get("request_id") or getattr(record, "request_id", None),
        board=ctx.get("board") or getattr(record, "board", None),
        domain=ctx.get("domain") or getattr(record, "domain", None),
    )


class JSONFormatter(logging.Formatter):
    """JSON log formatter with structured field support."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
        log_record = _build_record(record, timestamp, record.name)

        if record.exc_info:
            log_record.exception = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else "Unknown",
                "message": str(record.exc_info[1]) if record.exc_info[1] else "",
                "traceback": self.formatException(record.exc_info),
            }

        return log_record.to_json()


class TextFormatter(logging.Formatter):
    """Human-readable text formatter with structured field support."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as text."""
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        log_record = _build_record(record, timestamp, record.name.split(".")[-1])

        if record.exc_info:
            log_record.exception = {
                "traceback": self.formatException(record.exc_info),
            }

        return log_record.to_text()


class StructuredLogger:
    """
    Structured logger wrapper with automatic context propagation.

    Provides methods for logging with structured fields that are
    automatically serialized to JSON or text format.
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)
        self._name = name

    def _log(
        self,
        level: int,
        message: str,
        exc_info: bool = False,
        **fields: Any,
    ) -> None:
        """Internal log method with structured fields."""
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(level, message, exc_info=exc_info, extra={"structured_fields": fields})

    def debug(self, message: str, **fields: Any) -> None:
        self._log(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log(logging.INFO, message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log(logging.WARNING, message, **fields)

    def error(self, message: str, exc_info: bool = False, **fields: Any) -> None:
        self._log(logging.ERROR, message, exc_info=exc_info, **fields)

    def exception(self, message: str, **fields: Any) -> None:
        """Log at ERROR level with exception info."""
        self._log(logging.ERROR, message, exc_info=True, **fields)

    def isEnabledFor(self, level: int) -> bool:
        """Check if logger is enabled for level."""
        return self._logger.isEnabledFor(level)


class LogContext:
    """
    Context manager for setting log context fields.

    All logs within the context will automatically include the specified fields.
    The context is a ContextVar, so concurrent requests on one event loop
    keep their own request_id.
    """

    def __init__(self, **fields: Any):
        self._fields = fields
        self._token: Optional[Token[Dict[str, Any]]] = None

    def __enter__(self) -> "LogContext":
        current = _log_context.get()
        self._token = _log_context.set({**current, **self._fields})
        return self

    def __exit__(self, *args) -> None:
        if self._token is not None:
            _log_context.reset(self._token)


def get_context() -> Dict[str, Any]:
    """Get current log context fields."""
    return _log_context.get()


def clear_context() -> None:
    """Clear all log context fields."""
    _log_context.set({})


_request_counter = 0
_request_counter_lock = threading.Lock()


def new_request_id() -> str:
    """Short, process-unique identifier for correlating one request's logs."""
    global _request_counter
    with _request_counter_lock:
        _request_counter += 1
        counter = _request_counter
    return f"req_{int(time.time() * 1000) % 1000000:06d}_{counter}"


# Logger cache (thread-safe)
_loggers: Dict[str, StructuredLogger] = {}
_loggers_lock = threading.Lock()


def get_logger(name: str) -> StructuredLogger:
    """
    Get or create a structured logger by name (thread-safe).

    Args:
        name: Logger name (typically __name__)

    Returns:
        StructuredLogger instance
    """
    with _loggers_lock:
        if name not in _loggers:
            _loggers[name] = StructuredLogger(name)
        return _loggers[name]


def configure_logging(
    level: str | None = None,
    json_output: bool | None = None,
    log_file: str | None = None,
    propagate: bool = True,
) -> None:
    """
    Configure logging for the application.

    Should be called once at application startup.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON format; if False, text format
        log_file: Optional file path for log output
        propagate: Whether to propagate to root logger
    """
    log_level = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)
    use_json = json_output if json_output is not None else (LOG_FORMAT == "json")
    file_path = log_file or LOG_FILE

    formatter = JSONFormatter() if use_json else TextFormatter()

    root = logging.getLogger()
    root.setLevel(log_level)

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)
    root.addHandler(console_handler)

    if file_path:
        file_handler = logging.handlers.RotatingFileHandler(
            file_path,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        root.addHandler(file_handler)

    sdk_logger = logging.getLogger("cloudscore")
    sdk_logger.setLevel(log_level)
    sdk_logger.propagate = propagate


__all__ = [
    "LogRecord",
    "JSONFormatter",
    "TextFormatter",
    "StructuredLogger",
    "LogContext",
    "get_context",
    "clear_context",
    "new_request_id",
    "get_logger",
    "configure_logging",
]
