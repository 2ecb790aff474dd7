"""
Structured logging module.

Provides JSON-formatted structured logging with run context support.
"""
import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Optional
from contextvars import ContextVar


# Context variable for the current generator run
run_id_var: ContextVar[Optional[str]] = ContextVar("run_id", default=None)

_RESERVED_ATTRS = (
    "name", "msg", "args", "levelname", "levelno",
    "pathname", "filename", "module", "exc_info",
    "exc_text", "stack_info", "lineno", "funcName",
    "created", "msecs", "relativeCreated", "thread",
    "threadName", "processName", "process", "message",
    "taskName",
)


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Every record becomes one JSON line so batch runs can be grepped or
    shipped to a log aggregator without extra parsing.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format the log record as JSON.

        Args:
            record: Log record to format.

        Returns:
            JSON-formatted log string.
        """
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        run_id = run_id_var.get()
        if run_id:
            log_data["run_id"] = run_id

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = self._serialize_value(value)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)

    def _serialize_value(self, value: Any) -> Any:
        """Serialize a value for JSON output."""
        if isinstance(value, (str, int, float, bool, type(None))):
            return value
        if isinstance(value, (list, tuple)):
            return [self._serialize_value(v) for v in value]
        if isinstance(value, dict):
            return {k: self._serialize_value(v) for k, v in value.items()}
        return str(value)


class StructuredLogger(logging.Logger):
    """
    Logger with structured logging support.

    Allows passing extra fields as keyword arguments:
    ``logger.info("Fetched page", method="product/get_list", page=2)``.
    """

    def _log_with_extras(
        self,
        level: int,
        msg: str,
        args: tuple,
        **kwargs: Any,
    ) -> None:
        if not self.isEnabledFor(level):
            return
        exc_info = kwargs.pop("exc_info", None)
        extra = kwargs.pop("extra", {})
        extra.update(kwargs)
        super()._log(level, msg, args, exc_info=exc_info, extra=extra)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log debug message with extra fields."""
        self._log_with_extras(logging.DEBUG, msg, args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log info message with extra fields."""
        self._log_with_extras(logging.INFO, msg, args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log warning message with extra fields."""
        self._log_with_extras(logging.WARNING, msg, args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log error message with extra fields."""
        self._log_with_extras(logging.ERROR, msg, args, **kwargs)

    def critical(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log critical message with extra fields."""
        self._log_with_extras(logging.CRITICAL, msg, args, **kwargs)


logging.setLoggerClass(StructuredLogger)


def setup_logging(
    level: str = "INFO",
    json_format: bool = True,
) -> None:
    """
    Set up logging configuration.

    Logs go to stderr: stdout is reserved for the generator's own
    one-line result message.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: Whether to use JSON format.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(getattr(logging, level.upper()))

    if json_format:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )
        )

    root_logger.addHandler(handler)


def get_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__).

    Returns:
        StructuredLogger instance.
    """
    return logging.getLogger(name)  # type: ignore


def set_run_id(run_id: str) -> None:
    """Set the generator run ID in context."""
    run_id_var.set(run_id)


def get_run_id() -> Optional[str]:
    """Get the current generator run ID from context."""
    return run_id_var.get()
