"""
Structured JSON logging configuration.

Sets up JSON log lines with consistent field names so stored-procedure
calls can be traced by procedure name, shape and batch row:
- timestamp, level, message, logger
- procedure, shape, row_index, param_count when supplied via ``extra``

Logs go to stdout for collection by whatever runs the host process.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# Attributes every LogRecord carries; anything else came in through extra=
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "message", "pathname", "process", "processName", "relativeCreated",
    "thread", "threadName", "exc_info", "exc_text", "stack_info",
    "taskName", "asctime",
})


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs each record as a single-line JSON object:
    - timestamp: ISO 8601, UTC
    - level: Log level name
    - message: Rendered log message
    - logger: Logger name (module path)
    - procedure: Stored procedure being called (if available)
    - shape: Shape name being resolved (if available)
    - row_index: Position within a batch (if available)
    - param_count: Number of bound parameters (if available)
    - exception: Formatted traceback (if an exception was logged)

    Example output:
        {"timestamp": "2026-10-19T10:30:00.123456+00:00", "level": "WARNING",
         "message": "Batch row failed", "logger": "procmap.repositories.procedure",
         "procedure": "create_user", "row_index": 1}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if record.stack_info:
            log_data["stack_info"] = self.formatStack(record.stack_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in log_data:
                continue
            if value is not None:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_logging(
    level: str = "INFO",
    json_format: bool = True
) -> None:
    """
    Configure process-wide logging.

    Replaces any handlers on the root logger with a single stdout handler
    using either JSONFormatter or a plain text format.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Use JSONFormatter (True) or a simple text format (False)

    Example:
        from procmap.core.config import settings
        setup_logging(level=settings.log_level, json_format=settings.log_json)
    """
    root_logger = logging.getLogger()

    log_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # SQLAlchemy echoes statements at INFO; keep that behind echo_sql
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)


def log_with_context(
    logger: logging.Logger,
    level: str,
    message: str,
    procedure: Optional[str] = None,
    shape: Optional[str] = None,
    row_index: Optional[int] = None,
    param_count: Optional[int] = None,
    **extra_fields: Any
) -> None:
    """
    Log a message with the standard call-context fields.

    Args:
        logger: Logger instance
        level: Log level (debug, info, warning, error, critical)
        message: Log message
        procedure: Stored procedure name
        shape: Shape name
        row_index: Index of the record inside a batch
        param_count: Number of bound parameters
        **extra_fields: Additional fields to include

    Example:
        log_with_context(
            logger,
            "warning",
            "Batch row failed",
            procedure="create_user",
            row_index=1,
            error="duplicate key"
        )
    """
    extra: Dict[str, Any] = {}

    if procedure is not None:
        extra["procedure"] = procedure
    if shape is not None:
        extra["shape"] = shape
    if row_index is not None:
        extra["row_index"] = row_index
    if param_count is not None:
        extra["param_count"] = param_count

    extra.update(extra_fields)

    log_method = getattr(logger, level.lower())
    log_method(message, extra=extra)
