"""Structured logging configuration with JSON formatter."""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence, Union


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format

        Returns:
            JSON formatted log string
        """
        log_obj = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        # Add exception info if present
        if record.exc_info:
            log_obj['exception'] = self.formatException(record.exc_info)

        # Add extra fields if present
        if hasattr(record, 'extra_fields'):
            log_obj.update(record.extra_fields)

        return json.dumps(log_obj, default=str)


def setup_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: str = None
) -> None:
    """Set up structured logging configuration.

    Logs go to stderr so that the MCP stdio transport keeps stdout for
    protocol messages.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: Whether to use JSON formatting
        log_file: Optional log file path
    """
    # Remove existing handlers
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    log_level = getattr(logging, level.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    if json_format:
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


class ContextAdapter(logging.LoggerAdapter):
    """Logger adapter that stamps fixed fields (e.g. the backend) on every record.

    The fields land in ``record.extra_fields``, which ``JSONFormatter`` merges
    into the emitted object. Fields passed per call take precedence.
    """

    def process(self, msg, kwargs):
        extra = dict(kwargs.get('extra') or {})
        extra['extra_fields'] = {**self.extra, **extra.get('extra_fields', {})}
        kwargs['extra'] = extra
        return msg, kwargs


def get_logger(name: str, extra_fields: Dict[str, Any] = None) -> Union[logging.Logger, ContextAdapter]:
    """Get a logger with optional extra fields.

    Args:
        name: Logger name
        extra_fields: Extra fields to include in all logs

    Returns:
        The named logger, wrapped in a ContextAdapter when fields are given
    """
    logger = logging.getLogger(name)

    if extra_fields:
        return ContextAdapter(logger, extra_fields)

    return logger


def log_backend_query(logger: Union[logging.Logger, logging.LoggerAdapter], backend: str, query: str,
                      params: Optional[Sequence[Any]] = None) -> None:
    """Log a backend query for debugging.

    Args:
        logger: Logger to write to
        backend: Backend name (arangodb, cassandra, ...)
        query: Query or request text
        params: Bound values, if any
    """
    display_query = query[:500] + "..." if len(query) > 500 else query
    display_query = ' '.join(display_query.split())

    if params:
        logger.debug(f"{backend} query: {display_query} | Params: {params}")
    else:
        logger.debug(f"{backend} query: {display_query}")


def log_error_with_context(error: Exception, context: dict, logger: logging.Logger) -> None:
    """Log an error with additional context information.

    Args:
        error: Exception that occurred
        context: Dictionary with context information
        logger: Logger to write to
    """
    logger.error(
        f"{error.__class__.__name__}: {error} | Context: {context}",
        exc_info=True
    )
