"""
Structured Logging Configuration Module

Provides JSON-formatted structured logging for all transfer system
operations, with the current request ID attached to every record.
"""

import contextvars
import logging
import json
import socket
from datetime import datetime, timezone
from typing import Optional


# Request ID of the HTTP request being served in this context
_current_request_id = contextvars.ContextVar('current_request_id', default=None)


def get_request_id() -> Optional[str]:
    """Get the request ID for this context"""
    return _current_request_id.get()


def set_request_id(request_id: Optional[str]) -> contextvars.Token:
    """Set the request ID for this context"""
    return _current_request_id.set(request_id)


def reset_request_id(token: contextvars.Token) -> None:
    _current_request_id.reset(token)


class RequestIDFilter(logging.Filter):
    """Copies the context request ID onto records that do not carry one"""

    def filter(self, record):
        if getattr(record, 'request_id', None) is None:
            record.request_id = get_request_id()
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def __init__(self, hostname: Optional[str] = None):
        super().__init__()
        self.hostname = hostname or socket.gethostname()

    def format(self, record):
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, 'request_id', None),
            "action": getattr(record, 'action', None),
            "resource": getattr(record, 'resource', None),
            "extra": getattr(record, 'extra', None),
            "host": self.hostname
        }

        # Remove None values
        log_entry = {k: v for k, v in log_entry.items() if v is not None}

        # Add exception info if present
        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


TEXT_FORMAT = "%(asctime)s %(levelname)-8s %(name)s [%(request_id)s] %(message)s"


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    logger_name: str = "transfer_system"
) -> logging.Logger:
    """
    Setup structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" for structured output, "text" for development
        logger_name: Name of the logger

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    # Create console handler
    handler = logging.StreamHandler()
    if log_format.lower() == "text":
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    else:
        handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIDFilter())

    # Add handler to logger
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))

    # Prevent propagation to avoid duplicate logs
    logger.propagate = False

    return logger


def get_logger(name: str = "transfer_system") -> logging.Logger:
    """Get logger instance"""
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               action: Optional[str] = None, resource: Optional[str] = None,
               request_id: Optional[str] = None, extra: Optional[dict] = None,
               exc_info: bool = False):
    """
    Log an action with structured data.

    Args:
        logger: Logger instance
        level: Log level (info, warning, error, etc.)
        message: Log message
        action: Action being performed
        resource: Resource being acted upon
        request_id: Request ID for tracing (defaults to the context request ID)
        extra: Additional structured data
        exc_info: Attach the exception currently being handled
    """
    fields = {
        "action": action,
        "resource": resource,
        "request_id": request_id or get_request_id(),
        "extra": extra
    }
    logger.log(
        getattr(logging, level.upper()),
        message,
        exc_info=exc_info,
        extra={k: v for k, v in fields.items() if v is not None}
    )
