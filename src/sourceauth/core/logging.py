"""
Logging configuration for sourceauth.

This module sets up structured logging using structlog with support for
both JSON and human-readable formats. Secret material is scrubbed by a
processor before any renderer sees it.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Dict, Optional

import structlog
from structlog.types import FilteringBoundLogger

from .config import LoggingConfig, get_settings

SENSITIVE_KEYS = frozenset({
    "password", "token", "api_key", "apikey", "secret", "authorization",
    "access_token", "refresh_token", "client_secret", "cookie", "cookies",
    "credentials", "encryption_key",
})


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """
    Setup library logging configuration.

    Args:
        config: Logging configuration. If None, uses settings from environment.
    """
    if config is None:
        config = get_settings().logging

    logging.basicConfig(
        level=getattr(logging, config.level),
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            _filter_sensitive_data,
            structlog.processors.JSONRenderer() if config.format == "json"
            else structlog.dev.ConsoleRenderer(colors=True)
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, config.level)
        ),
        logger_factory=structlog.WriteLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _filter_sensitive_data(
    logger: FilteringBoundLogger,
    method_name: str,
    event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Filter sensitive data from log entries."""

    def _filter(data: Any) -> Any:
        if isinstance(data, dict):
            return {
                key: "[REDACTED]" if str(key).lower() in SENSITIVE_KEYS
                else _filter(value)
                for key, value in data.items()
            }
        elif isinstance(data, (list, tuple)):
            return [_filter(item) for item in data]
        return data

    return {
        key: value if key == "event" else (
            "[REDACTED]" if key.lower() in SENSITIVE_KEYS else _filter(value)
        )
        for key, value in event_dict.items()
    }


def get_logger(name: str = __name__) -> FilteringBoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name, typically __name__ of the calling module.

    Returns:
        Configured structlog logger instance.
    """
    return structlog.get_logger(name)


def log_auth_event(
    logger: FilteringBoundLogger,
    event_type: str,
    source_id: Optional[str] = None,
    success: bool = True,
    details: Optional[Dict[str, Any]] = None
) -> None:
    """Log authentication and session lifecycle events."""
    log = logger.info if success else logger.warning
    log(
        "Authentication event",
        event_type=event_type,
        source_id=source_id,
        success=success,
        **(details or {})
    )


def log_api_call(
    logger: FilteringBoundLogger,
    endpoint: str,
    method: str,
    status_code: int,
    duration_ms: float,
    attempt: int = 1
) -> None:
    """Log outbound calls to a source's auth endpoints."""
    logger.info(
        "External API call",
        endpoint=endpoint,
        method=method,
        status_code=status_code,
        duration_ms=round(duration_ms, 2),
        attempt=attempt
    )


def log_error(
    logger: FilteringBoundLogger,
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    source_id: Optional[str] = None
) -> None:
    """Log errors with context."""
    logger.error(
        "Error occurred",
        error_type=type(error).__name__,
        error_message=str(error),
        source_id=source_id,
        **(context or {}),
        exc_info=True
    )


class LoggerMixin:
    """Mixin class to add logging capabilities to other classes."""

    @property
    def logger(self) -> FilteringBoundLogger:
        """Get logger instance for this class."""
        return get_logger(self.__class__.__module__ + "." + self.__class__.__name__)


# Initialize logging on module import
setup_logging()
