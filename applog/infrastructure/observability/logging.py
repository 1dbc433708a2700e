"""Structured logging configuration with structlog.

This module configures structlog for the library's own diagnostics (capture
problems, adapter failures) and for any plain ``structlog.get_logger()``
logging the host service does. Log records built by AppLogger do not pass
through this pipeline; they are rendered by JsonLogEncoder and handed to a
sink.

In production, diagnostics are rendered in the same wire format as
application records (see LogEntryRenderer), so one parser reads the whole
stream.

Log Entry Format (production):
    {
        "@timestamp": "2024-01-01T00:00:00.000+00:00",
        "@version": "1",
        "application": "orders-service",
        "message": "request_logging_failed",
        "logger_name": "applog.exchange_logging",
        "thread_name": "MainThread",
        "level": "WARN",
        "level_value": 30000,
        "type": "application",
        "correlation_id": "9f0c...",
        "request_body": {},
        "response_body": {},
        "extra": {"component": "exchange_logging", ...additional context}
    }

Usage:
    from applog.infrastructure.observability import configure_structlog

    configure_structlog(environment="production")  # JSON output
    configure_structlog(environment="development")  # Console output
"""

import logging
import os
from typing import Any, cast

import structlog
from structlog.typing import FilteringBoundLogger, Processor

from applog.application.observability.correlation import correlation_id_processor
from applog.application.observability.record_stamp import current_timestamp, execution_unit_name
from applog.config.logging_config import get_default_configuration
from applog.domain.models.log_entry import LogEntry
from applog.domain.models.log_level import LogLevel
from applog.domain.models.log_type import LogType
from applog.infrastructure.observability.encoder import JsonLogEncoder

# Environment variable for log level (default: INFO)
LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"

# Logger name of diagnostics that carry neither a logger nor a component
DEFAULT_DIAGNOSTICS_LOGGER = "root"


def _get_log_level() -> int:
    """Get the configured log level from environment.

    Returns:
        The logging level integer (e.g., logging.INFO).
    """
    level_name = os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    return getattr(logging, level_name, logging.INFO)


class LogEntryRenderer:
    """Final structlog processor rendering an event as an application record.

    ``event`` becomes the message, ``level`` the record level, and an
    active ``correlation_id`` is carried over. ``logger`` names the logger;
    without it, a bound ``component`` yields ``applog.<component>``. The
    emission timestamp is re-stamped with millisecond precision. Every
    other key lands in ``extra``.
    """

    def __init__(self, encoder: JsonLogEncoder | None = None) -> None:
        self._encoder = encoder if encoder is not None else JsonLogEncoder()

    def __call__(self, logger: Any, method_name: str, event_dict: dict[str, Any]) -> str:
        fields = dict(event_dict)
        fields.pop("timestamp", None)
        message = str(fields.pop("event", ""))
        level_name = str(fields.pop("level", method_name))
        try:
            level = LogLevel.from_string(level_name)
        except ValueError:
            level = LogLevel.ERROR
        correlation_id = fields.pop("correlation_id", None)
        application = fields.pop("application", None) or get_default_configuration().application_name
        logger_name = fields.pop("logger", None)
        if logger_name is None:
            component = fields.get("component")
            logger_name = f"applog.{component}" if component else DEFAULT_DIAGNOSTICS_LOGGER

        entry = LogEntry(
            timestamp=current_timestamp(),
            application=str(application),
            message=message,
            logger_name=str(logger_name),
            thread_name=execution_unit_name(),
            level=level,
            log_type=LogType.APPLICATION,
            correlation_id=correlation_id,
            extra=fields or None,
        )
        line, _failure = self._encoder.encode_line(entry)
        return line


def configure_structlog(environment: str = "production") -> None:
    """Configure structlog for the application.

    Should be called once at application startup.

    Args:
        environment: 'production' for JSON output, 'development' for console.
                    Defaults to 'production'.

    Configuration:
        Production:
            - One JSON record per line, in the application record format
            - Millisecond timestamps with numeric offset
            - Context fields under ``extra``

        Development:
            - Colored console output for readability
            - ISO 8601 timestamps
            - All context fields preserved
    """
    # Shared processors for all environments
    shared_processors: list[Processor] = [
        # Merge context from contextvars (async support)
        structlog.contextvars.merge_contextvars,
        # Add log level
        structlog.processors.add_log_level,
        # Add ISO 8601 timestamp
        structlog.processors.TimeStamper(fmt="iso"),
        # Add correlation ID from context
        cast(Processor, correlation_id_processor),
        # Handle stack traces nicely
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        # Handle Unicode properly
        structlog.processors.UnicodeDecoder(),
    ]

    # Environment-specific final processor
    if environment == "production":
        # Application record format for log aggregation
        final_processor: Processor = LogEntryRenderer()
    else:
        # Pretty console output for development
        final_processor = structlog.dev.ConsoleRenderer(colors=True)

    # Combine processors
    processors = shared_processors + [final_processor]

    # Configure structlog
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_component_logger(component: str) -> FilteringBoundLogger:
    """Get a diagnostics logger pre-bound with a component name.

    Args:
        component: Component emitting the diagnostics (e.g. "inbound_adapter").

    Returns:
        A bound structlog logger.
    """
    return structlog.get_logger("applog").bind(component=component)
