"""Observability infrastructure: structlog configuration, JSON encoding, sinks.

Usage:
    from applog.infrastructure.observability import (
        JsonLogEncoder,
        StructlogLogSink,
        configure_structlog,
    )

    configure_structlog(environment="production")
    sink = StructlogLogSink()
"""

from applog.infrastructure.observability.encoder import JsonLogEncoder
from applog.infrastructure.observability.logging import (
    LogEntryRenderer,
    configure_structlog,
    get_component_logger,
)
from applog.infrastructure.observability.sink import StructlogLogSink

__all__: list[str] = [
    "JsonLogEncoder",
    "LogEntryRenderer",
    "StructlogLogSink",
    "configure_structlog",
    "get_component_logger",
]
