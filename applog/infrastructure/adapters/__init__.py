"""Infrastructure adapters - outbound HTTP logging."""

from applog.infrastructure.adapters.httpx_logging import (
    OUTGOING_LOGGER_NAME,
    AsyncLoggingTransport,
    LoggingTransport,
    create_async_logging_client,
    create_logging_client,
)

__all__: list[str] = [
    "OUTGOING_LOGGER_NAME",
    "AsyncLoggingTransport",
    "LoggingTransport",
    "create_async_logging_client",
    "create_logging_client",
]
