"""Domain models for structured log records."""

from applog.domain.models.exchange import (
    InboundExchange,
    OutboundExchange,
    RequestInfo,
    RequestInfoBuilder,
    ResponseInfo,
    ResponseInfoBuilder,
)
from applog.domain.models.log_entry import (
    FIELD_ORDER,
    LOG_SCHEMA_VERSION,
    ErrorInfo,
    LogEntry,
)
from applog.domain.models.log_level import LogLevel, level_for_status
from applog.domain.models.log_type import LogType
from applog.domain.models.structured_value import StructuredValue, ValueKind

__all__: list[str] = [
    "FIELD_ORDER",
    "LOG_SCHEMA_VERSION",
    "ErrorInfo",
    "InboundExchange",
    "LogEntry",
    "LogLevel",
    "LogType",
    "OutboundExchange",
    "RequestInfo",
    "RequestInfoBuilder",
    "ResponseInfo",
    "ResponseInfoBuilder",
    "StructuredValue",
    "ValueKind",
    "level_for_status",
]
