"""Structured log entry model.

Application records and request records share one schema so a single
index mapping covers every line the service emits.

Wire contract (field order is fixed and must stay byte-stable):
    @timestamp, @version, application, message, logger_name, thread_name,
    level, level_value, type, correlation_id, method, uri, status_code,
    duration_ms, remote_address, user_agent, request_body, response_body,
    error, extra

Absent values are omitted from the rendered record, except request_body
and response_body which always render, as ``{}`` when nothing was captured.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from applog.domain.models.log_level import LogLevel
from applog.domain.models.log_type import LogType

# Schema version rendered into every record
LOG_SCHEMA_VERSION: str = "1"

FIELD_ORDER: tuple[str, ...] = (
    "@timestamp",
    "@version",
    "application",
    "message",
    "logger_name",
    "thread_name",
    "level",
    "level_value",
    "type",
    "correlation_id",
    "method",
    "uri",
    "status_code",
    "duration_ms",
    "remote_address",
    "user_agent",
    "request_body",
    "response_body",
    "error",
    "extra",
)

# Fields that always render, falling back to an empty object
_ALWAYS_RENDERED: frozenset[str] = frozenset({"request_body", "response_body"})


@dataclass(frozen=True)
class ErrorInfo:
    """Exception details attached to a log record.

    Attributes:
        exception_class: Qualified class name of the exception.
        message: ``str(exception)``.
        stack_trace: Frame strings, bounded by the configured maximum depth.
        root_cause: ``"<class>: <message>"`` of the innermost cause, only
            when it differs from the exception itself.
    """

    exception_class: str
    message: str
    stack_trace: tuple[str, ...] = ()
    root_cause: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Render as the ``error`` block, omitting an absent root cause."""
        block: dict[str, Any] = {
            "class": self.exception_class,
            "message": self.message,
            "stack_trace": list(self.stack_trace),
        }
        if self.root_cause is not None:
            block["root_cause"] = self.root_cause
        return block


@dataclass(frozen=True)
class LogEntry:
    """One structured log record.

    Instances are transient: built, encoded, written, discarded.

    Attributes:
        timestamp: ISO-8601 with millisecond precision and numeric offset.
        application: Application name from configuration.
        message: Human-readable message.
        logger_name: Name of the emitting logger.
        thread_name: Name of the execution unit (thread or task).
        level: Record severity.
        log_type: ``application`` or ``request``.
        correlation_id: Correlation id active at emission time; None only for
            diagnostics rendered outside any request.
        version: Schema version.
        method: HTTP method (request records).
        uri: Request URI including query string (request records).
        status_code: HTTP status (response records).
        duration_ms: Exchange duration in milliseconds (response records).
        remote_address: Client address (incoming request records).
        user_agent: Client user agent (incoming request records).
        request_body: Captured request data, ``{}`` when nothing was captured.
        response_body: Captured response data, ``{}`` when nothing was captured.
        error: Exception details, if any.
        extra: Free-form additional fields.
    """

    timestamp: str
    application: str
    message: str
    logger_name: str
    thread_name: str
    level: LogLevel
    log_type: LogType
    correlation_id: str | None
    version: str = LOG_SCHEMA_VERSION
    method: str | None = None
    uri: str | None = None
    status_code: int | None = None
    duration_ms: int | None = None
    remote_address: str | None = None
    user_agent: str | None = None
    request_body: Any = field(default_factory=dict)
    response_body: Any = field(default_factory=dict)
    error: ErrorInfo | None = None
    extra: Mapping[str, Any] | None = None

    @property
    def level_value(self) -> int:
        """Numeric weight of the level."""
        return self.level.weight

    def to_record(self) -> dict[str, Any]:
        """Build the ordered mapping that the encoder serializes.

        Returns:
            A dict whose insertion order is FIELD_ORDER, with absent
            optional fields left out.
        """
        values: dict[str, Any] = {
            "@timestamp": self.timestamp,
            "@version": self.version,
            "application": self.application,
            "message": self.message,
            "logger_name": self.logger_name,
            "thread_name": self.thread_name,
            "level": str(self.level),
            "level_value": self.level_value,
            "type": str(self.log_type),
            "correlation_id": self.correlation_id,
            "method": self.method,
            "uri": self.uri,
            "status_code": self.status_code,
            "duration_ms": self.duration_ms,
            "remote_address": self.remote_address,
            "user_agent": self.user_agent,
            "request_body": self.request_body,
            "response_body": self.response_body,
            "error": self.error.to_dict() if self.error is not None else None,
            "extra": dict(self.extra) if self.extra else None,
        }
        record: dict[str, Any] = {}
        for name in FIELD_ORDER:
            value = values[name]
            if name in _ALWAYS_RENDERED:
                record[name] = {} if value is None or value == "" else value
            elif value is not None:
                record[name] = value
        return record
