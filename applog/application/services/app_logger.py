"""Structured application and request logger.

AppLogger is the façade of the logging core. Every public method:

1. Checks the level gate first (global switch, category switch, sink
   level) so suppressed calls cost nothing beyond the check.
2. Builds a LogEntry stamped with the correlation id active at the
   moment of the call, the application name and the current time.
3. Encodes it with JsonLogEncoder and writes the line to the sink.

Records come in two types: ``application`` (trace/debug/info/warn/error)
and ``request`` (inbound and outbound request/response records).

Usage:
    logger = AppLogger("orders.service", configuration, sink)
    logger.info("Order created", {"order_id": 7})
    logger.error("Payment failed", error=exc)

    logger.log_incoming_request("GET", "/api/orders?id=7", request_info, "10.0.0.1", "curl/8")
    logger.log_incoming_response("GET", "/api/orders?id=7", 200, 12, response_info)
"""

from __future__ import annotations

import traceback
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any

from applog.application.observability.correlation import get_correlation_id
from applog.application.observability.log_context import get_log_context
from applog.application.observability.record_stamp import current_timestamp, execution_unit_name
from applog.config.logging_config import LoggingConfiguration, get_default_configuration
from applog.domain.models.exchange import RequestInfo, ResponseInfo
from applog.domain.models.log_entry import ErrorInfo, LogEntry
from applog.domain.models.log_level import LogLevel, level_for_status
from applog.domain.models.log_type import LogType
from applog.infrastructure.observability.encoder import JsonLogEncoder

if TYPE_CHECKING:
    from applog.application.ports.log_sink import LogSinkProtocol

INCOMING_REQUEST_MESSAGE = "Incoming request"
INCOMING_RESPONSE_MESSAGE = "Incoming response"
OUTGOING_REQUEST_MESSAGE = "Outgoing request"
OUTGOING_RESPONSE_MESSAGE = "Outgoing response"
OUTGOING_FAILURE_MESSAGE = "Outgoing request failed"

# Direction marker for records of calls this service makes
DIRECTION_KEY = "direction"
DIRECTION_OUTGOING = "outgoing"

# Status recorded when an outgoing call produced no response at all
NO_RESPONSE_STATUS = 0


def _qualified_name(cls: type) -> str:
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def _next_cause(error: BaseException) -> BaseException | None:
    if error.__cause__ is not None:
        return error.__cause__
    if not error.__suppress_context__:
        return error.__context__
    return None


def resolve_root_cause(error: BaseException) -> BaseException:
    """Follow the cause chain to its innermost exception.

    Stops at an exception with no further cause, or when the chain cycles
    back to an exception already visited.
    """
    seen = {id(error)}
    current = error
    while True:
        cause = _next_cause(current)
        if cause is None or id(cause) in seen:
            return current
        seen.add(id(cause))
        current = cause


def build_error_info(error: BaseException, max_depth: int) -> ErrorInfo:
    """Describe an exception for the ``error`` block.

    Args:
        error: The exception.
        max_depth: Maximum number of frames; the innermost ones are kept.

    Returns:
        ErrorInfo with class, message, bounded frames and the root cause
        when it differs from ``error``.
    """
    frames = [
        f"{frame.filename}:{frame.lineno} in {frame.name}"
        for frame in traceback.extract_tb(error.__traceback__)
    ]
    frames = frames[-max_depth:] if max_depth > 0 else []
    root = resolve_root_cause(error)
    root_cause = None
    if root is not error:
        root_cause = f"{_qualified_name(type(root))}: {root}"
    return ErrorInfo(
        exception_class=_qualified_name(type(error)),
        message=str(error),
        stack_trace=tuple(frames),
        root_cause=root_cause,
    )


def _render_captured(captured: Any) -> Any:
    if captured is None:
        return {}
    if isinstance(captured, (RequestInfo, ResponseInfo)):
        return captured.to_dict()
    return captured


class AppLogger:
    """Structured JSON logger for one logical name.

    Instances are cheap and hold no per-request state; obtain them through
    AppLoggerFactory so each name maps to one instance.

    Attributes:
        name: Logger name, rendered as ``logger_name``.
        configuration: Shared read-only configuration.
    """

    def __init__(
        self,
        name: str,
        configuration: LoggingConfiguration | None = None,
        sink: LogSinkProtocol | None = None,
        encoder: JsonLogEncoder | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the logger.

        Args:
            name: Logger name.
            configuration: Configuration; defaults to the process-wide default.
            sink: Destination of rendered lines; defaults to a StructlogLogSink.
            encoder: JSON encoder; defaults to a new JsonLogEncoder.
            clock: Source of emission timestamps; defaults to UTC now.
        """
        if sink is None:
            from applog.infrastructure.observability.sink import StructlogLogSink

            sink = StructlogLogSink()
        self.name = name
        self.configuration = configuration if configuration is not None else get_default_configuration()
        self._sink = sink
        self._encoder = encoder if encoder is not None else JsonLogEncoder()
        self._clock = clock

    @property
    def application_name(self) -> str:
        return self.configuration.application_name

    @property
    def sink(self) -> LogSinkProtocol:
        return self._sink

    # ==================== Level gates ====================

    def is_application_enabled(self, level: LogLevel) -> bool:
        """Check whether an application record at ``level`` would be emitted."""
        return self.configuration.application_logging_enabled and self._sink.is_enabled_for(level)

    def is_request_enabled(self, level: LogLevel) -> bool:
        """Check whether a request record at ``level`` would be emitted."""
        return self.configuration.request_logging_enabled and self._sink.is_enabled_for(level)

    # ==================== Application logging ====================

    def trace(
        self, message: str, extra: Mapping[str, Any] | None = None, error: BaseException | None = None
    ) -> None:
        if self.is_application_enabled(LogLevel.TRACE):
            self._log_application(LogLevel.TRACE, message, extra, error)

    def debug(
        self, message: str, extra: Mapping[str, Any] | None = None, error: BaseException | None = None
    ) -> None:
        if self.is_application_enabled(LogLevel.DEBUG):
            self._log_application(LogLevel.DEBUG, message, extra, error)

    def info(
        self, message: str, extra: Mapping[str, Any] | None = None, error: BaseException | None = None
    ) -> None:
        if self.is_application_enabled(LogLevel.INFO):
            self._log_application(LogLevel.INFO, message, extra, error)

    def warn(
        self, message: str, extra: Mapping[str, Any] | None = None, error: BaseException | None = None
    ) -> None:
        if self.is_application_enabled(LogLevel.WARN):
            self._log_application(LogLevel.WARN, message, extra, error)

    warning = warn

    def error(
        self, message: str, extra: Mapping[str, Any] | None = None, error: BaseException | None = None
    ) -> None:
        if self.is_application_enabled(LogLevel.ERROR):
            self._log_application(LogLevel.ERROR, message, extra, error)

    # ==================== Request logging ====================

    def log_request(
        self,
        method: str,
        uri: str,
        status_code: int,
        duration_ms: int,
        request_body: Any = None,
        response_body: Any = None,
        message: str = "",
    ) -> None:
        """Log a complete exchange as one record."""
        level = level_for_status(status_code)
        if self.is_request_enabled(level):
            self._log_request(
                level,
                message,
                method,
                uri,
                status_code=status_code,
                duration_ms=duration_ms,
                request_body=request_body,
                response_body=response_body,
            )

    def log_incoming_request(
        self,
        method: str,
        uri: str,
        captured_request: RequestInfo | Mapping[str, Any] | None = None,
        remote_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        """Log an inbound request when it arrives. Always INFO."""
        if self.is_request_enabled(LogLevel.INFO):
            self._log_request(
                LogLevel.INFO,
                INCOMING_REQUEST_MESSAGE,
                method,
                uri,
                remote_address=remote_address,
                user_agent=user_agent,
                request_body=captured_request,
            )

    def log_incoming_response(
        self,
        method: str,
        uri: str,
        status_code: int,
        duration_ms: int,
        captured_response: ResponseInfo | Mapping[str, Any] | None = None,
    ) -> None:
        """Log the response of an inbound exchange. Level follows the status."""
        level = level_for_status(status_code)
        if self.is_request_enabled(level):
            self._log_request(
                level,
                INCOMING_RESPONSE_MESSAGE,
                method,
                uri,
                status_code=status_code,
                duration_ms=duration_ms,
                response_body=captured_response,
            )

    def log_outgoing_request(
        self,
        method: str,
        uri: str,
        captured_request: RequestInfo | Mapping[str, Any] | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> None:
        """Log a call this service is about to make. Always INFO."""
        if self.is_request_enabled(LogLevel.INFO):
            self._log_request(
                LogLevel.INFO,
                OUTGOING_REQUEST_MESSAGE,
                method,
                uri,
                request_body=captured_request,
                extra={**(extra or {}), DIRECTION_KEY: DIRECTION_OUTGOING},
            )

    def log_outgoing_response(
        self,
        method: str,
        uri: str,
        status_code: int,
        duration_ms: int,
        captured_response: ResponseInfo | Mapping[str, Any] | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> None:
        """Log the response to a call this service made. Level follows the status."""
        level = level_for_status(status_code)
        if self.is_request_enabled(level):
            self._log_request(
                level,
                OUTGOING_RESPONSE_MESSAGE,
                method,
                uri,
                status_code=status_code,
                duration_ms=duration_ms,
                response_body=captured_response,
                extra={**(extra or {}), DIRECTION_KEY: DIRECTION_OUTGOING},
            )

    def log_outgoing_failure(
        self,
        method: str,
        uri: str,
        duration_ms: int,
        error: BaseException,
        extra: Mapping[str, Any] | None = None,
    ) -> None:
        """Log a call that produced no response.

        Rendered like a response record with ``status_code`` 0 and an
        error block, so consumers can query outbound calls uniformly.
        """
        if self.is_request_enabled(LogLevel.ERROR):
            self._log_request(
                LogLevel.ERROR,
                OUTGOING_FAILURE_MESSAGE,
                method,
                uri,
                status_code=NO_RESPONSE_STATUS,
                duration_ms=duration_ms,
                extra={**(extra or {}), DIRECTION_KEY: DIRECTION_OUTGOING},
                error=error,
            )

    # ==================== Internal ====================

    def _now(self) -> str:
        return current_timestamp(self._clock() if self._clock is not None else None)

    def _merge_extra(self, extra: Mapping[str, Any] | None) -> dict[str, Any] | None:
        merged = get_log_context()
        if extra:
            merged.update(extra)
        return merged or None

    def _error_info(self, error: BaseException | None) -> ErrorInfo | None:
        if error is None or not self.configuration.application.include_stack_trace:
            return None
        return build_error_info(error, self.configuration.application.max_stack_trace_depth)

    def _log_application(
        self,
        level: LogLevel,
        message: str,
        extra: Mapping[str, Any] | None,
        error: BaseException | None,
    ) -> None:
        entry = LogEntry(
            timestamp=self._now(),
            application=self.application_name,
            message=str(message),
            logger_name=self.name,
            thread_name=execution_unit_name(),
            level=level,
            log_type=LogType.APPLICATION,
            correlation_id=get_correlation_id(),
            error=self._error_info(error),
            extra=self._merge_extra(extra),
        )
        self._emit(entry, error)

    def _log_request(
        self,
        level: LogLevel,
        message: str,
        method: str | None,
        uri: str | None,
        status_code: int | None = None,
        duration_ms: int | None = None,
        remote_address: str | None = None,
        user_agent: str | None = None,
        request_body: Any = None,
        response_body: Any = None,
        extra: Mapping[str, Any] | None = None,
        error: BaseException | None = None,
    ) -> None:
        entry = LogEntry(
            timestamp=self._now(),
            application=self.application_name,
            message=str(message),
            logger_name=self.name,
            thread_name=execution_unit_name(),
            level=level,
            log_type=LogType.REQUEST,
            correlation_id=get_correlation_id(),
            method=method or "",
            uri=uri or "",
            status_code=status_code,
            duration_ms=int(duration_ms) if duration_ms is not None else None,
            remote_address=remote_address,
            user_agent=user_agent,
            request_body=_render_captured(request_body),
            response_body=_render_captured(response_body),
            error=self._error_info(error),
            extra=self._merge_extra(extra),
        )
        self._emit(entry, error)

    def _emit(self, entry: LogEntry, error: BaseException | None) -> None:
        line, failure = self._encoder.encode_line(entry)
        self._sink.write(entry.level, line, error)
        if failure is not None:
            self._sink.write(LogLevel.ERROR, self._encoder.encode_diagnostic(entry, failure), failure)
