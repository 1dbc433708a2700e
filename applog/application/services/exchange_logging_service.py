"""Request/response logging around inbound and outbound HTTP exchanges.

Framework-neutral core of the HTTP adapters. The Starlette middleware and
the httpx transports translate their native objects into InboundExchange
/ OutboundExchange and call into this service at the start and end of
each exchange.

Inbound lifecycle:
    tracking = service.start_inbound(exchange)      # correlation id installed
    ... downstream handler runs ...
    extra_headers = service.finish_inbound(tracking, status, headers, body)
    # extra_headers carries X-Correlation-ID for the response

Outbound lifecycle:
    tracking = service.prepare_outbound(exchange)   # header value to inject
    ... dispatch ...
    service.finish_outbound(tracking, status, headers, body)
    # or, when dispatch raised:
    service.fail_outbound(tracking, error)
    # or, when the caller was cancelled mid-dispatch (status 499):
    service.cancel_outbound(tracking)

Failures inside the logging path (capture, masking, sink writes) are
reported through structlog and never propagate into the exchange.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from typing import Any

from applog.application.observability.correlation import (
    CORRELATION_HEADER,
    get_correlation_id,
    set_correlation_id,
)
from applog.application.services.app_logger import AppLogger
from applog.application.services.body_capture_service import BodyCapture
from applog.application.services.masking_service import MaskingEngine
from applog.application.services.request_filter import RequestLoggingPolicy
from applog.domain.models.exchange import InboundExchange, OutboundExchange
from applog.infrastructure.observability.logging import get_component_logger

# Status recorded when the caller went away before a response was produced
CLIENT_CLOSED_STATUS = 499


def elapsed_ms(started_at: float, finished_at: float) -> int:
    """Whole milliseconds between two clock readings in seconds."""
    return max(0, int(round((finished_at - started_at) * 1000)))


def _with_header(headers: Mapping[str, str], name: str, value: str) -> dict[str, str]:
    wanted = name.lower()
    merged = {key: val for key, val in headers.items() if key.lower() != wanted}
    merged[name] = value
    return merged


@dataclass(frozen=True)
class InboundTracking:
    """State carried from start_inbound to finish_inbound.

    Attributes:
        exchange: The inbound request.
        correlation_id: Id installed for this exchange.
        started_at: Clock reading at arrival.
        logged: Whether request records are emitted for this exchange.
    """

    exchange: InboundExchange
    correlation_id: str
    started_at: float
    logged: bool


@dataclass(frozen=True)
class OutboundTracking:
    """State carried from prepare_outbound to finish/fail_outbound.

    Attributes:
        exchange: The outgoing request with the correlation header injected.
        correlation_id: Value of the injected header.
        started_at: Clock reading at dispatch.
    """

    exchange: OutboundExchange
    correlation_id: str
    started_at: float


class ExchangeLoggingService:
    """Emits request records for HTTP exchanges.

    Args:
        app_logger: Logger receiving the records; its configuration drives
            capture, masking and path filtering.
        clock: Monotonic clock in seconds, injectable for tests.
    """

    def __init__(
        self,
        app_logger: AppLogger,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        configuration = app_logger.configuration
        self._logger = app_logger
        self._policy = RequestLoggingPolicy(configuration)
        self._capture = BodyCapture(configuration, MaskingEngine.from_configuration(configuration))
        self._request_logging_enabled = configuration.request_logging_enabled
        self._log_body = self._request_logging_enabled and configuration.request.log_body
        self._log_response_body = self._request_logging_enabled and configuration.request.log_response_body
        self._clock = clock

    @property
    def app_logger(self) -> AppLogger:
        return self._logger

    @property
    def captures_request_body(self) -> bool:
        """Whether adapters need to buffer request bodies."""
        return self._log_body

    @property
    def captures_response_body(self) -> bool:
        """Whether adapters need to buffer response bodies."""
        return self._log_response_body

    def should_log(self, path: str) -> bool:
        return self._policy.should_log(path)

    # ==================== Inbound ====================

    def start_inbound(self, exchange: InboundExchange) -> InboundTracking:
        """Install the correlation id and log the incoming request.

        The id is taken from the X-Correlation-ID request header, or
        generated when the header is missing or blank.
        """
        correlation_id = set_correlation_id(exchange.header(CORRELATION_HEADER))
        logged = self._policy.should_log(exchange.path)
        tracking = InboundTracking(
            exchange=exchange,
            correlation_id=correlation_id,
            started_at=self._clock(),
            logged=logged,
        )
        if logged:
            self._guarded("log_incoming_request", self._log_incoming_request, exchange)
        return tracking

    def finish_inbound(
        self,
        tracking: InboundTracking,
        status_code: int,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> dict[str, str]:
        """Log the incoming response.

        Returns:
            Headers to add to the response: the propagated correlation id.
            Returned for excluded paths too.
        """
        if tracking.logged:
            duration_ms = elapsed_ms(tracking.started_at, self._clock())
            self._guarded(
                "log_incoming_response",
                self._log_incoming_response,
                tracking,
                status_code,
                duration_ms,
                headers,
                body,
            )
        return {CORRELATION_HEADER: tracking.correlation_id}

    def _log_incoming_request(self, exchange: InboundExchange) -> None:
        self._logger.log_incoming_request(
            exchange.method,
            exchange.uri,
            self._capture.capture_request(exchange),
            exchange.remote_address,
            exchange.user_agent,
        )

    def _log_incoming_response(
        self,
        tracking: InboundTracking,
        status_code: int,
        duration_ms: int,
        headers: Mapping[str, str] | None,
        body: bytes | None,
    ) -> None:
        self._logger.log_incoming_response(
            tracking.exchange.method,
            tracking.exchange.uri,
            status_code,
            duration_ms,
            self._capture.capture_response(headers, body),
        )

    # ==================== Outbound ====================

    def prepare_outbound(self, exchange: OutboundExchange) -> OutboundTracking:
        """Inject the active correlation id and log the outgoing request.

        An id is generated and installed if none is active, so the
        downstream service and the local records agree.
        """
        correlation_id = get_correlation_id()
        prepared = replace(
            exchange,
            headers=_with_header(exchange.headers, CORRELATION_HEADER, correlation_id),
        )
        if self._request_logging_enabled:
            self._guarded("log_outgoing_request", self._log_outgoing_request, prepared)
        return OutboundTracking(exchange=prepared, correlation_id=correlation_id, started_at=self._clock())

    def finish_outbound(
        self,
        tracking: OutboundTracking,
        status_code: int,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> None:
        """Log the response to an outgoing call."""
        if not self._request_logging_enabled:
            return
        duration_ms = elapsed_ms(tracking.started_at, self._clock())
        self._guarded(
            "log_outgoing_response",
            self._log_outgoing_response,
            tracking,
            status_code,
            duration_ms,
            headers,
            body,
        )

    def fail_outbound(self, tracking: OutboundTracking, error: BaseException) -> None:
        """Log an outgoing call that produced no response."""
        if not self._request_logging_enabled:
            return
        duration_ms = elapsed_ms(tracking.started_at, self._clock())
        self._guarded(
            "log_outgoing_failure",
            self._logger.log_outgoing_failure,
            tracking.exchange.method,
            tracking.exchange.url,
            duration_ms,
            error,
        )

    def cancel_outbound(self, tracking: OutboundTracking) -> None:
        """Log an outgoing call abandoned by its caller before a response arrived."""
        self.finish_outbound(tracking, CLIENT_CLOSED_STATUS)

    def _log_outgoing_request(self, exchange: OutboundExchange) -> None:
        self._logger.log_outgoing_request(
            exchange.method,
            exchange.url,
            self._capture.capture_outgoing_request(exchange),
        )

    def _log_outgoing_response(
        self,
        tracking: OutboundTracking,
        status_code: int,
        duration_ms: int,
        headers: Mapping[str, str] | None,
        body: bytes | None,
    ) -> None:
        self._logger.log_outgoing_response(
            tracking.exchange.method,
            tracking.exchange.url,
            status_code,
            duration_ms,
            self._capture.capture_response(headers, body),
        )

    # ==================== Internal ====================

    def _guarded(self, operation: str, func: Callable[..., Any], *args: Any) -> None:
        try:
            func(*args)
        except Exception as exc:
            get_component_logger("exchange_logging").warning(
                "request_logging_failed",
                operation=operation,
                error_type=type(exc).__name__,
                error=str(exc),
            )
