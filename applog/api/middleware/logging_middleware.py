"""Inbound exchange adapter for Starlette/FastAPI.

This middleware handles correlation and request records for HTTP requests:
- Extracts the correlation ID from the incoming X-Correlation-ID header
- Generates a new correlation ID if not present
- Sets the correlation ID in context for the whole request
- Logs "Incoming request" and "Incoming response" records with timing
- Includes the correlation ID in response headers, also for excluded paths

A handler exception yields a 500 response record before the exception is
re-raised; a cancelled request yields a 499 record. Failures of the
logging path itself never abort the request.

Usage:
    from fastapi import FastAPI
    from applog.api.middleware import RequestLoggingMiddleware

    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware)
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator, Callable, Iterable

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from applog.application.observability.correlation import clear_correlation_id
from applog.application.services.app_logger import AppLogger
from applog.application.services.exchange_logging_service import CLIENT_CLOSED_STATUS, ExchangeLoggingService
from applog.application.services.logger_factory import get_logger
from applog.domain.models.exchange import InboundExchange

# Logger name of incoming request records when no logger is given
INCOMING_LOGGER_NAME = "applog.http.server"

SERVER_ERROR_STATUS = 500


def canonical_header_name(name: str) -> str:
    """Restore conventional capitalization of a lower-cased header name.

    ``x-correlation-id`` becomes ``X-Correlation-Id``.
    """
    return "-".join(part.capitalize() for part in name.split("-"))


def canonical_headers(items: Iterable[tuple[str, str]]) -> dict[str, str]:
    """Flatten header items, joining repeated headers with ``, ``."""
    headers: dict[str, str] = {}
    for name, value in items:
        key = canonical_header_name(name)
        if key in headers:
            headers[key] = f"{headers[key]}, {value}"
        else:
            headers[key] = value
    return headers


async def _replay(body: bytes) -> AsyncIterator[bytes]:
    yield body


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware emitting request records for every logged exchange.

    Args:
        app: The wrapped ASGI application.
        app_logger: Logger for the records; defaults to the process-wide
            factory's ``applog.http.server`` logger.
        clock: Monotonic clock in seconds, injectable for tests.
    """

    def __init__(
        self,
        app: ASGIApp,
        app_logger: AppLogger | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        super().__init__(app)
        if app_logger is None:
            app_logger = get_logger(INCOMING_LOGGER_NAME)
        self._service = ExchangeLoggingService(app_logger, clock=clock)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Process the request with correlation and request records.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware or route handler.

        Returns:
            HTTP response with the correlation ID header added.
        """
        body = b""
        if self._service.captures_request_body and self._service.should_log(request.url.path):
            body = await request.body()

        exchange = InboundExchange(
            method=request.method,
            path=request.url.path,
            query_string=request.url.query,
            headers=canonical_headers(request.headers.items()),
            body=body,
            remote_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
        tracking = self._service.start_inbound(exchange)

        try:
            try:
                response = await call_next(request)
            except asyncio.CancelledError:
                self._service.finish_inbound(tracking, CLIENT_CLOSED_STATUS)
                raise
            except Exception:
                self._service.finish_inbound(tracking, SERVER_ERROR_STATUS)
                raise

            response_body = None
            if tracking.logged and self._service.captures_response_body:
                response_body = b"".join([chunk async for chunk in response.body_iterator])
                response.body_iterator = _replay(response_body)

            correlation_headers = self._service.finish_inbound(
                tracking,
                response.status_code,
                canonical_headers(response.headers.items()),
                response_body,
            )
            response.headers.update(correlation_headers)
            return response
        finally:
            clear_correlation_id()
