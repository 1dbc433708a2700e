"""Outbound exchange adapter for httpx.

Transports wrapping any httpx transport: every request gets the active
X-Correlation-ID injected before dispatch and produces an "Outgoing
request" record, then an "Outgoing response" record, or an "Outgoing
request failed" record (status 0) when dispatch raises. A cancelled async
dispatch is recorded as an "Outgoing response" with status 499. Dispatch
errors and cancellation are re-raised unchanged.

Usage:
    client = create_logging_client()
    client.get("https://inventory.internal/api/items/7")

    async with create_async_logging_client(base_url="https://inventory.internal") as client:
        await client.get("/api/items/7")

    # Wrapping an existing transport
    transport = LoggingTransport(service, httpx.HTTPTransport(retries=2))
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from applog.application.observability.correlation import CORRELATION_HEADER
from applog.application.services.app_logger import AppLogger
from applog.application.services.exchange_logging_service import ExchangeLoggingService
from applog.application.services.logger_factory import get_logger
from applog.domain.models.exchange import OutboundExchange

# Logger name of outgoing request records when no logger is given
OUTGOING_LOGGER_NAME = "applog.http.client"


def _header_dict(headers: httpx.Headers) -> dict[str, str]:
    """Headers with their names as sent, repeated headers joined with ``, ``."""
    flattened: dict[str, str] = {}
    for raw_name, raw_value in headers.raw:
        name = raw_name.decode(headers.encoding)
        value = raw_value.decode(headers.encoding)
        flattened[name] = f"{flattened[name]}, {value}" if name in flattened else value
    return flattened


def _outbound_exchange(request: httpx.Request, body: bytes) -> OutboundExchange:
    return OutboundExchange(
        method=request.method,
        url=str(request.url),
        headers=_header_dict(request.headers),
        body=body,
    )


def _default_service(app_logger: AppLogger | None) -> ExchangeLoggingService:
    return ExchangeLoggingService(app_logger if app_logger is not None else get_logger(OUTGOING_LOGGER_NAME))


class LoggingTransport(httpx.BaseTransport):
    """Synchronous httpx transport that logs each exchange."""

    def __init__(
        self,
        service: ExchangeLoggingService,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._service = service
        self._transport = transport if transport is not None else httpx.HTTPTransport()

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        body = request.read() if self._service.captures_request_body else b""
        tracking = self._service.prepare_outbound(_outbound_exchange(request, body))
        request.headers[CORRELATION_HEADER] = tracking.correlation_id

        try:
            response = self._transport.handle_request(request)
        except Exception as exc:
            self._service.fail_outbound(tracking, exc)
            raise

        response_body = response.read() if self._service.captures_response_body else None
        self._service.finish_outbound(tracking, response.status_code, _header_dict(response.headers), response_body)
        return response

    def close(self) -> None:
        self._transport.close()


class AsyncLoggingTransport(httpx.AsyncBaseTransport):
    """Asynchronous httpx transport that logs each exchange."""

    def __init__(
        self,
        service: ExchangeLoggingService,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._service = service
        self._transport = transport if transport is not None else httpx.AsyncHTTPTransport()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        body = await request.aread() if self._service.captures_request_body else b""
        tracking = self._service.prepare_outbound(_outbound_exchange(request, body))
        request.headers[CORRELATION_HEADER] = tracking.correlation_id

        try:
            response = await self._transport.handle_async_request(request)
        except asyncio.CancelledError:
            self._service.cancel_outbound(tracking)
            raise
        except Exception as exc:
            self._service.fail_outbound(tracking, exc)
            raise

        response_body = await response.aread() if self._service.captures_response_body else None
        self._service.finish_outbound(tracking, response.status_code, _header_dict(response.headers), response_body)
        return response

    async def aclose(self) -> None:
        await self._transport.aclose()


def create_logging_client(
    app_logger: AppLogger | None = None,
    transport: httpx.BaseTransport | None = None,
    **client_kwargs: Any,
) -> httpx.Client:
    """Create an httpx.Client whose requests are logged.

    Args:
        app_logger: Logger for the records; defaults to the process-wide
            factory's ``applog.http.client`` logger.
        transport: Transport to wrap; defaults to httpx.HTTPTransport.
        **client_kwargs: Passed to httpx.Client (base_url, timeout, ...).
    """
    return httpx.Client(
        transport=LoggingTransport(_default_service(app_logger), transport),
        **client_kwargs,
    )


def create_async_logging_client(
    app_logger: AppLogger | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    **client_kwargs: Any,
) -> httpx.AsyncClient:
    """Create an httpx.AsyncClient whose requests are logged.

    Args:
        app_logger: Logger for the records; defaults to the process-wide
            factory's ``applog.http.client`` logger.
        transport: Transport to wrap; defaults to httpx.AsyncHTTPTransport.
        **client_kwargs: Passed to httpx.AsyncClient.
    """
    return httpx.AsyncClient(
        transport=AsyncLoggingTransport(_default_service(app_logger), transport),
        **client_kwargs,
    )
