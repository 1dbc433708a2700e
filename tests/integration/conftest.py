"""
Integration test configuration for the full request logging stack.

Provides an "orders" FastAPI service wired with RequestLoggingMiddleware
that calls a downstream "inventory" service through a logging httpx
client. The downstream service is an httpx.MockTransport, so no sockets
are opened.

Usage:
    @pytest.mark.integration
    def test_example(orders_service: OrdersService) -> None:
        client = orders_service.client()
        client.get("/api/orders?id=7")
        records = orders_service.sink.records
"""

from collections.abc import Callable
from dataclasses import dataclass, field

import httpx
import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from applog.api.middleware import RequestLoggingMiddleware
from applog.application.services.logger_factory import AppLoggerFactory
from applog.config.logging_config import LoggingConfiguration, RequestLoggingConfig
from applog.infrastructure.adapters import create_async_logging_client
from applog.infrastructure.stubs import InMemoryLogSinkStub

INTEGRATION_CONFIGURATION = LoggingConfiguration(
    application_name="orders",
    request=RequestLoggingConfig(max_body_size=256),
)


@dataclass
class OrdersService:
    """Handle on the wired service under test."""

    sink: InMemoryLogSinkStub
    factory: AppLoggerFactory
    inventory_requests: list[httpx.Request] = field(default_factory=list)
    clock: Callable[[], float] | None = None

    def client(self, raise_server_exceptions: bool = True) -> TestClient:
        return TestClient(build_orders_app(self), raise_server_exceptions=raise_server_exceptions)


def build_orders_app(service: OrdersService) -> FastAPI:
    app = FastAPI()
    middleware_kwargs: dict[str, object] = {"app_logger": service.factory.get_logger("orders.http.server")}
    if service.clock is not None:
        middleware_kwargs["clock"] = service.clock
    app.add_middleware(RequestLoggingMiddleware, **middleware_kwargs)

    def inventory(request: httpx.Request) -> httpx.Response:
        service.inventory_requests.append(request)
        return httpx.Response(200, json={"sku": "A-1", "available": 3})

    orders_logger = service.factory.get_logger("orders.api")

    @app.get("/api/orders")
    async def get_order(id: int) -> dict[str, object]:
        orders_logger.info("Order loaded", extra={"order_id": id})
        return {"id": id, "status": "open"}

    @app.get("/api/orders/{order_id}/availability")
    async def availability(order_id: int) -> dict[str, object]:
        async with create_async_logging_client(
            service.factory.get_logger("orders.http.client"),
            httpx.MockTransport(inventory),
        ) as client:
            response = await client.get(f"https://inventory.internal/api/items/{order_id}")
        return {"order_id": order_id, **response.json()}

    @app.get("/api/unavailable")
    async def unavailable() -> None:
        raise HTTPException(status_code=503, detail="maintenance")

    @app.get("/health/live")
    async def live() -> dict[str, str]:
        return {"status": "up"}

    return app


@pytest.fixture
def orders_sink() -> InMemoryLogSinkStub:
    return InMemoryLogSinkStub()


@pytest.fixture
def orders_service(orders_sink: InMemoryLogSinkStub) -> OrdersService:
    """Orders service writing every record to one recording sink."""
    return OrdersService(sink=orders_sink, factory=AppLoggerFactory(INTEGRATION_CONFIGURATION, orders_sink))
