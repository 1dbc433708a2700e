"""Unit tests for RequestLoggingMiddleware.

Tests for FastAPI middleware that emits incoming request records.
"""

import asyncio
from collections.abc import AsyncIterator, Callable

import pytest
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse, StreamingResponse
from fastapi.testclient import TestClient
from starlette.responses import Response
from starlette.types import Message, Receive, Scope, Send

from applog.api.middleware import RequestLoggingMiddleware
from applog.api.middleware.logging_middleware import (
    CLIENT_CLOSED_STATUS,
    INCOMING_LOGGER_NAME,
    canonical_header_name,
    canonical_headers,
)
from applog.application.observability import get_correlation_id, peek_correlation_id
from applog.application.services.app_logger import AppLogger
from applog.application.services.logger_factory import AppLoggerFactory, set_default_factory
from applog.config.logging_config import (
    TEST_LOGGING_CONFIGURATION,
    LoggingConfiguration,
    RequestLoggingConfig,
)
from applog.infrastructure.stubs import InMemoryLogSinkStub


def fixed_clock(*readings: float) -> Callable[[], float]:
    return iter(readings).__next__


def build_app(app_logger: AppLogger, clock: Callable[[], float] | None = None) -> FastAPI:
    app = FastAPI()
    if clock is None:
        app.add_middleware(RequestLoggingMiddleware, app_logger=app_logger)
    else:
        app.add_middleware(RequestLoggingMiddleware, app_logger=app_logger, clock=clock)

    @app.get("/api/orders")
    async def list_orders() -> dict[str, str]:
        return {"correlation": get_correlation_id()}

    @app.post("/api/orders")
    async def create_order(request: Request) -> dict[str, object]:
        payload = await request.json()
        return {"created": True, "token": "t-9", "items": payload.get("items", [])}

    @app.get("/api/missing")
    async def missing() -> None:
        raise HTTPException(status_code=404, detail="Not found")

    @app.get("/api/boom")
    async def boom() -> None:
        raise RuntimeError("handler exploded")

    @app.get("/api/stream")
    async def stream() -> StreamingResponse:
        async def chunks() -> AsyncIterator[bytes]:
            yield b"part-1,"
            yield b"part-2"

        return StreamingResponse(chunks(), media_type="text/plain")

    @app.get("/health/live")
    async def live() -> PlainTextResponse:
        return PlainTextResponse("ok")

    return app


class TestCanonicalHeaders:
    """Tests for header name handling."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("x-correlation-id", "X-Correlation-Id"),
            ("authorization", "Authorization"),
            ("content-type", "Content-Type"),
        ],
    )
    def test_canonical_name(self, raw: str, expected: str) -> None:
        assert canonical_header_name(raw) == expected

    def test_repeated_headers_joined(self) -> None:
        headers = canonical_headers([("accept", "text/html"), ("accept", "application/json")])

        assert headers == {"Accept": "text/html, application/json"}


class TestRequestLoggingMiddleware:
    """Tests for RequestLoggingMiddleware class."""

    def test_incoming_records(self, app_logger: AppLogger, sink: InMemoryLogSinkStub) -> None:
        """A request yields a request record then a response record."""
        client = TestClient(build_app(app_logger))

        response = client.get("/api/orders?id=7", headers={"Authorization": "Bearer abc"})

        assert response.status_code == 200
        request_record, response_record = sink.records
        assert request_record["message"] == "Incoming request"
        assert request_record["type"] == "request"
        assert request_record["method"] == "GET"
        assert request_record["uri"] == "/api/orders?id=7"
        assert request_record["user_agent"] == "testclient"
        assert request_record["remote_address"] == "testclient"
        assert request_record["request_body"]["headers"]["Authorization"] == "***MASKED***"
        assert request_record["request_body"]["query_params"] == {"id": "7"}
        assert response_record["message"] == "Incoming response"
        assert response_record["status_code"] == 200
        assert response_record["level"] == "INFO"

    def test_correlation_id_propagated(self, app_logger: AppLogger, sink: InMemoryLogSinkStub) -> None:
        """The inbound header is reused for records, handler and response."""
        client = TestClient(build_app(app_logger))

        response = client.get("/api/orders", headers={"X-Correlation-ID": "abc-123"})

        assert response.headers["X-Correlation-ID"] == "abc-123"
        assert response.json() == {"correlation": "abc-123"}
        assert {r["correlation_id"] for r in sink.records} == {"abc-123"}

    def test_correlation_id_generated(self, app_logger: AppLogger, sink: InMemoryLogSinkStub) -> None:
        client = TestClient(build_app(app_logger))

        response = client.get("/api/orders")

        generated = response.headers["X-Correlation-ID"]
        assert generated
        assert response.json() == {"correlation": generated}
        assert {r["correlation_id"] for r in sink.records} == {generated}

    def test_blank_header_replaced(self, app_logger: AppLogger) -> None:
        client = TestClient(build_app(app_logger))

        response = client.get("/api/orders", headers={"X-Correlation-ID": "   "})

        assert response.headers["X-Correlation-ID"].strip()

    def test_correlation_cleared_after_request(self, app_logger: AppLogger) -> None:
        client = TestClient(build_app(app_logger))

        client.get("/api/orders", headers={"X-Correlation-ID": "scoped"})

        assert peek_correlation_id() is None

    def test_duration_from_clock(self, app_logger: AppLogger, sink: InMemoryLogSinkStub) -> None:
        client = TestClient(build_app(app_logger, fixed_clock(10.0, 10.25)))

        client.get("/api/orders")

        assert sink.records[-1]["duration_ms"] == 250

    def test_client_error_is_warn(self, app_logger: AppLogger, sink: InMemoryLogSinkStub) -> None:
        client = TestClient(build_app(app_logger))

        response = client.get("/api/missing")

        assert response.status_code == 404
        assert sink.records[-1]["status_code"] == 404
        assert sink.records[-1]["level"] == "WARN"

    def test_handler_exception_logged_as_500(self, app_logger: AppLogger, sink: InMemoryLogSinkStub) -> None:
        """An unhandled handler exception still produces a response record."""
        client = TestClient(build_app(app_logger), raise_server_exceptions=False)

        response = client.get("/api/boom")

        assert response.status_code == 500
        assert sink.records[-1]["message"] == "Incoming response"
        assert sink.records[-1]["status_code"] == 500
        assert sink.records[-1]["level"] == "ERROR"

    def test_handler_exception_reraised(self, app_logger: AppLogger) -> None:
        client = TestClient(build_app(app_logger))

        with pytest.raises(RuntimeError, match="handler exploded"):
            client.get("/api/boom")

    def test_request_body_captured_and_still_readable(
        self, app_logger: AppLogger, sink: InMemoryLogSinkStub
    ) -> None:
        client = TestClient(build_app(app_logger))

        response = client.post("/api/orders", json={"items": [1, 2], "password": "hunter2"})

        assert response.json() == {"created": True, "token": "t-9", "items": [1, 2]}
        request_body = sink.records[0]["request_body"]
        assert request_body["body"] == {"items": [1, 2], "password": "***MASKED***"}
        assert request_body["content_type"] == "application/json"

    def test_response_body_captured_and_replayed(self, app_logger: AppLogger, sink: InMemoryLogSinkStub) -> None:
        client = TestClient(build_app(app_logger))

        response = client.post("/api/orders", json={})

        assert response.json()["token"] == "t-9"
        assert sink.records[-1]["response_body"]["body"]["token"] == "***MASKED***"

    def test_streaming_body_replayed(self, app_logger: AppLogger, sink: InMemoryLogSinkStub) -> None:
        client = TestClient(build_app(app_logger))

        response = client.get("/api/stream")

        assert response.text == "part-1,part-2"
        assert sink.records[-1]["response_body"]["body"] == "part-1,part-2"

    def test_excluded_path_not_logged(self, sink: InMemoryLogSinkStub) -> None:
        """Excluded paths produce no records but still get the header."""
        configuration = LoggingConfiguration(application_name="test-app")
        client = TestClient(build_app(AppLogger("server", configuration, sink)))

        response = client.get("/health/live", headers={"X-Correlation-ID": "health-check"})

        assert response.text == "ok"
        assert response.headers["X-Correlation-ID"] == "health-check"
        assert sink.writes == []

    def test_body_capture_disabled(self, sink: InMemoryLogSinkStub) -> None:
        configuration = LoggingConfiguration(
            application_name="test-app",
            request=RequestLoggingConfig(log_body=False, log_response_body=False),
        )
        client = TestClient(build_app(AppLogger("server", configuration, sink)))

        client.post("/api/orders", json={"items": [3]})

        assert "body" not in sink.records[0]["request_body"]
        assert "body" not in sink.records[-1]["response_body"]

    def test_request_logging_disabled(self, sink: InMemoryLogSinkStub) -> None:
        configuration = LoggingConfiguration(
            application_name="test-app",
            request=RequestLoggingConfig(enabled=False),
        )
        client = TestClient(build_app(AppLogger("server", configuration, sink)))

        response = client.get("/api/orders", headers={"X-Correlation-ID": "still-here"})

        assert response.headers["X-Correlation-ID"] == "still-here"
        assert sink.writes == []

    def test_sink_failure_does_not_abort_request(self) -> None:
        broken = AppLogger("server", TEST_LOGGING_CONFIGURATION, InMemoryLogSinkStub.with_write_failure())
        client = TestClient(build_app(broken))

        response = client.get("/api/orders")

        assert response.status_code == 200

    def test_default_logger_from_factory(self, sink: InMemoryLogSinkStub) -> None:
        set_default_factory(AppLoggerFactory(TEST_LOGGING_CONFIGURATION, sink))
        app = FastAPI()
        app.add_middleware(RequestLoggingMiddleware)

        @app.get("/ping")
        async def ping() -> dict[str, str]:
            return {"status": "ok"}

        TestClient(app).get("/ping")

        assert {r["logger_name"] for r in sink.records} == {INCOMING_LOGGER_NAME}


class TestCancelledRequest:
    """Tests for a request cancelled while the handler runs."""

    @staticmethod
    def cancelled_request() -> Request:
        scope = {
            "type": "http",
            "method": "GET",
            "path": "/api/orders",
            "query_string": b"",
            "headers": [(b"x-correlation-id", b"cancel-1")],
            "client": ("10.0.0.1", 1234),
            "server": ("test", 80),
            "scheme": "http",
            "root_path": "",
        }

        async def receive() -> Message:
            return {"type": "http.request", "body": b"", "more_body": False}

        return Request(scope, receive)

    @pytest.mark.asyncio
    async def test_cancellation_logged_as_499_and_reraised(
        self, app_logger: AppLogger, sink: InMemoryLogSinkStub
    ) -> None:
        async def downstream(scope: Scope, receive: Receive, send: Send) -> None:
            return None

        async def cancelled_call_next(request: Request) -> Response:
            raise asyncio.CancelledError()

        middleware = RequestLoggingMiddleware(downstream, app_logger=app_logger, clock=fixed_clock(0.0, 0.05))

        with pytest.raises(asyncio.CancelledError):
            await middleware.dispatch(self.cancelled_request(), cancelled_call_next)

        request, response = sink.records
        assert request["message"] == "Incoming request"
        assert response["message"] == "Incoming response"
        assert response["status_code"] == CLIENT_CLOSED_STATUS
        assert response["level"] == "WARN"
        assert response["duration_ms"] == 50
        assert response["correlation_id"] == "cancel-1"
        assert peek_correlation_id() is None
