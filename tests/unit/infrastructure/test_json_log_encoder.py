"""Unit tests for JsonLogEncoder."""

import json

import pytest

from applog.domain.errors import LogEncodingError
from applog.domain.models import FIELD_ORDER, ErrorInfo, LogEntry, LogLevel, LogType
from applog.infrastructure.observability.encoder import ENCODING_FAILURE_MESSAGE, JsonLogEncoder


@pytest.fixture
def encoder() -> JsonLogEncoder:
    return JsonLogEncoder()


def make_entry(**overrides: object) -> LogEntry:
    values: dict[str, object] = {
        "timestamp": "2026-01-02T03:04:05.678+00:00",
        "application": "orders",
        "message": "Incoming response",
        "logger_name": "applog.http.server",
        "thread_name": "MainThread",
        "level": LogLevel.ERROR,
        "log_type": LogType.REQUEST,
        "correlation_id": "c0ffee",
        "method": "GET",
        "uri": "/api/orders?id=7",
        "status_code": 503,
        "duration_ms": 120,
    }
    values.update(overrides)
    return LogEntry(**values)  # type: ignore[arg-type]


class TestEncode:
    """Tests for successful encoding."""

    def test_single_newline_terminated_utf8_line(self, encoder: JsonLogEncoder) -> None:
        data = encoder.encode(make_entry(message="café ☕"))

        assert data.endswith(b"\n")
        assert data.count(b"\n") == 1
        text = data.decode("utf-8")
        assert "café ☕" in text

    def test_exact_bytes(self, encoder: JsonLogEncoder) -> None:
        """The wire format is byte-stable."""
        data = encoder.encode(make_entry())

        assert data == (
            b'{"@timestamp":"2026-01-02T03:04:05.678+00:00","@version":"1","application":"orders",'
            b'"message":"Incoming response","logger_name":"applog.http.server","thread_name":"MainThread",'
            b'"level":"ERROR","level_value":40000,"type":"request","correlation_id":"c0ffee",'
            b'"method":"GET","uri":"/api/orders?id=7","status_code":503,"duration_ms":120,'
            b'"request_body":{},"response_body":{}}\n'
        )

    def test_key_order(self, encoder: JsonLogEncoder) -> None:
        entry = make_entry(
            remote_address="10.0.0.1",
            user_agent="curl",
            error=ErrorInfo("ValueError", "bad"),
            extra={"direction": "outgoing"},
        )

        record = json.loads(encoder.encode(entry))

        assert tuple(record) == FIELD_ORDER

    def test_never_null(self, encoder: JsonLogEncoder) -> None:
        line, failure = encoder.encode_line(make_entry(request_body=None, response_body=None, status_code=None))

        assert failure is None
        assert "null" not in line
        assert '"request_body":{}' in line
        assert '"status_code"' not in line


class TestEncodingFailure:
    """Tests for the fallback path."""

    def test_unserializable_extra(self, encoder: JsonLogEncoder) -> None:
        entry = make_entry(extra={"handle": object()}, request_body={"body": "kept?"})

        line, failure = encoder.encode_line(entry)

        assert isinstance(failure, LogEncodingError)
        assert failure.cause_type == "TypeError"
        record = json.loads(line)
        assert record["message"] == "Incoming response"
        assert record["correlation_id"] == "c0ffee"
        assert record["request_body"] == {}
        assert record["extra"] == {"encoding_error": str(failure)}

    def test_nan_is_rejected(self, encoder: JsonLogEncoder) -> None:
        _, failure = encoder.encode_line(make_entry(extra={"ratio": float("nan")}))

        assert failure is not None
        assert failure.cause_type == "ValueError"

    def test_encode_never_raises(self, encoder: JsonLogEncoder) -> None:
        data = encoder.encode(make_entry(response_body={"body": {1, 2}}))

        assert json.loads(data)["response_body"] == {}

    def test_diagnostic_record(self, encoder: JsonLogEncoder) -> None:
        entry = make_entry(extra={"handle": object()})
        _, failure = encoder.encode_line(entry)
        assert failure is not None

        record = json.loads(encoder.encode_diagnostic(entry, failure))

        assert record["level"] == "ERROR"
        assert record["type"] == "application"
        assert record["message"] == ENCODING_FAILURE_MESSAGE
        assert record["correlation_id"] == "c0ffee"
        assert record["error"]["class"] == "applog.domain.errors.encoding.LogEncodingError"
        assert record["extra"] == {"failed_message": "Incoming response", "cause_type": "TypeError"}
