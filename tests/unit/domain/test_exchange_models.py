"""Unit tests for exchange value objects and builders."""

import pytest

from applog.domain.models.exchange import (
    InboundExchange,
    OutboundExchange,
    RequestInfo,
    RequestInfoBuilder,
    ResponseInfoBuilder,
)


class TestRequestInfo:
    """Tests for RequestInfo and its builder."""

    def test_builder_produces_frozen_value(self) -> None:
        builder = RequestInfoBuilder(headers={"Accept": "*/*"})
        builder.body = {"a": 1}
        builder.content_length = 7

        info = builder.build()
        builder.headers["Accept"] = "changed"  # type: ignore[index]

        assert info.headers == {"Accept": "*/*"}
        with pytest.raises(AttributeError):
            info.body = None  # type: ignore[misc]

    def test_to_dict_omits_absent_values(self) -> None:
        assert RequestInfo().to_dict() == {}
        assert RequestInfo(query_params={}).to_dict() == {}

    def test_to_dict(self) -> None:
        info = RequestInfo(
            headers={"A": "b"}, query_params={"id": "7"}, body="x", content_type="text/plain", content_length=1
        )

        assert info.to_dict() == {
            "headers": {"A": "b"},
            "query_params": {"id": "7"},
            "body": "x",
            "content_type": "text/plain",
            "content_length": 1,
        }


class TestResponseInfo:
    """Tests for ResponseInfoBuilder."""

    def test_build(self) -> None:
        builder = ResponseInfoBuilder(content_type="application/json")
        builder.body = {"ok": True}

        assert builder.build().to_dict() == {"body": {"ok": True}, "content_type": "application/json"}


class TestExchanges:
    """Tests for InboundExchange and OutboundExchange."""

    def test_uri_includes_query_string(self) -> None:
        assert InboundExchange(method="GET", path="/api/orders", query_string="id=7").uri == "/api/orders?id=7"
        assert InboundExchange(method="GET", path="/api/orders").uri == "/api/orders"

    def test_header_lookup_is_case_insensitive(self) -> None:
        exchange = InboundExchange(method="GET", path="/", headers={"X-Correlation-Id": "abc"})

        assert exchange.header("x-correlation-id") == "abc"
        assert exchange.header("missing") is None

    def test_outbound_header_lookup(self) -> None:
        exchange = OutboundExchange(method="GET", url="https://a/", headers={"content-type": "text/plain"})

        assert exchange.header("Content-Type") == "text/plain"
