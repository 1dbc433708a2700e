"""HTTP exchange value objects.

RequestInfo / ResponseInfo hold what was captured from an exchange after
masking and truncation. They are assembled with a builder while the
exchange is being inspected and frozen before they reach a LogEntry.

InboundExchange / OutboundExchange are the framework-neutral shapes the
adapters translate their native request objects into.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


def _find_header(headers: Mapping[str, str], name: str) -> str | None:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


@dataclass(frozen=True)
class RequestInfo:
    """Captured request data.

    Attributes:
        headers: Header name to value, already masked.
        query_params: Query string parameters.
        body: Masked and truncated body, structured content or a string.
        content_type: Content-Type of the request.
        content_length: Body length in bytes.
    """

    headers: Mapping[str, str] | None = None
    query_params: Mapping[str, str] | None = None
    body: Any = None
    content_type: str | None = None
    content_length: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Render for the ``request_body`` field, omitting absent values."""
        rendered: dict[str, Any] = {}
        if self.headers is not None:
            rendered["headers"] = dict(self.headers)
        if self.query_params:
            rendered["query_params"] = dict(self.query_params)
        if self.body is not None:
            rendered["body"] = self.body
        if self.content_type is not None:
            rendered["content_type"] = self.content_type
        if self.content_length is not None:
            rendered["content_length"] = self.content_length
        return rendered


@dataclass(frozen=True)
class ResponseInfo:
    """Captured response data.

    Attributes:
        headers: Header name to value, already masked.
        body: Masked and truncated body, structured content or a string.
        content_type: Content-Type of the response.
        content_length: Body length in bytes.
    """

    headers: Mapping[str, str] | None = None
    body: Any = None
    content_type: str | None = None
    content_length: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Render for the ``response_body`` field, omitting absent values."""
        rendered: dict[str, Any] = {}
        if self.headers is not None:
            rendered["headers"] = dict(self.headers)
        if self.body is not None:
            rendered["body"] = self.body
        if self.content_type is not None:
            rendered["content_type"] = self.content_type
        if self.content_length is not None:
            rendered["content_length"] = self.content_length
        return rendered


@dataclass
class RequestInfoBuilder:
    """Mutable accumulator for RequestInfo."""

    headers: dict[str, str] | None = None
    query_params: dict[str, str] | None = None
    body: Any = None
    content_type: str | None = None
    content_length: int | None = None

    def build(self) -> RequestInfo:
        return RequestInfo(
            headers=dict(self.headers) if self.headers is not None else None,
            query_params=dict(self.query_params) if self.query_params else None,
            body=self.body,
            content_type=self.content_type,
            content_length=self.content_length,
        )


@dataclass
class ResponseInfoBuilder:
    """Mutable accumulator for ResponseInfo."""

    headers: dict[str, str] | None = None
    body: Any = None
    content_type: str | None = None
    content_length: int | None = None

    def build(self) -> ResponseInfo:
        return ResponseInfo(
            headers=dict(self.headers) if self.headers is not None else None,
            body=self.body,
            content_type=self.content_type,
            content_length=self.content_length,
        )


@dataclass(frozen=True)
class InboundExchange:
    """An inbound HTTP request as seen by the inbound adapter.

    Attributes:
        method: HTTP method.
        path: Request path without query string.
        query_string: Raw query string without the leading ``?``.
        headers: Request headers.
        body: Raw request body.
        remote_address: Client address, if known.
        user_agent: Value of the User-Agent header, if any.
    """

    method: str
    path: str
    query_string: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""
    remote_address: str | None = None
    user_agent: str | None = None

    @property
    def uri(self) -> str:
        """Path plus ``?query`` when a query string is present."""
        if self.query_string:
            return f"{self.path}?{self.query_string}"
        return self.path

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        return _find_header(self.headers, name)


@dataclass(frozen=True)
class OutboundExchange:
    """An outgoing HTTP request descriptor, before dispatch.

    Attributes:
        method: HTTP method.
        url: Absolute target URL.
        headers: Request headers.
        body: Raw request body.
    """

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        return _find_header(self.headers, name)
