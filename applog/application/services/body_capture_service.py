"""Bounded capture of HTTP headers and bodies.

Stateless transform applied once per captured payload:

1. Decode the raw bytes as UTF-8 (undecodable bytes become U+FFFD).
2. JSON bodies are parsed and masked: configured fields, then patterns in
   string values. The structured value is kept when its serialized form
   fits the budget; otherwise the masked serialization is truncated like
   text. Documents that nest too deeply or use NaN/Infinity are treated
   as text.
3. Text bodies, and bodies too large to parse, have ``"field": value``
   pairs and patterns masked, then are truncated to ``max_body_size``
   characters followed by TRUNCATION_MARKER.

Empty bodies are absent (None), never ``""``. Headers are captured only
when header logging is enabled; request and response bodies have their
own switches.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qsl

from applog.application.services.masking_service import MaskingEngine
from applog.config.logging_config import LoggingConfiguration
from applog.domain.models.exchange import (
    InboundExchange,
    OutboundExchange,
    RequestInfo,
    RequestInfoBuilder,
    ResponseInfo,
    ResponseInfoBuilder,
)
from applog.domain.models.structured_value import StructuredValue, ValueKind

TRUNCATION_MARKER = "... [TRUNCATED]"

# JSON bodies longer than this many budgets are masked as text, unparsed
STRUCTURED_PARSE_FACTOR = 4
MIN_STRUCTURED_PARSE_LIMIT = 65_536


def decode_body(raw: bytes | None) -> str | None:
    """Decode a raw body as UTF-8.

    Returns:
        The decoded text, or None for a missing or empty body.
    """
    if not raw:
        return None
    return raw.decode("utf-8", errors="replace")


def truncate_body(text: str, max_size: int) -> str:
    """Bound a body to ``max_size`` characters.

    Args:
        text: Decoded body.
        max_size: Character budget.

    Returns:
        ``text`` unchanged if it fits, else its first ``max_size``
        characters followed by TRUNCATION_MARKER.
    """
    if len(text) > max_size:
        return text[:max_size] + TRUNCATION_MARKER
    return text


def _find_header(headers: Mapping[str, str] | None, name: str) -> str | None:
    if not headers:
        return None
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def parse_query_params(query_string: str) -> dict[str, str]:
    """Parse a query string into a flat mapping.

    Repeated parameters are joined with ``,``.
    """
    params: dict[str, str] = {}
    for name, value in parse_qsl(query_string, keep_blank_values=True):
        if name in params:
            params[name] = f"{params[name]},{value}"
        else:
            params[name] = value
    return params


class BodyCapture:
    """Captures request/response data under the configured budget.

    Example:
        >>> capture = BodyCapture(config, MaskingEngine.from_configuration(config))
        >>> info = capture.capture_request(exchange)
        >>> info.headers["Authorization"]
        '***MASKED***'
    """

    def __init__(self, configuration: LoggingConfiguration, masking: MaskingEngine) -> None:
        self._request_config = configuration.request
        self._masking = masking

    @property
    def max_body_size(self) -> int:
        return self._request_config.max_body_size

    def capture_body(self, raw: bytes | None) -> Any:
        """Decode, mask and bound one body.

        Returns:
            Structured content (dict/list), a string, or None when empty.
        """
        text = decode_body(raw)
        if text is None:
            return None
        if len(text) <= self._structured_parse_limit():
            try:
                structured = self._capture_structured(text)
            except (ValueError, RecursionError):
                structured = None
            if structured is not None:
                return structured
        masked_text = self._masking.mask_text(self._masking.mask_field_text(text)) or ""
        return truncate_body(masked_text, self.max_body_size)

    def _structured_parse_limit(self) -> int:
        return max(self.max_body_size * STRUCTURED_PARSE_FACTOR, MIN_STRUCTURED_PARSE_LIMIT)

    def _capture_structured(self, text: str) -> Any:
        tree = StructuredValue.from_json(text)
        if tree.kind is ValueKind.SCALAR:
            return None
        masked = self._masking.mask_body_tree(tree).to_python()
        serialized = json.dumps(masked, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
        if len(serialized) <= self.max_body_size:
            return masked
        return truncate_body(serialized, self.max_body_size)

    def capture_headers(self, headers: Mapping[str, str] | None) -> dict[str, str] | None:
        """Capture masked headers, or None when header logging is off."""
        if not self._request_config.log_headers or headers is None:
            return None
        return self._masking.mask_headers(headers)

    def capture_request(self, exchange: InboundExchange) -> RequestInfo:
        """Capture an inbound request."""
        builder = RequestInfoBuilder(
            headers=self.capture_headers(exchange.headers),
            content_type=exchange.header("Content-Type"),
        )
        if exchange.query_string:
            builder.query_params = parse_query_params(exchange.query_string)
        if self._request_config.log_body and exchange.body:
            builder.body = self.capture_body(exchange.body)
        if exchange.body:
            builder.content_length = len(exchange.body)
        return builder.build()

    def capture_outgoing_request(self, exchange: OutboundExchange) -> RequestInfo:
        """Capture an outgoing request, after the correlation header was injected."""
        builder = RequestInfoBuilder(
            headers=self.capture_headers(exchange.headers),
            content_type=exchange.header("Content-Type"),
        )
        if self._request_config.log_body and exchange.body:
            builder.body = self.capture_body(exchange.body)
        if exchange.body:
            builder.content_length = len(exchange.body)
        return builder.build()

    def capture_response(self, headers: Mapping[str, str] | None, body: bytes | None) -> ResponseInfo:
        """Capture a response, inbound or outbound."""
        builder = ResponseInfoBuilder(
            headers=self.capture_headers(headers),
            content_type=_find_header(headers, "Content-Type"),
        )
        if self._request_config.log_response_body and body:
            builder.body = self.capture_body(body)
        if body:
            builder.content_length = len(body)
        return builder.build()
