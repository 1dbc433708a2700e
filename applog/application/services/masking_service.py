"""Masking of sensitive values before they reach a log record.

Masking is advisory: it never raises. Input that cannot be interpreted
(a body that is not JSON, an object that is not a mapping) is returned
unmodified, because a log call must never fail on account of a payload.

Three kinds of rules:
- Field names: case-insensitive match on object keys, anywhere in a
  structured payload. The whole value under a matching key is replaced.
- Header names: case-insensitive match on a flat header mapping.
- Patterns: regex substitution on free text (card numbers, emails).

Masking is idempotent: the mask value never matches a field name or a
pattern (LoggingConfiguration validates this), so masking masked output
changes nothing.

Usage:
    engine = MaskingEngine.from_configuration(config)
    safe_headers = engine.mask_headers(request_headers)
    safe_body = engine.mask_fields({"user": {"Password": "x"}})
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from applog.config.logging_config import (
    CREDIT_CARD_PATTERN,
    CREDIT_CARD_REPLACEMENT,
    EMAIL_PATTERN,
    EMAIL_REPLACEMENT,
    LoggingConfiguration,
)
from applog.domain.models.structured_value import StructuredValue, ValueKind

_CREDIT_CARD_RE = re.compile(CREDIT_CARD_PATTERN)
_EMAIL_RE = re.compile(EMAIL_PATTERN)


def _normalize_names(names: Iterable[str]) -> frozenset[str]:
    return frozenset(name.lower() for name in names)


def mask_structured(value: StructuredValue, names: frozenset[str], mask_value: str) -> StructuredValue:
    """Mask a tagged tree.

    Args:
        value: Tree to mask.
        names: Lower-cased field names to mask.
        mask_value: Replacement for every value under a matching key.

    Returns:
        A new tree; object member order and array lengths are preserved.
    """
    if value.kind is ValueKind.OBJECT:
        return StructuredValue.object(
            tuple(
                (
                    name,
                    StructuredValue.leaf(mask_value)
                    if name.lower() in names
                    else mask_structured(member, names, mask_value),
                )
                for name, member in value.members
            )
        )
    if value.kind is ValueKind.ARRAY:
        return StructuredValue.array(tuple(mask_structured(item, names, mask_value) for item in value.items))
    return value


def mask_string_leaves(value: StructuredValue, mask_text: Callable[[str], str]) -> StructuredValue:
    """Apply ``mask_text`` to every string leaf of a tagged tree."""
    if value.kind is ValueKind.OBJECT:
        return StructuredValue.object(
            tuple((name, mask_string_leaves(member, mask_text)) for name, member in value.members)
        )
    if value.kind is ValueKind.ARRAY:
        return StructuredValue.array(tuple(mask_string_leaves(item, mask_text) for item in value.items))
    if isinstance(value.scalar, str):
        return StructuredValue.leaf(mask_text(value.scalar))
    return value


def compile_field_text_pattern(names: Iterable[str]) -> re.Pattern[str] | None:
    """Regex matching ``"<name>": <scalar>`` pairs inside JSON-like text.

    Used on bodies that were not parsed as structured content, so field
    values stay masked in the text rendering. Returns None for no names.
    """
    alternatives = "|".join(re.escape(name) for name in sorted(names))
    if not alternatives:
        return None
    return re.compile(
        rf'("(?:{alternatives})"\s*:\s*)("(?:[^"\\]|\\.)*"|[\w.+-]+)',
        re.IGNORECASE,
    )


def mask_json_text(text: str | None, field_names: Iterable[str], mask_value: str) -> str | None:
    """Mask fields inside a JSON document held as text.

    Args:
        text: JSON text.
        field_names: Field names to mask, any case.
        mask_value: Replacement value.

    Returns:
        Re-serialized masked JSON, or ``text`` unchanged if it is None,
        blank or not valid JSON.
    """
    if text is None or not text.strip():
        return text
    names = _normalize_names(field_names)
    if not names:
        return text
    try:
        tree = StructuredValue.from_json(text)
    except (ValueError, RecursionError):
        return text
    masked = mask_structured(tree, names, mask_value)
    return json.dumps(masked.to_python(), ensure_ascii=False, separators=(",", ":"))


def mask_fields(payload: Any, field_names: Iterable[str], mask_value: str) -> Any:
    """Mask matching fields of a structured payload.

    Args:
        payload: Mapping, list, StructuredValue, or JSON text.
        field_names: Field names to mask, any case.
        mask_value: Replacement value.

    Returns:
        The masked payload, in the same representation as the input.
        None, scalars and unparseable text come back unchanged.
    """
    if payload is None:
        return None
    names = _normalize_names(field_names)
    if not names:
        return payload
    if isinstance(payload, StructuredValue):
        return mask_structured(payload, names, mask_value)
    if isinstance(payload, str):
        return mask_json_text(payload, names, mask_value)
    if isinstance(payload, (Mapping, list, tuple)):
        return mask_structured(StructuredValue.from_python(payload), names, mask_value).to_python()
    return payload


def mask_headers(
    headers: Mapping[str, str] | None, header_names: Iterable[str], mask_value: str
) -> dict[str, str] | None:
    """Mask matching headers of a flat header mapping.

    Returns:
        A new mapping with matching values replaced, or None for None input.
    """
    if headers is None:
        return None
    names = _normalize_names(header_names)
    return {name: mask_value if name.lower() in names else value for name, value in headers.items()}


def mask_pattern(text: str | None, pattern: str | re.Pattern[str], replacement: str) -> str | None:
    """Substitute every match of ``pattern`` in ``text``."""
    if text is None:
        return None
    return re.sub(pattern, replacement, text)


def mask_credit_card(text: str | None) -> str | None:
    """Mask 16-digit card numbers, keeping the first and last group."""
    if text is None:
        return None
    return _CREDIT_CARD_RE.sub(CREDIT_CARD_REPLACEMENT, text)


def mask_email(text: str | None) -> str | None:
    """Mask the local part of email addresses."""
    if text is None:
        return None
    return _EMAIL_RE.sub(EMAIL_REPLACEMENT, text)


class MaskingEngine:
    """Masking rules bound to one configuration.

    Attributes:
        mask_value: Replacement for masked values.
    """

    def __init__(
        self,
        masked_fields: Iterable[str],
        masked_headers: Iterable[str],
        mask_value: str,
        mask_patterns: Iterable[tuple[str, str]] = (),
    ) -> None:
        """Initialize the engine.

        Args:
            masked_fields: Body field names to mask.
            masked_headers: Header names to mask.
            mask_value: Replacement value.
            mask_patterns: ``(regex, replacement)`` pairs for free text.
        """
        self._field_names = _normalize_names(masked_fields)
        self._header_names = _normalize_names(masked_headers)
        self._patterns = tuple((re.compile(pattern), replacement) for pattern, replacement in mask_patterns)
        self._field_text_pattern = compile_field_text_pattern(self._field_names)
        self.mask_value = mask_value

    @classmethod
    def from_configuration(cls, configuration: LoggingConfiguration) -> MaskingEngine:
        """Build an engine from the logging configuration."""
        return cls(
            masked_fields=configuration.masked_fields,
            masked_headers=configuration.masked_headers,
            mask_value=configuration.mask_value,
            mask_patterns=configuration.mask_patterns if configuration.mask_patterns_enabled else (),
        )

    def mask_fields(self, payload: Any) -> Any:
        """Mask configured fields in a structured payload."""
        return mask_fields(payload, self._field_names, self.mask_value)

    def mask_headers(self, headers: Mapping[str, str] | None) -> dict[str, str] | None:
        """Mask configured headers."""
        return mask_headers(headers, self._header_names, self.mask_value)

    def mask_text(self, text: str | None) -> str | None:
        """Apply every configured pattern to free text."""
        if text is None:
            return None
        for pattern, replacement in self._patterns:
            text = pattern.sub(replacement, text)
        return text

    def mask_value_tree(self, value: StructuredValue) -> StructuredValue:
        """Mask configured fields in an already parsed tree."""
        return mask_structured(value, self._field_names, self.mask_value)

    def mask_body_tree(self, value: StructuredValue) -> StructuredValue:
        """Mask configured fields, then configured patterns in string leaves."""
        masked = self.mask_value_tree(value)
        if not self._patterns:
            return masked
        return mask_string_leaves(masked, lambda text: self.mask_text(text) or "")

    def mask_field_text(self, text: str) -> str:
        """Mask configured fields in JSON-like text that was not parsed.

        Only ``"name": value`` pairs with a string or bare scalar value are
        rewritten; a nested object or array under a masked name is left as is.
        """
        if self._field_text_pattern is None:
            return text
        replacement = json.dumps(self.mask_value, ensure_ascii=False)
        return self._field_text_pattern.sub(lambda match: match.group(1) + replacement, text)
