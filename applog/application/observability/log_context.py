"""Per-request log context.

A contextvar-held mapping of fields merged into the ``extra`` block of
every record emitted on the current execution unit. Values keep their
JSON type; ``None`` values are ignored. The stored mapping is replaced,
never mutated, so tasks that copied the context do not see later binds.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from types import MappingProxyType
from typing import Any

_EMPTY: Mapping[str, Any] = MappingProxyType({})

_log_context: ContextVar[Mapping[str, Any]] = ContextVar("applog_log_context", default=_EMPTY)


def get_log_context() -> dict[str, Any]:
    """Return a shallow copy of the current log context."""
    return dict(_log_context.get())


def bind_log_context(**values: Any) -> None:
    """Bind values into the current log context."""
    if not values:
        return
    current = dict(_log_context.get())
    for key, value in values.items():
        if value is None:
            continue
        current[key] = value
    _log_context.set(MappingProxyType(current))


def unbind_log_context(*keys: str) -> None:
    """Remove selected keys from the current log context."""
    current = dict(_log_context.get())
    for key in keys:
        current.pop(key, None)
    _log_context.set(MappingProxyType(current))


def clear_log_context() -> None:
    """Drop every key from the current log context."""
    _log_context.set(_EMPTY)


@contextmanager
def log_context(**values: Any) -> Iterator[None]:
    """Temporarily bind log context for the duration of a block."""
    token = _log_context.set(_log_context.get())
    try:
        bind_log_context(**values)
        yield
    finally:
        _log_context.reset(token)
