"""Correlation ID management for request tracing.

This module provides correlation ID management using contextvars, so the
id is bound to the current execution unit: a thread, or an asyncio task
(tasks copy the context of the code that created them).

A context is not carried into threads started with ``threading.Thread``
or work handed to a thread pool. Code that resumes a logical request on
another execution unit must re-install the id there before logging,
either with ``set_correlation_id(saved_id)`` or by wrapping the callable
with ``bind_correlation``. Forgetting to do so does not fail: the first
log call on the new unit generates a fresh, unrelated id.

Usage:
    # In middleware (request start)
    correlation_id = set_correlation_id(request.headers.get(CORRELATION_HEADER))

    # Anywhere during the request
    correlation_id = get_correlation_id()

    # Handing work to a thread pool
    executor.submit(bind_correlation(do_work), item)

    # In structlog configuration
    processors = [..., correlation_id_processor, ...]
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, ParamSpec, TypeVar
from uuid import uuid4

# Header carrying the correlation id between services
CORRELATION_HEADER = "X-Correlation-ID"

# Key under which the id appears in log records
CORRELATION_ID_KEY = "correlation_id"

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

P = ParamSpec("P")
R = TypeVar("R")


def generate_correlation_id() -> str:
    """Generate a new correlation ID.

    Returns:
        128 random bits as 32 lowercase hex characters, no separators.
    """
    return uuid4().hex


def get_correlation_id() -> str:
    """Get the current correlation ID, generating one if none is active.

    The generated id is installed as a side effect, so later calls on the
    same execution unit return the same value.

    Returns:
        The active correlation ID, never empty.
    """
    correlation_id = _correlation_id.get()
    if not correlation_id:
        correlation_id = generate_correlation_id()
        _correlation_id.set(correlation_id)
    return correlation_id


def set_correlation_id(correlation_id: str | None) -> str:
    """Install a correlation ID for the current execution unit.

    A None or blank value is never installed; a fresh id is generated
    instead.

    Args:
        correlation_id: The correlation ID to set.

    Returns:
        The id actually installed.
    """
    if correlation_id is None or not correlation_id.strip():
        correlation_id = generate_correlation_id()
    _correlation_id.set(correlation_id)
    return correlation_id


def clear_correlation_id() -> None:
    """Remove the correlation ID binding from the current execution unit."""
    _correlation_id.set(None)


def has_correlation_id() -> bool:
    """Check whether a correlation ID is active, without generating one."""
    return bool(_correlation_id.get())


def peek_correlation_id() -> str | None:
    """Get the active correlation ID, or None. Never generates."""
    return _correlation_id.get() or None


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """Bind a correlation ID for the duration of a block.

    The previous binding, including "no binding", is restored on exit.

    Args:
        correlation_id: Id to bind, or None/blank to generate one.

    Yields:
        The bound correlation ID.
    """
    if correlation_id is None or not correlation_id.strip():
        correlation_id = generate_correlation_id()
    token = _correlation_id.set(correlation_id)
    try:
        yield correlation_id
    finally:
        _correlation_id.reset(token)


def bind_correlation(func: Callable[P, R]) -> Callable[P, R]:
    """Capture the active correlation ID and re-install it around ``func``.

    Use when ``func`` will run on another execution unit (a new thread, a
    thread pool, a callback scheduled elsewhere).

    Args:
        func: Callable to wrap.

    Returns:
        A wrapper that runs ``func`` with the captured id bound, restoring
        the target unit's previous binding afterwards.
    """
    captured = get_correlation_id()

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        with correlation_scope(captured):
            return func(*args, **kwargs)

    return wrapper


def correlation_id_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Structlog processor to add correlation_id to every log entry.

    Only an already active id is added; diagnostics emitted outside a
    request never create one.

    Args:
        logger: The logger instance (unused, required by structlog).
        method_name: The logging method name (unused, required by structlog).
        event_dict: The event dictionary to modify.

    Returns:
        The event dictionary with correlation_id added.
    """
    correlation_id = peek_correlation_id()
    if correlation_id:
        event_dict.setdefault(CORRELATION_ID_KEY, correlation_id)
    return event_dict
