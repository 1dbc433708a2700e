"""Ambient values stamped on every record at emission time."""

from __future__ import annotations

import asyncio
import threading
from datetime import datetime, timezone


def current_timestamp(now: datetime | None = None) -> str:
    """Format a timestamp as ISO-8601 with milliseconds and numeric offset."""
    moment = now if now is not None else datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.isoformat(timespec="milliseconds")


def execution_unit_name() -> str:
    """Name of the current asyncio task, or of the current thread outside one."""
    try:
        task = asyncio.current_task()
    except RuntimeError:
        task = None
    if task is not None:
        return task.get_name()
    return threading.current_thread().name
