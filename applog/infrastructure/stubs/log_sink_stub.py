"""In-memory LogSink for development/testing.

Keeps every written line so tests can assert on the exact wire output.

Configurable Test Modes:
- DEFAULT: Every write is recorded
- WRITE_FAILS: write() raises LogSinkError (simulates a broken destination)

Usage Examples:
    # Record everything from DEBUG up
    sink = InMemoryLogSinkStub()

    # Only WARN and above pass the level check
    sink = InMemoryLogSinkStub(min_level=LogLevel.WARN)

    # Simulate a failing destination
    sink = InMemoryLogSinkStub.with_write_failure()
"""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any

from applog.domain.errors.sink import LogSinkError
from applog.domain.models.log_level import LogLevel


class LogSinkStubMode(Enum):
    """Configurable modes for InMemoryLogSinkStub behavior."""

    DEFAULT = "default"  # Always records
    WRITE_FAILS = "write_fails"  # write() raises LogSinkError


@dataclass(frozen=True)
class SinkWrite:
    """One captured write."""

    level: LogLevel
    line: str
    error: BaseException | None = None


class InMemoryLogSinkStub:
    """Recording sink.

    Attributes:
        writes: Captured writes, in order.
    """

    def __init__(
        self,
        min_level: LogLevel = LogLevel.TRACE,
        mode: LogSinkStubMode = LogSinkStubMode.DEFAULT,
    ) -> None:
        self.min_level = min_level
        self.mode = mode
        self.writes: list[SinkWrite] = []
        self._lock = threading.Lock()

    # --- Factory methods for common test scenarios ---

    @classmethod
    def with_write_failure(cls) -> InMemoryLogSinkStub:
        """Create a stub whose writes always fail."""
        return cls(mode=LogSinkStubMode.WRITE_FAILS)

    # --- LogSinkProtocol ---

    def is_enabled_for(self, level: LogLevel) -> bool:
        return level.weight >= self.min_level.weight

    def write(self, level: LogLevel, rendered_line: str, error: BaseException | None = None) -> None:
        if self.mode is LogSinkStubMode.WRITE_FAILS:
            raise LogSinkError("simulated sink write failure")
        with self._lock:
            self.writes.append(SinkWrite(level=level, line=rendered_line, error=error))

    # --- Test helpers ---

    @property
    def lines(self) -> list[str]:
        """Raw rendered lines."""
        return [write.line for write in self.writes]

    @property
    def records(self) -> list[dict[str, Any]]:
        """Rendered lines parsed back into dicts."""
        return [json.loads(write.line) for write in self.writes]

    def records_of_type(self, log_type: str) -> list[dict[str, Any]]:
        """Parsed records whose ``type`` equals ``log_type``."""
        return [record for record in self.records if record.get("type") == log_type]

    def clear(self) -> None:
        """Drop all captured writes."""
        with self._lock:
            self.writes.clear()
