"""Stub implementations for development and testing."""

from applog.infrastructure.stubs.log_sink_stub import (
    InMemoryLogSinkStub,
    LogSinkStubMode,
    SinkWrite,
)

__all__: list[str] = ["InMemoryLogSinkStub", "LogSinkStubMode", "SinkWrite"]
