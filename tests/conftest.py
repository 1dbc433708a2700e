"""
Pytest configuration and shared fixtures for applog tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Use InMemoryLogSinkStub to assert on the exact rendered lines
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

from collections.abc import Iterator

import pytest

from applog.application.observability import clear_correlation_id, clear_log_context
from applog.application.services.app_logger import AppLogger
from applog.application.services.logger_factory import reset_default_factory
from applog.config.logging_config import (
    TEST_LOGGING_CONFIGURATION,
    LoggingConfiguration,
    reset_default_configuration,
)
from applog.infrastructure.stubs import InMemoryLogSinkStub


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from applog import __version__

    return __version__


@pytest.fixture(autouse=True)
def reset_logging_state() -> Iterator[None]:
    """Start and end every test with no correlation id, context or defaults."""
    clear_correlation_id()
    clear_log_context()
    reset_default_configuration()
    reset_default_factory()
    yield
    clear_correlation_id()
    clear_log_context()
    reset_default_configuration()
    reset_default_factory()


@pytest.fixture
def configuration() -> LoggingConfiguration:
    """Small-budget configuration with nothing excluded."""
    return TEST_LOGGING_CONFIGURATION


@pytest.fixture
def sink() -> InMemoryLogSinkStub:
    """Recording sink accepting every level."""
    return InMemoryLogSinkStub()


@pytest.fixture
def app_logger(configuration: LoggingConfiguration, sink: InMemoryLogSinkStub) -> AppLogger:
    """Logger writing to the recording sink."""
    return AppLogger("tests.logger", configuration, sink)
