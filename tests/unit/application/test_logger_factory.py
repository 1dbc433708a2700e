"""Unit tests for the AppLogger instance cache."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

from applog.application.services.app_logger import AppLogger
from applog.application.services.logger_factory import (
    AppLoggerFactory,
    get_default_factory,
    get_logger,
    logger_name_for,
    set_default_factory,
)
from applog.config.logging_config import (
    DEFAULT_LOGGING_CONFIGURATION,
    TEST_LOGGING_CONFIGURATION,
    LoggingConfiguration,
    configure_default_configuration,
)
from applog.infrastructure.stubs import InMemoryLogSinkStub


class OrderService:
    """Class used as a logger key."""


class SlowFactory(AppLoggerFactory):
    """Factory whose construction is slow enough to race."""

    def __init__(self, *args: object, **kwargs: object) -> None:
        super().__init__(*args, **kwargs)  # type: ignore[arg-type]
        self.created: list[str] = []
        self._created_lock = threading.Lock()

    def _create_logger(self, name: str) -> AppLogger:
        with self._created_lock:
            self.created.append(name)
        time.sleep(0.01)
        return super()._create_logger(name)


class TestAppLoggerFactory:
    """Tests for AppLoggerFactory."""

    def test_same_name_same_instance(self, configuration: LoggingConfiguration, sink: InMemoryLogSinkStub) -> None:
        factory = AppLoggerFactory(configuration, sink)

        assert factory.get_logger("orders") is factory.get_logger("orders")
        assert factory.get_logger("orders") is not factory.get_logger("payments")
        assert len(factory) == 2

    def test_class_key_uses_qualified_name(
        self, configuration: LoggingConfiguration, sink: InMemoryLogSinkStub
    ) -> None:
        factory = AppLoggerFactory(configuration, sink)

        logger = factory.get_logger(OrderService)

        assert logger.name == f"{OrderService.__module__}.OrderService"
        assert logger is factory.get_logger(logger_name_for(OrderService))
        assert OrderService in factory

    def test_loggers_share_configuration_and_sink(
        self, configuration: LoggingConfiguration, sink: InMemoryLogSinkStub
    ) -> None:
        factory = AppLoggerFactory(configuration, sink)

        factory.get_logger("a").info("from a")
        factory.get_logger("b").info("from b")

        assert [r["logger_name"] for r in sink.records] == ["a", "b"]
        assert factory.get_logger("a").configuration is configuration

    def test_concurrent_first_use_creates_one_instance(
        self, configuration: LoggingConfiguration, sink: InMemoryLogSinkStub
    ) -> None:
        """At most one instance per key, whatever the interleaving."""
        factory = SlowFactory(configuration, sink)
        barrier = threading.Barrier(16)

        def lookup() -> AppLogger:
            barrier.wait()
            return factory.get_logger("contended")

        with ThreadPoolExecutor(max_workers=16) as pool:
            loggers = list(pool.map(lambda _: lookup(), range(16)))

        assert factory.created == ["contended"]
        assert all(logger is loggers[0] for logger in loggers)


class TestDefaultFactory:
    """Tests for the process-wide factory."""

    def test_default_factory_uses_default_configuration(self) -> None:
        assert get_default_factory().configuration is DEFAULT_LOGGING_CONFIGURATION

    def test_default_factory_picks_up_installed_configuration(self) -> None:
        configure_default_configuration(TEST_LOGGING_CONFIGURATION)

        assert get_logger("x").application_name == "test-app"

    def test_set_default_factory(self, sink: InMemoryLogSinkStub) -> None:
        factory = AppLoggerFactory(TEST_LOGGING_CONFIGURATION, sink)
        set_default_factory(factory)

        get_logger("installed").info("hello")

        assert get_default_factory() is factory
        assert sink.records[0]["logger_name"] == "installed"
