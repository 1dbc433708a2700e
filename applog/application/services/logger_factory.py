"""AppLogger instance cache.

One AppLogger per logical name. Lookups are lock-free once a logger
exists; first access takes the factory lock and checks again, so
concurrent first use of a name constructs exactly one instance.

Usage:
    factory = AppLoggerFactory(configuration, sink)
    logger = factory.get_logger("orders.service")
    logger = factory.get_logger(OrderService)  # "module.OrderService"

    # Process-wide default, wired by bootstrap_logging()
    from applog.application.services.logger_factory import get_logger
    logger = get_logger(__name__)
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from applog.application.services.app_logger import AppLogger
from applog.config.logging_config import LoggingConfiguration, get_default_configuration
from applog.infrastructure.observability.encoder import JsonLogEncoder

if TYPE_CHECKING:
    from applog.application.ports.log_sink import LogSinkProtocol


def logger_name_for(name_or_class: str | type) -> str:
    """Logical name of a logger: the string itself or ``module.QualName``."""
    if isinstance(name_or_class, str):
        return name_or_class
    return f"{name_or_class.__module__}.{name_or_class.__qualname__}"


class AppLoggerFactory:
    """Construct-if-absent cache of AppLogger instances.

    All loggers built by one factory share its configuration, sink and
    encoder.
    """

    def __init__(
        self,
        configuration: LoggingConfiguration | None = None,
        sink: LogSinkProtocol | None = None,
        encoder: JsonLogEncoder | None = None,
    ) -> None:
        if sink is None:
            from applog.infrastructure.observability.sink import StructlogLogSink

            sink = StructlogLogSink()
        self.configuration = configuration if configuration is not None else get_default_configuration()
        self.sink = sink
        self.encoder = encoder if encoder is not None else JsonLogEncoder()
        self._loggers: dict[str, AppLogger] = {}
        self._lock = threading.Lock()

    def get_logger(self, name_or_class: str | type) -> AppLogger:
        """Get the logger for a name or class, creating it on first use."""
        name = logger_name_for(name_or_class)
        logger = self._loggers.get(name)
        if logger is not None:
            return logger
        with self._lock:
            logger = self._loggers.get(name)
            if logger is None:
                logger = self._create_logger(name)
                self._loggers[name] = logger
        return logger

    def _create_logger(self, name: str) -> AppLogger:
        return AppLogger(name, self.configuration, self.sink, self.encoder)

    def __len__(self) -> int:
        return len(self._loggers)

    def __contains__(self, name_or_class: object) -> bool:
        if not isinstance(name_or_class, (str, type)):
            return False
        return logger_name_for(name_or_class) in self._loggers


# Process-wide default factory
_default_factory: AppLoggerFactory | None = None
_default_factory_lock = threading.Lock()


def get_default_factory() -> AppLoggerFactory:
    """Get the process-wide factory, building it from the default configuration if needed."""
    global _default_factory
    if _default_factory is None:
        with _default_factory_lock:
            if _default_factory is None:
                _default_factory = AppLoggerFactory(get_default_configuration())
    return _default_factory


def set_default_factory(factory: AppLoggerFactory) -> None:
    """Install the process-wide factory. Called by bootstrap_logging()."""
    global _default_factory
    with _default_factory_lock:
        _default_factory = factory


def reset_default_factory() -> None:
    """Forget the process-wide factory (for testing only)."""
    global _default_factory
    with _default_factory_lock:
        _default_factory = None


def get_logger(name_or_class: str | type) -> AppLogger:
    """Get a logger from the process-wide factory."""
    return get_default_factory().get_logger(name_or_class)
