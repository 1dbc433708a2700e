"""Bootstrap wiring for logging configuration."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from applog.application.services.logger_factory import AppLoggerFactory, set_default_factory
from applog.config.logging_config import LoggingConfiguration, configure_default_configuration
from applog.infrastructure.observability import configure_structlog, get_component_logger

if TYPE_CHECKING:
    from applog.application.ports.log_sink import LogSinkProtocol

# Environment variable for environment detection
ENVIRONMENT_VAR = "ENVIRONMENT"
DEFAULT_ENVIRONMENT = "production"


def bootstrap_logging(
    configuration: LoggingConfiguration | None = None,
    environment: str | None = None,
    sink: LogSinkProtocol | None = None,
) -> AppLoggerFactory:
    """Wire logging once at process start.

    Configures structlog, installs the process-wide configuration and
    the default AppLoggerFactory. Should be called first in the startup
    sequence, before any logging occurs.

    Args:
        configuration: Configuration to install; read from APPLOG_*
            environment variables when omitted.
        environment: 'production' for JSON diagnostics, 'development' for
            console; read from ENVIRONMENT when omitted.
        sink: Sink for all loggers; defaults to a StructlogLogSink on stdout.

    Returns:
        The installed factory.

    Raises:
        LoggingConfigurationError: If the configuration is invalid or a
            different one was already installed.
    """
    environment = environment or os.getenv(ENVIRONMENT_VAR, DEFAULT_ENVIRONMENT)
    configure_structlog(environment=environment)

    if configuration is None:
        configuration = LoggingConfiguration.from_environment()
    configure_default_configuration(configuration)

    factory = AppLoggerFactory(configuration, sink)
    set_default_factory(factory)

    log = get_component_logger("startup_logging")
    log.info(
        "structured_logging_configured",
        environment=environment,
        application=configuration.application_name,
        request_logging=configuration.request_logging_enabled,
        application_logging=configuration.application_logging_enabled,
    )
    return factory


__all__ = ["bootstrap_logging"]
