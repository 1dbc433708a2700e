"""Logging configuration: frozen runtime values and the input models that build them."""

from applog.config.logging_config import (
    DEFAULT_LOGGING_CONFIGURATION,
    TEST_LOGGING_CONFIGURATION,
    ApplicationLoggingConfig,
    LoggingConfiguration,
    RequestLoggingConfig,
    configure_default_configuration,
    get_default_configuration,
    reset_default_configuration,
)
from applog.config.settings import LoggingSettings

__all__: list[str] = [
    "DEFAULT_LOGGING_CONFIGURATION",
    "TEST_LOGGING_CONFIGURATION",
    "ApplicationLoggingConfig",
    "LoggingConfiguration",
    "LoggingSettings",
    "RequestLoggingConfig",
    "configure_default_configuration",
    "get_default_configuration",
    "reset_default_configuration",
]
