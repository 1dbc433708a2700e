"""Logging configuration.

This module defines the process-wide, read-only configuration of the
logging core, with environment variable overrides for deployment tuning.

The configuration is built once at startup and shared by reference across
every logger. Invalid values raise LoggingConfigurationError immediately so
a misconfigured process never starts handling requests.

Environment Variables:
- APPLOG_ENABLED: Global enable flag (default: true)
- APPLOG_APPLICATION_NAME: Application name in every record (default: application)
- APPLOG_REQUEST_ENABLED: Request logging (default: true)
- APPLOG_REQUEST_LOG_HEADERS: Capture headers (default: true)
- APPLOG_REQUEST_LOG_BODY: Capture request bodies (default: true)
- APPLOG_REQUEST_LOG_RESPONSE_BODY: Capture response bodies (default: true)
- APPLOG_REQUEST_MAX_BODY_SIZE: Body capture budget in characters (default: 10240)
- APPLOG_REQUEST_EXCLUDE_PATTERNS: Comma-separated path globs never logged
- APPLOG_REQUEST_INCLUDE_PATTERNS: Comma-separated path globs allow-list
- APPLOG_APPLICATION_ENABLED: Application logging (default: true)
- APPLOG_APPLICATION_INCLUDE_STACK_TRACE: Error blocks on records (default: true)
- APPLOG_APPLICATION_MAX_STACK_TRACE_DEPTH: Frames kept per error (default: 50)
- APPLOG_MASKED_HEADERS: Comma-separated header names to mask
- APPLOG_MASKED_FIELDS: Comma-separated body field names to mask
- APPLOG_MASK_VALUE: Replacement for masked values (default: ***MASKED***)
"""

from __future__ import annotations

import os
import re
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from applog.domain.errors.configuration import LoggingConfigurationError

DEFAULT_APPLICATION_NAME = "application"
DEFAULT_MASK_VALUE = "***MASKED***"
DEFAULT_MAX_BODY_SIZE = 10240
DEFAULT_MAX_STACK_TRACE_DEPTH = 50

DEFAULT_MASKED_HEADERS: tuple[str, ...] = ("Authorization", "X-Api-Key", "Cookie", "Set-Cookie")
DEFAULT_MASKED_FIELDS: tuple[str, ...] = ("password", "secret", "token", "creditCard", "ssn")
DEFAULT_EXCLUDE_PATTERNS: tuple[str, ...] = ("/actuator/**", "/health/**", "/favicon.ico")

# Payment-card-like digit runs and email addresses
CREDIT_CARD_PATTERN = r"\b(\d{4})[- ]?(\d{4})[- ]?(\d{4})[- ]?(\d{4})\b"
CREDIT_CARD_REPLACEMENT = r"\1-****-****-\4"
EMAIL_PATTERN = r"([a-zA-Z0-9._%+-]+)@([a-zA-Z0-9.-]+\.[a-zA-Z]{2,})"
EMAIL_REPLACEMENT = r"***@\2"

DEFAULT_MASK_PATTERNS: tuple[tuple[str, str], ...] = (
    (CREDIT_CARD_PATTERN, CREDIT_CARD_REPLACEMENT),
    (EMAIL_PATTERN, EMAIL_REPLACEMENT),
)


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set.

    Returns:
        True for 1/true/yes/on, False for 0/false/no/off, default otherwise.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Raises:
        LoggingConfigurationError: If the value is not an integer.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise LoggingConfigurationError(f"expected an integer, got {value!r}", option=key) from None


def _get_list_env(key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """Get comma-separated list environment variable with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _validate_path_patterns(option: str, patterns: tuple[str, ...]) -> None:
    for pattern in patterns:
        if not pattern or not pattern.strip():
            raise LoggingConfigurationError("path patterns must not be blank", option=option)
        if not (pattern.startswith("/") or pattern.startswith("*")):
            raise LoggingConfigurationError(
                f"path pattern must start with '/' or '*', got {pattern!r}", option=option
            )


@dataclass(frozen=True)
class RequestLoggingConfig:
    """Request logging settings.

    Attributes:
        enabled: Emit request-type records at all.
        log_headers: Capture request and response headers.
        log_body: Capture request bodies.
        log_response_body: Capture response bodies.
        max_body_size: Captured body budget, in decoded characters.
        exclude_patterns: Path globs that suppress logging (checked first).
        include_patterns: If non-empty, only matching paths are logged.
    """

    enabled: bool = True
    log_headers: bool = True
    log_body: bool = True
    log_response_body: bool = True
    max_body_size: int = DEFAULT_MAX_BODY_SIZE
    exclude_patterns: tuple[str, ...] = DEFAULT_EXCLUDE_PATTERNS
    include_patterns: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_body_size < 1:
            raise LoggingConfigurationError(
                f"must be positive, got {self.max_body_size}", option="request.maxBodySize"
            )
        _validate_path_patterns("request.excludePatterns", self.exclude_patterns)
        _validate_path_patterns("request.includePatterns", self.include_patterns)


@dataclass(frozen=True)
class ApplicationLoggingConfig:
    """Application logging settings.

    Attributes:
        enabled: Emit application-type records at all.
        include_stack_trace: Attach an error block when an exception is given.
        max_stack_trace_depth: Maximum number of frames kept per error.
    """

    enabled: bool = True
    include_stack_trace: bool = True
    max_stack_trace_depth: int = DEFAULT_MAX_STACK_TRACE_DEPTH

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_stack_trace_depth < 0:
            raise LoggingConfigurationError(
                f"must be non-negative, got {self.max_stack_trace_depth}",
                option="application.maxStackTraceDepth",
            )


@dataclass(frozen=True)
class LoggingConfiguration:
    """Process-wide logging configuration.

    Read-only after construction and shared by every logger.

    Attributes:
        enabled: Global switch; when False nothing is emitted.
        application_name: Value of the ``application`` field.
        request: Request logging settings.
        application: Application logging settings.
        masked_headers: Header names masked case-insensitively.
        masked_fields: Body field names masked case-insensitively.
        mask_value: Placeholder written in place of masked values.
        mask_patterns: ``(regex, replacement)`` pairs applied to text bodies
            and to string values inside JSON bodies.
        mask_patterns_enabled: Apply mask_patterns to captured bodies.
    """

    enabled: bool = True
    application_name: str = DEFAULT_APPLICATION_NAME
    request: RequestLoggingConfig = field(default_factory=RequestLoggingConfig)
    application: ApplicationLoggingConfig = field(default_factory=ApplicationLoggingConfig)
    masked_headers: tuple[str, ...] = DEFAULT_MASKED_HEADERS
    masked_fields: tuple[str, ...] = DEFAULT_MASKED_FIELDS
    mask_value: str = DEFAULT_MASK_VALUE
    mask_patterns: tuple[tuple[str, str], ...] = DEFAULT_MASK_PATTERNS
    mask_patterns_enabled: bool = True

    def __post_init__(self) -> None:
        """Validate configuration values.

        The mask value must never be matched by a masking rule itself.
        """
        if not self.application_name or not self.application_name.strip():
            raise LoggingConfigurationError("must not be blank", option="applicationName")
        if not self.mask_value or not self.mask_value.strip():
            raise LoggingConfigurationError("must not be blank", option="maskValue")
        lowered_fields = {name.lower() for name in self.masked_fields}
        if self.mask_value.lower() in lowered_fields:
            raise LoggingConfigurationError(
                "mask value must not equal a masked field name", option="maskValue"
            )
        for pattern, _replacement in self.mask_patterns:
            try:
                compiled = re.compile(pattern)
            except re.error as exc:
                raise LoggingConfigurationError(
                    f"invalid mask pattern {pattern!r}: {exc}", option="maskPatterns"
                ) from exc
            if compiled.search(self.mask_value):
                raise LoggingConfigurationError(
                    f"mask value is matched by mask pattern {pattern!r}", option="maskValue"
                )

    @property
    def request_logging_enabled(self) -> bool:
        """Global flag and request flag both on."""
        return self.enabled and self.request.enabled

    @property
    def application_logging_enabled(self) -> bool:
        """Global flag and application flag both on."""
        return self.enabled and self.application.enabled

    @classmethod
    def from_environment(cls) -> LoggingConfiguration:
        """Create config from environment variables with defaults.

        Returns:
            LoggingConfiguration with values from environment or defaults.

        Raises:
            LoggingConfigurationError: If any value is invalid.
        """
        return cls(
            enabled=_get_bool_env("APPLOG_ENABLED", True),
            application_name=os.environ.get("APPLOG_APPLICATION_NAME", DEFAULT_APPLICATION_NAME),
            request=RequestLoggingConfig(
                enabled=_get_bool_env("APPLOG_REQUEST_ENABLED", True),
                log_headers=_get_bool_env("APPLOG_REQUEST_LOG_HEADERS", True),
                log_body=_get_bool_env("APPLOG_REQUEST_LOG_BODY", True),
                log_response_body=_get_bool_env("APPLOG_REQUEST_LOG_RESPONSE_BODY", True),
                max_body_size=_get_int_env("APPLOG_REQUEST_MAX_BODY_SIZE", DEFAULT_MAX_BODY_SIZE),
                exclude_patterns=_get_list_env(
                    "APPLOG_REQUEST_EXCLUDE_PATTERNS", DEFAULT_EXCLUDE_PATTERNS
                ),
                include_patterns=_get_list_env("APPLOG_REQUEST_INCLUDE_PATTERNS", ()),
            ),
            application=ApplicationLoggingConfig(
                enabled=_get_bool_env("APPLOG_APPLICATION_ENABLED", True),
                include_stack_trace=_get_bool_env("APPLOG_APPLICATION_INCLUDE_STACK_TRACE", True),
                max_stack_trace_depth=_get_int_env(
                    "APPLOG_APPLICATION_MAX_STACK_TRACE_DEPTH", DEFAULT_MAX_STACK_TRACE_DEPTH
                ),
            ),
            masked_headers=_get_list_env("APPLOG_MASKED_HEADERS", DEFAULT_MASKED_HEADERS),
            masked_fields=_get_list_env("APPLOG_MASKED_FIELDS", DEFAULT_MASKED_FIELDS),
            mask_value=os.environ.get("APPLOG_MASK_VALUE", DEFAULT_MASK_VALUE),
        )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> LoggingConfiguration:
        """Create config from external configuration input.

        Accepts the camelCase option names (``request.maxBodySize`` etc.),
        either nested under ``request`` / ``application`` or as flat dotted
        keys.

        Raises:
            LoggingConfigurationError: If the input does not validate.
        """
        from applog.config.settings import LoggingSettings

        return LoggingSettings.parse(data).to_configuration()


# Default configuration with the built-in defaults
DEFAULT_LOGGING_CONFIGURATION = LoggingConfiguration()

# Testing config: small budgets, nothing excluded
TEST_LOGGING_CONFIGURATION = LoggingConfiguration(
    application_name="test-app",
    request=RequestLoggingConfig(max_body_size=64, exclude_patterns=()),
    application=ApplicationLoggingConfig(max_stack_trace_depth=10),
)


_default_lock = threading.Lock()
_default_configuration: LoggingConfiguration | None = None


def configure_default_configuration(configuration: LoggingConfiguration) -> LoggingConfiguration:
    """Install the process-wide default configuration.

    Call once at startup. Installing the same configuration again is a
    no-op; installing a different one raises, since loggers already built
    hold a reference to the first.

    Args:
        configuration: The configuration to install.

    Returns:
        The installed configuration.

    Raises:
        LoggingConfigurationError: If a different default is already installed.
    """
    global _default_configuration
    with _default_lock:
        if _default_configuration is None:
            _default_configuration = configuration
        elif _default_configuration != configuration:
            raise LoggingConfigurationError(
                "default configuration is already initialized", option="default"
            )
        return _default_configuration


def get_default_configuration() -> LoggingConfiguration:
    """Get the process-wide default, or the built-in defaults if none installed."""
    configuration = _default_configuration
    if configuration is None:
        return DEFAULT_LOGGING_CONFIGURATION
    return configuration


def reset_default_configuration() -> None:
    """Forget the installed default. For tests only."""
    global _default_configuration
    with _default_lock:
        _default_configuration = None
