"""External configuration input models.

Pydantic models for the configuration surface as operators write it
(camelCase option names, nested ``request`` / ``application`` sections).
They validate raw input and produce the frozen LoggingConfiguration the
rest of the core uses.

Usage:
    config = LoggingSettings.parse(
        {
            "applicationName": "orders",
            "request.maxBodySize": 2048,
            "request": {"excludePatterns": ["/health/**"]},
        }
    ).to_configuration()
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from applog.config.logging_config import (
    DEFAULT_APPLICATION_NAME,
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_MASK_VALUE,
    DEFAULT_MASKED_FIELDS,
    DEFAULT_MASKED_HEADERS,
    DEFAULT_MAX_BODY_SIZE,
    DEFAULT_MAX_STACK_TRACE_DEPTH,
    ApplicationLoggingConfig,
    LoggingConfiguration,
    RequestLoggingConfig,
)
from applog.domain.errors.configuration import LoggingConfigurationError


def _split_csv(value: Any) -> Any:
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


class RequestLoggingSettings(BaseModel):
    """``request.*`` options."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    enabled: bool = True
    log_headers: bool = Field(default=True, alias="logHeaders")
    log_body: bool = Field(default=True, alias="logBody")
    log_response_body: bool = Field(default=True, alias="logResponseBody")
    max_body_size: int = Field(default=DEFAULT_MAX_BODY_SIZE, alias="maxBodySize", ge=1)
    exclude_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS), alias="excludePatterns"
    )
    include_patterns: list[str] = Field(default_factory=list, alias="includePatterns")

    @field_validator("exclude_patterns", "include_patterns", mode="before")
    @classmethod
    def split_patterns(cls, v: Any) -> Any:
        """Accept a comma-separated string as well as a list."""
        return _split_csv(v)


class ApplicationLoggingSettings(BaseModel):
    """``application.*`` options."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    enabled: bool = True
    include_stack_trace: bool = Field(default=True, alias="includeStackTrace")
    max_stack_trace_depth: int = Field(
        default=DEFAULT_MAX_STACK_TRACE_DEPTH, alias="maxStackTraceDepth", ge=0
    )


class LoggingSettings(BaseModel):
    """Top-level configuration input."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    enabled: bool = True
    application_name: str = Field(default=DEFAULT_APPLICATION_NAME, alias="applicationName")
    request: RequestLoggingSettings = Field(default_factory=RequestLoggingSettings)
    application: ApplicationLoggingSettings = Field(default_factory=ApplicationLoggingSettings)
    masked_headers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_MASKED_HEADERS), alias="maskedHeaders"
    )
    masked_fields: list[str] = Field(
        default_factory=lambda: list(DEFAULT_MASKED_FIELDS), alias="maskedFields"
    )
    mask_value: str = Field(default=DEFAULT_MASK_VALUE, alias="maskValue", min_length=1)

    @field_validator("masked_headers", "masked_fields", mode="before")
    @classmethod
    def split_names(cls, v: Any) -> Any:
        """Accept a comma-separated string as well as a list."""
        return _split_csv(v)

    @classmethod
    def parse(cls, data: Mapping[str, Any]) -> LoggingSettings:
        """Validate raw configuration input.

        Flat dotted keys (``"request.logBody"``) are folded into their
        section before validation.

        Raises:
            LoggingConfigurationError: If validation fails.
        """
        try:
            return cls.model_validate(_unflatten(data))
        except ValidationError as exc:
            first = exc.errors()[0]
            option = ".".join(str(part) for part in first.get("loc", ()))
            raise LoggingConfigurationError(first.get("msg", str(exc)), option=option) from exc

    def to_configuration(self) -> LoggingConfiguration:
        """Build the frozen LoggingConfiguration.

        Raises:
            LoggingConfigurationError: If cross-field validation fails.
        """
        return LoggingConfiguration(
            enabled=self.enabled,
            application_name=self.application_name,
            request=RequestLoggingConfig(
                enabled=self.request.enabled,
                log_headers=self.request.log_headers,
                log_body=self.request.log_body,
                log_response_body=self.request.log_response_body,
                max_body_size=self.request.max_body_size,
                exclude_patterns=tuple(self.request.exclude_patterns),
                include_patterns=tuple(self.request.include_patterns),
            ),
            application=ApplicationLoggingConfig(
                enabled=self.application.enabled,
                include_stack_trace=self.application.include_stack_trace,
                max_stack_trace_depth=self.application.max_stack_trace_depth,
            ),
            masked_headers=tuple(self.masked_headers),
            masked_fields=tuple(self.masked_fields),
            mask_value=self.mask_value,
        )


def _unflatten(data: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in data.items():
        if "." not in key:
            if isinstance(value, Mapping) and isinstance(result.get(key), dict):
                result[key].update(value)
            else:
                result[key] = dict(value) if isinstance(value, Mapping) else value
            continue
        section, option = key.split(".", 1)
        target = result.setdefault(section, {})
        if not isinstance(target, dict):
            raise LoggingConfigurationError("expected a section mapping", option=section)
        target[option] = value
    return result
