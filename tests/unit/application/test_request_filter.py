"""Unit tests for path filtering of request records."""

import pytest

from applog.application.services.request_filter import RequestLoggingPolicy, path_matches
from applog.config.logging_config import LoggingConfiguration, RequestLoggingConfig


def make_policy(
    exclude: tuple[str, ...] = (),
    include: tuple[str, ...] = (),
    enabled: bool = True,
    request_enabled: bool = True,
) -> RequestLoggingPolicy:
    return RequestLoggingPolicy(
        LoggingConfiguration(
            enabled=enabled,
            request=RequestLoggingConfig(
                enabled=request_enabled,
                exclude_patterns=exclude,
                include_patterns=include,
            ),
        )
    )


class TestPathMatches:
    """Tests for Ant-style glob matching."""

    @pytest.mark.parametrize(
        ("pattern", "path", "expected"),
        [
            ("/health/**", "/health", True),
            ("/health/**", "/health/live", True),
            ("/health/**", "/health/live/deep", True),
            ("/health/**", "/healthz", False),
            ("/api/*", "/api/orders", True),
            ("/api/*", "/api/orders/7", False),
            ("/api/*/items", "/api/7/items", True),
            ("/api/order?", "/api/orders", True),
            ("/api/order?", "/api/order/", False),
            ("/favicon.ico", "/favicon.ico", True),
            ("/favicon.ico", "/faviconXico", False),
            ("/**/admin", "/a/b/admin", True),
            ("**", "/anything/at/all", True),
        ],
    )
    def test_glob_semantics(self, pattern: str, path: str, expected: bool) -> None:
        assert path_matches(pattern, path) is expected


class TestRequestLoggingPolicy:
    """Tests for exclude-then-include evaluation."""

    def test_defaults_exclude_health_and_actuator(self) -> None:
        policy = RequestLoggingPolicy(LoggingConfiguration())

        assert not policy.should_log("/health/live")
        assert not policy.should_log("/actuator/info")
        assert not policy.should_log("/favicon.ico")
        assert policy.should_log("/api/orders")

    def test_exclude_wins_over_include(self) -> None:
        policy = make_policy(exclude=("/api/internal/**",), include=("/api/**",))

        assert not policy.should_log("/api/internal/x")
        assert policy.should_log("/api/orders")

    def test_include_is_allow_list(self) -> None:
        policy = make_policy(include=("/api/**",))

        assert policy.should_log("/api/orders")
        assert not policy.should_log("/static/app.js")

    def test_empty_lists_log_everything(self) -> None:
        assert make_policy().should_log("/whatever")

    @pytest.mark.parametrize(("enabled", "request_enabled"), [(False, True), (True, False)])
    def test_switches_disable_everything(self, enabled: bool, request_enabled: bool) -> None:
        policy = make_policy(enabled=enabled, request_enabled=request_enabled)

        assert not policy.should_log("/api/orders")
