"""Unit tests for the applog exception hierarchy."""

import pytest

from applog.domain.errors import LogEncodingError, LoggingConfigurationError, LogSinkError
from applog.domain.exceptions import AppLogError


class TestErrorHierarchy:
    """Tests for exception types."""

    @pytest.mark.parametrize("error_type", [LoggingConfigurationError, LogEncodingError, LogSinkError])
    def test_all_inherit_from_base(self, error_type: type[Exception]) -> None:
        assert issubclass(error_type, AppLogError)

    def test_configuration_error_is_value_error(self) -> None:
        assert issubclass(LoggingConfigurationError, ValueError)

    def test_configuration_error_prefixes_option(self) -> None:
        error = LoggingConfigurationError("must be positive", option="request.maxBodySize")

        assert str(error) == "request.maxBodySize: must be positive"
        assert error.option == "request.maxBodySize"

    def test_configuration_error_default_message(self) -> None:
        assert str(LoggingConfigurationError()) == "Invalid logging configuration"

    def test_encoding_error_cause_type(self) -> None:
        error = LogEncodingError(cause_type="TypeError")

        assert str(error) == "Failed to encode log entry"
        assert error.cause_type == "TypeError"
