"""Configuration errors.

Raised while building a LoggingConfiguration, which happens once at
process start. A malformed pattern or an out-of-range size must stop the
process before any request is handled.
"""

from applog.domain.exceptions import AppLogError


class LoggingConfigurationError(AppLogError, ValueError):
    """Raised when logging configuration input is invalid."""

    def __init__(self, message: str = "Invalid logging configuration", option: str = "") -> None:
        """Initialize with the offending option name.

        Args:
            message: Error description.
            option: Configuration option that failed validation, if known.
        """
        if option:
            message = f"{option}: {message}"
        super().__init__(message)
        self.option = option
