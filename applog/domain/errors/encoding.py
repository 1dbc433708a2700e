"""Encoding errors.

LogEncodingError never leaves the encoder: it is caught there and turned
into a fallback record. It exists so the failure can be reported with a
precise type.
"""

from applog.domain.exceptions import AppLogError


class LogEncodingError(AppLogError):
    """Raised when a log entry cannot be serialized to JSON."""

    def __init__(self, message: str = "Failed to encode log entry", cause_type: str = "") -> None:
        """Initialize with the type of the underlying serialization failure.

        Args:
            message: Error description.
            cause_type: Class name of the original exception.
        """
        super().__init__(message)
        self.cause_type = cause_type
