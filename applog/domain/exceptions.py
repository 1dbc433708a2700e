"""Base exception classes for the applog domain layer."""


class AppLogError(Exception):
    """Base exception for all logging-core errors.

    All applog-specific exceptions MUST inherit from this class.
    """

    def __init__(self, message: str = "") -> None:
        """Initialize the exception with an optional message.

        Args:
            message: Human-readable error description.
        """
        super().__init__(message)
