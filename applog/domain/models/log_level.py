"""Log levels and their numeric weights.

Weights follow the Logback convention that downstream log processors
already index on (TRACE=5000 ... ERROR=40000).
"""

from __future__ import annotations

from enum import StrEnum


class LogLevel(StrEnum):
    """Severity of a log record.

    Members are strings so they render directly into the ``level`` field.
    """

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"

    @property
    def weight(self) -> int:
        """Numeric level value, monotonically increasing with severity."""
        return _LEVEL_WEIGHTS[self]

    @classmethod
    def from_string(cls, value: str) -> LogLevel:
        """Parse a level name, case-insensitively.

        ``WARNING`` and ``CRITICAL`` are accepted as aliases so names coming
        from the standard library map cleanly.

        Args:
            value: Level name.

        Returns:
            The matching LogLevel.

        Raises:
            ValueError: If the name is not a known level.
        """
        normalized = value.strip().upper()
        normalized = _ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Unknown log level: {value!r}") from None


_LEVEL_WEIGHTS: dict[LogLevel, int] = {
    LogLevel.TRACE: 5000,
    LogLevel.DEBUG: 10000,
    LogLevel.INFO: 20000,
    LogLevel.WARN: 30000,
    LogLevel.ERROR: 40000,
}

_ALIASES: dict[str, str] = {
    "WARNING": "WARN",
    "CRITICAL": "ERROR",
    "FATAL": "ERROR",
}


def level_for_status(status_code: int) -> LogLevel:
    """Map an HTTP status code to the level of its response record.

    Args:
        status_code: HTTP status code of a completed exchange.

    Returns:
        INFO below 400, WARN for 400-499, ERROR for 500 and above.
        A status of 0 (no response received) maps to ERROR.
    """
    if status_code >= 500 or status_code == 0:
        return LogLevel.ERROR
    if status_code >= 400:
        return LogLevel.WARN
    return LogLevel.INFO
