"""Structlog-backed log sink.

Writes already-rendered JSON lines through a structlog PrintLogger. The
line is passed through untouched: the only processor returns the event
string as-is, so the wire format stays exactly what JsonLogEncoder
produced.

The minimum level comes from the ``LOG_LEVEL`` environment variable
(default INFO), the same variable configure_structlog reads.
"""

from __future__ import annotations

import os
from typing import Any, TextIO

import structlog

from applog.domain.models.log_level import LogLevel
from applog.infrastructure.observability.logging import DEFAULT_LOG_LEVEL, LOG_LEVEL_ENV

# structlog PrintLogger has no trace method; TRACE lines go out as debug
_LOGGER_METHODS: dict[LogLevel, str] = {
    LogLevel.TRACE: "debug",
    LogLevel.DEBUG: "debug",
    LogLevel.INFO: "info",
    LogLevel.WARN: "warning",
    LogLevel.ERROR: "error",
}


def _get_min_level() -> LogLevel:
    try:
        return LogLevel.from_string(os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL))
    except ValueError:
        return LogLevel.INFO


def render_preformatted(logger: Any, method_name: str, event_dict: dict[str, Any]) -> str:
    """Final structlog processor that emits the pre-rendered line as-is."""
    return str(event_dict["event"])


class StructlogLogSink:
    """Sink writing one line per record to a text stream (stdout by default).

    Attributes:
        min_level: Lowest level written.
    """

    def __init__(self, min_level: LogLevel | None = None, file: TextIO | None = None) -> None:
        """Initialize the sink.

        Args:
            min_level: Lowest level written; defaults to LOG_LEVEL.
            file: Destination stream; defaults to sys.stdout.
        """
        self.min_level = min_level if min_level is not None else _get_min_level()
        self._logger = structlog.wrap_logger(
            structlog.PrintLogger(file=file),
            processors=[render_preformatted],
            wrapper_class=structlog.BoundLogger,
            context_class=dict,
        )

    def is_enabled_for(self, level: LogLevel) -> bool:
        return level.weight >= self.min_level.weight

    def write(self, level: LogLevel, rendered_line: str, error: BaseException | None = None) -> None:
        if not self.is_enabled_for(level):
            return
        getattr(self._logger, _LOGGER_METHODS[level])(rendered_line)
