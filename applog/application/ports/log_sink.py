"""Log sink port.

The sink is the only egress of the logging core. It receives lines that
are already rendered; it never sees LogEntry objects. File handles,
shipping and rotation are the sink's business, not the core's.

Developer Rules:
1. NO RETRIES IN THE CORE - retry policy, if any, belongs to the sink
2. FAIL LOUD - fallible sinks raise LogSinkError from write()
3. CHEAP LEVEL CHECK - is_enabled_for() is called before any record is built
"""

from __future__ import annotations

from typing import Protocol

from applog.domain.models.log_level import LogLevel


class LogSinkProtocol(Protocol):
    """Protocol for the destination of rendered log lines.

    Methods:
        write: Emit one rendered line
        is_enabled_for: Report whether a level would be emitted
    """

    def write(self, level: LogLevel, rendered_line: str, error: BaseException | None = None) -> None:
        """Write one rendered JSON line.

        Args:
            level: Level of the record the line encodes.
            rendered_line: Single-line JSON document, without trailing newline.
            error: Exception attached to the record, if any.

        Raises:
            LogSinkError: If the sink defines writes as fallible and the
                write failed.
        """
        ...

    def is_enabled_for(self, level: LogLevel) -> bool:
        """Check whether records at this level would be written.

        Args:
            level: Level to check.

        Returns:
            True if a write at this level would be emitted.
        """
        ...
