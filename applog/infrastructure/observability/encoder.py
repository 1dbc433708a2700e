"""JSON encoding of log entries.

One LogEntry becomes one single-line JSON document, UTF-8, keys in the
fixed wire order of FIELD_ORDER, absent optional fields omitted, numbers
rendered as numbers.

The encoder never raises. When an entry cannot be serialized (only
caller-supplied ``extra`` or body content can cause this), it renders a
fallback record instead: the same entry with bodies reset to ``{}`` and
``extra`` replaced by the failure description. The caller receives the
failure alongside the line so it can report it through the sink.

Usage:
    encoder = JsonLogEncoder()
    line, failure = encoder.encode_line(entry)
    sink.write(entry.level, line)
    if failure is not None:
        sink.write(LogLevel.ERROR, encoder.encode_diagnostic(entry, failure), failure)
"""

from __future__ import annotations

import json
from dataclasses import replace
from typing import Any

from applog.domain.errors.encoding import LogEncodingError
from applog.domain.models.log_entry import ErrorInfo, LogEntry
from applog.domain.models.log_level import LogLevel
from applog.domain.models.log_type import LogType

ENCODING_FAILURE_MESSAGE = "Failed to encode log entry"


def _dumps(record: dict[str, Any]) -> str:
    return json.dumps(record, ensure_ascii=False, separators=(",", ":"), allow_nan=False)


class JsonLogEncoder:
    """Deterministic LogEntry to JSON line encoder."""

    def encode(self, entry: LogEntry) -> bytes:
        """Encode one entry as newline-terminated UTF-8 JSON.

        Args:
            entry: The entry to encode.

        Returns:
            The encoded line, or the fallback line if encoding failed.
        """
        line, _failure = self.encode_line(entry)
        return (line + "\n").encode("utf-8")

    def encode_line(self, entry: LogEntry) -> tuple[str, LogEncodingError | None]:
        """Render one entry without trailing newline.

        Returns:
            ``(line, None)`` on success, ``(fallback_line, failure)`` when
            the entry could not be serialized.
        """
        try:
            return _dumps(entry.to_record()), None
        except (TypeError, ValueError, RecursionError) as exc:
            failure = LogEncodingError(f"{ENCODING_FAILURE_MESSAGE}: {exc}", cause_type=type(exc).__name__)
            return self._render_fallback(entry, failure), failure

    def encode_diagnostic(self, entry: LogEntry, failure: LogEncodingError) -> str:
        """Render the ERROR record that reports an encoding failure.

        Args:
            entry: The entry that failed to encode.
            failure: The failure returned by encode_line.
        """
        diagnostic = LogEntry(
            timestamp=entry.timestamp,
            application=entry.application,
            message=ENCODING_FAILURE_MESSAGE,
            logger_name=entry.logger_name,
            thread_name=entry.thread_name,
            level=LogLevel.ERROR,
            log_type=LogType.APPLICATION,
            correlation_id=entry.correlation_id,
            error=ErrorInfo(
                exception_class=f"{type(failure).__module__}.{type(failure).__qualname__}",
                message=str(failure),
            ),
            extra={"failed_message": entry.message, "cause_type": failure.cause_type},
        )
        return _dumps(diagnostic.to_record())

    def _render_fallback(self, entry: LogEntry, failure: LogEncodingError) -> str:
        fallback = replace(
            entry,
            request_body={},
            response_body={},
            extra={"encoding_error": str(failure)},
        )
        try:
            return _dumps(fallback.to_record())
        except (TypeError, ValueError, RecursionError):
            # Only reachable if the error block itself is unserializable
            return _dumps(replace(fallback, error=None).to_record())
