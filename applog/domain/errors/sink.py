"""Sink errors.

The core never retries a sink write. Fallible sinks raise LogSinkError and
the error propagates to whoever made the logging call.
"""

from applog.domain.exceptions import AppLogError


class LogSinkError(AppLogError):
    """Raised by a sink when a rendered line could not be written."""

    pass
