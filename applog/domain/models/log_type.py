"""Record type discriminator."""

from enum import StrEnum


class LogType(StrEnum):
    """Type of a log record.

    REQUEST: HTTP request/response records, inbound and outbound.
    APPLICATION: everything emitted through debug/info/warn/error.
    """

    REQUEST = "request"
    APPLICATION = "application"
