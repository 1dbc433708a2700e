"""Domain errors for applog.

All exceptions inherit from AppLogError.
"""

from applog.domain.errors.configuration import LoggingConfigurationError
from applog.domain.errors.encoding import LogEncodingError
from applog.domain.errors.sink import LogSinkError

__all__: list[str] = [
    "LogEncodingError",
    "LogSinkError",
    "LoggingConfigurationError",
]
