"""Application ports (abstract interfaces)."""

from applog.application.ports.log_sink import LogSinkProtocol

__all__: list[str] = ["LogSinkProtocol"]
