"""API middleware components."""

from applog.api.middleware.logging_middleware import RequestLoggingMiddleware

__all__: list[str] = [
    "RequestLoggingMiddleware",
]
