"""Composition root for wiring logging at startup.

This package centralizes infrastructure-aware wiring so services can
obtain loggers through ``get_logger(name)`` without constructing sinks or
configurations themselves.
"""

from applog.bootstrap.logging import bootstrap_logging

__all__ = ["bootstrap_logging"]
