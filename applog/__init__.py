"""
applog - Structured JSON logging core for service applications

Turns application events and HTTP request/response lifecycles into
single-line JSON log records that share one correlation identifier
per logical request, including calls made to downstream services.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
