"""Execution-unit-local context for log records.

- Correlation id: one per logical request, stamped on every record
- Log context: per-request fields merged into the ``extra`` block
- Record stamp: emission timestamp and execution-unit name

Usage:
    from applog.application.observability import (
        correlation_scope,
        get_correlation_id,
        log_context,
    )

    with correlation_scope(request_header_value):
        with log_context(order_id=7):
            logger.info("Order loaded")
"""

from applog.application.observability.correlation import (
    CORRELATION_HEADER,
    bind_correlation,
    clear_correlation_id,
    correlation_id_processor,
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
    has_correlation_id,
    peek_correlation_id,
    set_correlation_id,
)
from applog.application.observability.log_context import (
    bind_log_context,
    clear_log_context,
    get_log_context,
    log_context,
    unbind_log_context,
)
from applog.application.observability.record_stamp import current_timestamp, execution_unit_name

__all__: list[str] = [
    "CORRELATION_HEADER",
    "bind_correlation",
    "bind_log_context",
    "clear_correlation_id",
    "clear_log_context",
    "correlation_id_processor",
    "correlation_scope",
    "current_timestamp",
    "execution_unit_name",
    "generate_correlation_id",
    "get_correlation_id",
    "get_log_context",
    "has_correlation_id",
    "log_context",
    "peek_correlation_id",
    "set_correlation_id",
    "unbind_log_context",
]
