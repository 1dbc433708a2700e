"""Application services - the logging core.

Available services:
- MaskingEngine: field, header and pattern redaction
- BodyCapture: bounded capture of headers and bodies
- RequestLoggingPolicy: include/exclude path filtering
- AppLogger: level-gated application and request records
- AppLoggerFactory: one AppLogger per logical name
- ExchangeLoggingService: request records around HTTP exchanges
"""

from applog.application.services.app_logger import (
    AppLogger,
    build_error_info,
    resolve_root_cause,
)
from applog.application.services.body_capture_service import (
    TRUNCATION_MARKER,
    BodyCapture,
    decode_body,
    parse_query_params,
    truncate_body,
)
from applog.application.services.exchange_logging_service import (
    ExchangeLoggingService,
    InboundTracking,
    OutboundTracking,
)
from applog.application.services.logger_factory import (
    AppLoggerFactory,
    get_default_factory,
    get_logger,
    reset_default_factory,
    set_default_factory,
)
from applog.application.services.masking_service import (
    MaskingEngine,
    mask_credit_card,
    mask_email,
    mask_fields,
    mask_headers,
    mask_json_text,
    mask_pattern,
)
from applog.application.services.request_filter import (
    RequestLoggingPolicy,
    path_matches,
)

__all__: list[str] = [
    "TRUNCATION_MARKER",
    "AppLogger",
    "AppLoggerFactory",
    "BodyCapture",
    "ExchangeLoggingService",
    "InboundTracking",
    "MaskingEngine",
    "OutboundTracking",
    "RequestLoggingPolicy",
    "build_error_info",
    "decode_body",
    "get_default_factory",
    "get_logger",
    "mask_credit_card",
    "mask_email",
    "mask_fields",
    "mask_headers",
    "mask_json_text",
    "mask_pattern",
    "parse_query_params",
    "path_matches",
    "reset_default_factory",
    "resolve_root_cause",
    "set_default_factory",
    "truncate_body",
]
