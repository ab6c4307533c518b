"""
Utility functions: clock, structured logging, validation, responses.
"""

from .clock import epoch_ms
from .structured_logger import (
    StructuredLogger,
    LoggingContext,
    get_structured_logger,
    configure_lambda_logging,
    mask_email,
)
from .validators import (
    ValidationError,
    validate_email,
    validate_subscode,
)
from .response_builder import redirect_response, json_response

__all__ = [
    'epoch_ms',
    'StructuredLogger',
    'LoggingContext',
    'get_structured_logger',
    'configure_lambda_logging',
    'mask_email',
    'ValidationError',
    'validate_email',
    'validate_subscode',
    'redirect_response',
    'json_response',
]
