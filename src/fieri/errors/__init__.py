"""
Error hierarchy for fieri.

Four tagged failure kinds (validation, transport, api, decode) sharing one
base class.
"""

from fieri.errors.base import (
    ApiError,
    DecodeError,
    ErrorContext,
    ErrorKind,
    FieriError,
    TransportError,
    TransportFailure,
    ValidationError,
)
from fieri.errors.classification import (
    ErrorClass,
    classify_http_error,
    extract_error_fields,
    is_retryable,
)

__all__ = [
    "ApiError",
    "DecodeError",
    "ErrorClass",
    "ErrorContext",
    "ErrorKind",
    "FieriError",
    "TransportError",
    "TransportFailure",
    "ValidationError",
    "classify_http_error",
    "extract_error_fields",
    "is_retryable",
]
