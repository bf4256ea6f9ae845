"""
Error classification for API failures.

Maps HTTP status codes and error bodies onto a small set of standard
error classes. The classes are informational: fieri never retries on its
own, callers decide what to do with ``ApiError.retryable``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorClass(str, Enum):
    """Standard error classification."""

    INVALID_REQUEST = "invalid_request"
    """Malformed request body, invalid parameters, or unsupported operation."""

    AUTHENTICATION = "authentication"
    """Missing/invalid credentials (API key)."""

    PERMISSION_DENIED = "permission_denied"
    """Caller is authenticated but not permitted to access the resource."""

    NOT_FOUND = "not_found"
    """Requested resource (model, file, fine-tune) not found."""

    QUOTA_EXHAUSTED = "quota_exhausted"
    """Account quota/billing limit exceeded."""

    RATE_LIMITED = "rate_limited"
    """Throttled due to request/token limits."""

    REQUEST_TOO_LARGE = "request_too_large"
    """Payload too large (e.g., context too long, upload too big)."""

    TIMEOUT = "timeout"
    """The service timed out while processing the request."""

    CONFLICT = "conflict"
    """Request conflicts with the current state of the resource."""

    SERVER_ERROR = "server_error"
    """Transient server-side failure (5xx)."""

    OVERLOADED = "overloaded"
    """Service overloaded / temporarily unavailable."""

    OTHER = "other"
    """Unknown classification."""


_RETRYABLE_CLASSES: frozenset[ErrorClass] = frozenset(
    {
        ErrorClass.RATE_LIMITED,
        ErrorClass.TIMEOUT,
        ErrorClass.CONFLICT,
        ErrorClass.SERVER_ERROR,
        ErrorClass.OVERLOADED,
    }
)

_DEFAULT_STATUS_MAPPING: dict[int, ErrorClass] = {
    400: ErrorClass.INVALID_REQUEST,
    401: ErrorClass.AUTHENTICATION,
    403: ErrorClass.PERMISSION_DENIED,
    404: ErrorClass.NOT_FOUND,
    408: ErrorClass.TIMEOUT,
    409: ErrorClass.CONFLICT,
    413: ErrorClass.REQUEST_TOO_LARGE,
    422: ErrorClass.INVALID_REQUEST,
    429: ErrorClass.RATE_LIMITED,
    500: ErrorClass.SERVER_ERROR,
    502: ErrorClass.SERVER_ERROR,
    503: ErrorClass.OVERLOADED,
    504: ErrorClass.TIMEOUT,
}

_QUOTA_PATTERNS = ("quota", "billing", "insufficient_quota", "hard limit")


def classify_http_error(
    status_code: int,
    body: dict[str, Any] | None = None,
) -> ErrorClass:
    """Classify an HTTP error into a standard error class.

    Args:
        status_code: HTTP status code
        body: Response body (parsed JSON), if any

    Returns:
        ErrorClass representing the error type
    """
    fields = extract_error_fields(body)

    # Body hints are more specific than the status alone
    if status_code == 400:
        code = (fields.get("code") or "").lower()
        if "context_length" in code:
            return ErrorClass.REQUEST_TOO_LARGE

    if status_code == 429:
        haystack = " ".join(
            (fields.get(key) or "").lower() for key in ("message", "type", "code")
        )
        if any(pattern in haystack for pattern in _QUOTA_PATTERNS):
            return ErrorClass.QUOTA_EXHAUSTED

    if status_code in _DEFAULT_STATUS_MAPPING:
        return _DEFAULT_STATUS_MAPPING[status_code]

    if 400 <= status_code < 500:
        return ErrorClass.INVALID_REQUEST
    if 500 <= status_code < 600:
        return ErrorClass.SERVER_ERROR

    return ErrorClass.OTHER


def is_retryable(error_class: ErrorClass) -> bool:
    """Check if an error class is typically retryable.

    Args:
        error_class: The error class to check

    Returns:
        True if re-sending the request later may succeed
    """
    return error_class in _RETRYABLE_CLASSES


def extract_error_fields(body: dict[str, Any] | None) -> dict[str, str]:
    """Extract message/type/param/code from an error envelope.

    Supports:
    - Service style: {"error": {"message": ..., "type": ..., "param": ..., "code": ...}}
    - Bare string: {"error": "..."}
    - Simple: {"message": "..."} or {"detail": "..."}

    Args:
        body: Response body (parsed JSON)

    Returns:
        Mapping holding whichever of the four keys were found, as strings
    """
    if not body:
        return {}

    fields: dict[str, str] = {}
    error = body.get("error")
    if isinstance(error, dict):
        for key in ("message", "type", "param", "code"):
            value = error.get(key)
            if value is not None and value != "":
                fields[key] = str(value)
    elif isinstance(error, str):
        fields["message"] = error

    if "message" not in fields:
        for key in ("message", "detail"):
            value = body.get(key)
            if isinstance(value, str):
                fields["message"] = value
                break

    return fields
