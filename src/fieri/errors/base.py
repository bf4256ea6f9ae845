"""
Base error classes for fieri.

Every failure surfaces as a ``FieriError`` tagged with one of four kinds:
- ValidationError: request failed local checks, nothing was sent
- TransportError: connection, TLS or timeout failure
- ApiError: the service rejected the request
- DecodeError: a response body or stream frame did not match its schema
"""

from __future__ import annotations

import contextlib
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from collections.abc import Mapping

    from fieri.errors.classification import ErrorClass

# Keep error payloads printable
_MAX_BODY_CHARS = 500


class ErrorKind(str, Enum):
    """Tag identifying the failure category of a ``FieriError``."""

    VALIDATION = "validation"
    TRANSPORT = "transport"
    API = "api"
    DECODE = "decode"


class TransportFailure(str, Enum):
    """What went wrong below the HTTP layer."""

    CONNECT = "connect"
    TIMEOUT = "timeout"
    TLS = "tls"
    NETWORK = "network"


@dataclass
class ErrorContext:
    """Structured error context for diagnostics.

    Provides actionable information for debugging and error handling.
    """

    field_path: str | None = None
    """Path to the problematic field (e.g., 'messages.0.role')"""

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'validation', 'transport', 'decode')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(f"[{self.source}]")
        if self.field_path:
            parts.append(f"at '{self.field_path}'")
        if self.hint:
            parts.append(f"(hint: {self.hint})")
        return " ".join(parts)


class FieriError(Exception):
    """Base class for all fieri errors.

    Catch this to handle every library failure in one place and branch on
    ``kind`` when the category matters.

    Attributes:
        kind: Failure category tag
        message: Human-readable error message
        context: Structured error context
    """

    kind: ClassVar[ErrorKind]

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def __str__(self) -> str:
        return self._format_message()

    def with_hint(self, hint: str) -> FieriError:
        """Add a hint to this error."""
        self.context.hint = hint
        self.args = (self._format_message(),)
        return self


class ValidationError(FieriError):
    """A request failed local constraint checks before any network call.

    Always recoverable by the caller: fix the field and build again.

    Attributes:
        field: Name (or dotted path) of the offending field
        reason: Short reason, e.g. "out of range" or "missing required field"
    """

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        field: str,
        reason: str,
        *,
        value: Any = None,
    ) -> None:
        ctx = ErrorContext(source="validation", field_path=field)
        if value is not None:
            ctx.details["value"] = value
        super().__init__(f"invalid '{field}': {reason}", ctx)
        self.field = field
        self.reason = reason
        self.value = value


class TransportError(FieriError):
    """The call made no confirmed progress against the remote service.

    Raised for connection failures, timeouts, TLS errors, and connections
    dropped while a response was being read.
    """

    kind = ErrorKind.TRANSPORT

    def __init__(
        self,
        message: str,
        *,
        failure: TransportFailure = TransportFailure.NETWORK,
        url: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = ErrorContext(source="transport")
        ctx.details["failure"] = failure.value
        if url:
            ctx.details["url"] = url
        super().__init__(message, ctx)
        self.failure = failure
        self.url = url
        self.__cause__ = cause

    @property
    def is_timeout(self) -> bool:
        return self.failure is TransportFailure.TIMEOUT


class ApiError(FieriError):
    """The remote service accepted the connection but rejected the request.

    Attributes:
        status_code: HTTP status code
        code: Service error code (e.g. "invalid_api_key"), when provided
        error_type: Service error type (e.g. "invalid_request_error")
        param: Request parameter the service complained about
        error_class: Standardized classification of the failure
        retryable: Whether re-sending later may succeed
        retry_after: Suggested retry delay in seconds (from header)
        request_id: Service-side request identifier
        body: Raw response body text
    """

    kind = ErrorKind.API

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        error_class: ErrorClass,
        code: str | None = None,
        error_type: str | None = None,
        param: str | None = None,
        retryable: bool = False,
        retry_after: float | None = None,
        request_id: str | None = None,
        body: str | None = None,
    ) -> None:
        ctx = ErrorContext(source="api")
        ctx.details["status_code"] = status_code
        ctx.details["error_class"] = error_class.value
        if code:
            ctx.details["code"] = code
        if request_id:
            ctx.details["request_id"] = request_id

        super().__init__(message, ctx)

        self.status_code = status_code
        self.error_class = error_class
        self.code = code
        self.error_type = error_type
        self.param = param
        self.retryable = retryable
        self.retry_after = retry_after
        self.request_id = request_id
        self.body = body

    @property
    def is_structured(self) -> bool:
        """Whether the body carried a parseable error object."""
        return self.error_type is not None or self.code is not None

    @classmethod
    def from_response(
        cls,
        status_code: int,
        body: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> ApiError:
        """Create an ApiError from a failed HTTP exchange.

        Args:
            status_code: HTTP status code
            body: Raw response body text
            headers: Response headers

        Returns:
            ApiError with parsed code/message when the body is structured,
            or a generic error carrying the raw status and body otherwise
        """
        parsed: Any = None
        if body:
            with contextlib.suppress(ValueError):
                parsed = json.loads(body)
        return cls.from_payload(status_code, parsed, body=body, headers=headers)

    @classmethod
    def from_payload(
        cls,
        status_code: int,
        payload: Any,
        *,
        body: str | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> ApiError:
        """Create an ApiError from an already parsed error payload."""
        from fieri.errors.classification import (
            classify_http_error,
            extract_error_fields,
            is_retryable,
        )

        data = payload if isinstance(payload, dict) else None
        fields = extract_error_fields(data)
        error_class = classify_http_error(status_code, data)

        message = fields.get("message")
        if not message:
            snippet = (body or "").strip()[:_MAX_BODY_CHARS]
            message = f"HTTP {status_code}: {snippet}" if snippet else f"HTTP {status_code}"

        retry_after = None
        request_id = None
        if headers:
            retry_after_str = headers.get("retry-after")
            if retry_after_str:
                with contextlib.suppress(ValueError):
                    retry_after = float(retry_after_str)
            request_id = headers.get("x-request-id")

        return cls(
            message,
            status_code=status_code,
            error_class=error_class,
            code=fields.get("code"),
            error_type=fields.get("type"),
            param=fields.get("param"),
            retryable=is_retryable(error_class),
            retry_after=retry_after,
            request_id=request_id,
            body=body,
        )


class DecodeError(FieriError):
    """A response body or stream frame did not match the expected schema.

    Indicates a protocol mismatch; re-sending the same request unchanged
    will not help.
    """

    kind = ErrorKind.DECODE

    def __init__(
        self,
        message: str,
        *,
        field_path: str | None = None,
        payload: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = ErrorContext(source="decode", field_path=field_path)
        if payload is not None:
            payload = payload[:_MAX_BODY_CHARS]
            ctx.details["payload"] = payload
        super().__init__(message, ctx)
        self.field_path = field_path
        self.payload = payload
        self.__cause__ = cause
