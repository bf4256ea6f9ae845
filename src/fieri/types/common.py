"""
Shared building blocks for request and response models.

Requests are frozen, closed pydantic models: constructing one validates
every field and raises ``fieri.errors.ValidationError`` on the first
violation, so an invalid request can never reach the transport.
Responses are frozen, open models validated from service JSON.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import ErrorDetails, PydanticCustomError

from fieri.errors import ValidationError

T = TypeVar("T")
P = TypeVar("P", bound="RequestPart")

_RANGE_ERRORS = frozenset(
    {"greater_than", "greater_than_equal", "less_than", "less_than_equal"}
)
_EMPTY_ERRORS = frozenset({"too_short", "string_too_short", "bytes_too_short"})
_LENGTH_ERRORS = frozenset({"too_long", "string_too_long", "bytes_too_long"})
_UNION_TAGS = frozenset({"str", "int", "float", "bool", "dict"})

# Error type used by cross-field checks, see ``constraint_error``
_CONSTRAINT = "constraint"


def constraint_error(field: str, reason: str) -> PydanticCustomError:
    """Build an error for a check that spans several fields.

    Raise the result from a model validator; it is reported as a
    ``ValidationError`` against ``field``.
    """
    return PydanticCustomError(
        _CONSTRAINT, "{field}: {reason}", {"field": field, "reason": reason}
    )


def _reason_for(error: ErrorDetails) -> str:
    error_type = error["type"]
    ctx = error.get("ctx") or {}
    if error_type == "missing":
        return "missing required field"
    if error_type in _RANGE_ERRORS:
        return "out of range"
    if error_type == "literal_error":
        return f"must be one of: {ctx.get('expected')}"
    if error_type in _EMPTY_ERRORS:
        return "must not be empty"
    if error_type in _LENGTH_ERRORS:
        return "too long"
    if error_type == "extra_forbidden":
        return "unsupported field"
    return error["msg"].removeprefix("Value error, ")


def translate_validation_error(exc: PydanticValidationError) -> ValidationError:
    """Convert the first pydantic error into a fieri ``ValidationError``."""
    error = exc.errors()[0]
    ctx = error.get("ctx") or {}
    # Union members add their type to the location, e.g. ('prompt', 'list[str]')
    loc = [
        str(part)
        for part in error["loc"]
        if str(part) not in _UNION_TAGS and "[" not in str(part)
    ]
    if error["type"] == _CONSTRAINT:
        return ValidationError(".".join([*loc, ctx["field"]]), ctx["reason"])

    field = ".".join(loc) or "request"
    value = error.get("input") if error["type"] != "missing" else None
    if isinstance(value, (dict, list, bytes)):
        value = None
    return ValidationError(field, _reason_for(error), value=value)


class RequestPart(BaseModel):
    """Frozen, closed model nested inside a request.

    Its errors surface through the enclosing request with their full path,
    e.g. ``messages.0.role``. Use ``create`` to build one on its own.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def create(cls: type[P], **data: Any) -> P:
        """Construct and validate, raising fieri ``ValidationError``."""
        try:
            return cls(**data)
        except PydanticValidationError as exc:
            raise translate_validation_error(exc) from None


class ValidatedModel(BaseModel):
    """Frozen model whose constructor raises fieri ``ValidationError``."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except PydanticValidationError as exc:
            raise translate_validation_error(exc) from None


class ApiRequest(ValidatedModel):
    """Base class for JSON request payloads."""

    streamable: ClassVar[bool] = False

    def to_payload(self, *, stream: bool = False) -> dict[str, Any]:
        """Serialise the request to its JSON body.

        Args:
            stream: Ask the service for a streamed response

        Returns:
            JSON-ready dictionary without unset optional fields
        """
        payload = self.model_dump(mode="json", exclude_none=True, by_alias=True)
        if stream:
            payload["stream"] = True
        return payload


class Upload(RequestPart):
    """A file sent as one part of a multipart request."""

    filename: str = Field(min_length=1, description="File name reported to the service")
    content: bytes = Field(min_length=1, description="Raw file content")
    content_type: str = Field(
        default="application/octet-stream", description="MIME type of the content"
    )

    @classmethod
    def from_path(cls, path: str | Path, content_type: str | None = None) -> Upload:
        """Read a local file into an Upload.

        Args:
            path: Path to the file
            content_type: MIME type; guessed from the extension when omitted

        Returns:
            Upload holding the file bytes

        Raises:
            ValidationError: If the file cannot be read
        """
        file_path = Path(path)
        try:
            content = file_path.read_bytes()
        except OSError as e:
            raise ValidationError(str(path), f"cannot read file: {e.strerror or e}") from e
        if content_type is None:
            guessed, _ = mimetypes.guess_type(file_path.name)
            content_type = guessed or "application/octet-stream"
        return cls.create(
            filename=file_path.name,
            content=content,
            content_type=content_type,
        )

    def as_file(self) -> tuple[str, bytes, str]:
        """Return the (filename, content, content_type) triple httpx expects."""
        return (self.filename, self.content, self.content_type)


class MultipartRequest(ApiRequest):
    """Base class for requests sent as multipart/form-data."""

    def to_multipart(self) -> tuple[dict[str, str], dict[str, tuple[str, bytes, str]]]:
        """Split the request into form fields and file parts.

        Returns:
            Tuple of (data, files) ready for ``httpx`` ``data=``/``files=``
        """
        data: dict[str, str] = {}
        files: dict[str, tuple[str, bytes, str]] = {}
        for name in type(self).model_fields:
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, Upload):
                files[name] = value.as_file()
            elif isinstance(value, bool):
                data[name] = "true" if value else "false"
            else:
                data[name] = str(value)
        return data, files


class ApiObject(BaseModel):
    """Base class for decoded response objects."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)


class Usage(ApiObject):
    """Token usage counters."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class DataList(ApiObject, Generic[T]):
    """List envelope returned by collection endpoints."""

    object: str = "list"
    data: list[T]


class DeletedObject(ApiObject):
    """Result of a delete call."""

    id: str
    object: str | None = None
    deleted: bool
