"""
Non-streaming response decoding.

Turns a completed HTTP exchange into either a typed response object or
the matching error.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from fieri.errors import ApiError, DecodeError

if TYPE_CHECKING:
    import httpx

M = TypeVar("M", bound=BaseModel)


def raise_for_status(response: httpx.Response) -> None:
    """Raise ``ApiError`` when the response status is not 2xx.

    The body must already be read.
    """
    if response.is_success:
        return
    raise ApiError.from_response(
        response.status_code,
        response.text,
        response.headers,
    )


async def raise_for_stream_status(response: httpx.Response) -> None:
    """Streaming variant of ``raise_for_status``; reads the body first."""
    if response.is_success:
        return
    await response.aread()
    raise_for_status(response)


def raise_for_error_frame(frame: dict[str, Any]) -> None:
    """Raise ``ApiError`` for a stream frame that reports a service error."""
    error = frame.get("error")
    if error is None:
        return
    raise ApiError.from_payload(
        200,
        frame,
        body=json.dumps(frame, default=str),
    )


def decode_response(response: httpx.Response, model: type[M]) -> M:
    """Decode a completed response into ``model``.

    Args:
        response: HTTP response with its body read
        model: Response model to validate against

    Returns:
        Validated response object

    Raises:
        ApiError: On a non-2xx status
        DecodeError: On a 2xx body that is not JSON or does not match ``model``
    """
    raise_for_status(response)

    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DecodeError(
            f"response body is not valid JSON: {e}",
            payload=response.text,
            cause=e,
        ) from e

    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field_path = ".".join(str(part) for part in first["loc"]) or None
        raise DecodeError(
            f"unexpected {model.__name__} response: {first['msg']}",
            field_path=field_path,
            payload=response.text,
            cause=e,
        ) from e


def decode_content(response: httpx.Response) -> bytes:
    """Return the raw body of a successful response.

    Raises:
        ApiError: On a non-2xx status
    """
    raise_for_status(response)
    return response.content
