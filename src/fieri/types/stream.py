"""
Streaming chunk model.

Each complete event frame of a streamed completion or chat response
becomes one ``StreamChunk`` holding the incremental text and, on the last
chunk of a choice, its finish reason.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import Field

from fieri.errors import DecodeError
from fieri.types.common import ApiObject, Usage


class StreamChunk(ApiObject):
    """One incremental fragment of a streamed response.

    Attributes:
        delta: Newly generated text (may be empty)
        index: Choice index the fragment belongs to
        finish_reason: Set on the terminal fragment of a choice
        role: Role announced by the first chat fragment
        usage: Token usage, when the service reports it on the stream
        raw: The decoded frame as received
    """

    delta: str = ""
    index: int = 0
    finish_reason: str | None = None
    role: str | None = None
    id: str | None = None
    model: str | None = None
    usage: Usage | None = None
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    @property
    def is_final(self) -> bool:
        """Whether this is the terminal chunk of its choice."""
        return self.finish_reason is not None

    @classmethod
    def from_chat_frame(cls, frame: dict[str, Any]) -> StreamChunk:
        """Decode a chat completion frame (``choices[].delta.content``)."""
        return cls._from_frame(frame, _chat_text)

    @classmethod
    def from_completion_frame(cls, frame: dict[str, Any]) -> StreamChunk:
        """Decode a text completion frame (``choices[].text``)."""
        return cls._from_frame(frame, _completion_text)

    @classmethod
    def _from_frame(cls, frame: dict[str, Any], text_of: Any) -> StreamChunk:
        if "choices" not in frame:
            # Minimal frames: {"delta": "...", "finish_reason": ...}
            delta = frame.get("delta")
            if not isinstance(delta, str):
                raise _schema_error(frame, "delta", "expected 'choices' or a string 'delta'")
            return cls(
                delta=delta,
                finish_reason=_optional_str(frame, "finish_reason"),
                id=_optional_str(frame, "id"),
                model=_optional_str(frame, "model"),
                raw=frame,
            )

        choices = frame["choices"]
        if not isinstance(choices, list):
            raise _schema_error(frame, "choices", "expected a list")

        usage = frame.get("usage")
        if usage is not None and not isinstance(usage, dict):
            raise _schema_error(frame, "usage", "expected an object")

        base: dict[str, Any] = {
            "id": _optional_str(frame, "id"),
            "model": _optional_str(frame, "model"),
            "usage": Usage.model_validate(usage) if usage else None,
            "raw": frame,
        }
        if not choices:
            return cls(**base)

        choice = choices[0]
        if not isinstance(choice, dict):
            raise _schema_error(frame, "choices.0", "expected an object")
        delta, role = text_of(frame, choice)
        index = choice.get("index", 0)
        if not isinstance(index, int):
            raise _schema_error(frame, "choices.0.index", "expected an integer")
        return cls(
            delta=delta,
            index=index,
            finish_reason=_optional_str(choice, "finish_reason", frame),
            role=role,
            **base,
        )


def _chat_text(frame: dict[str, Any], choice: dict[str, Any]) -> tuple[str, str | None]:
    delta = choice.get("delta")
    if not isinstance(delta, dict):
        raise _schema_error(frame, "choices.0.delta", "expected an object")
    content = delta.get("content")
    if content is not None and not isinstance(content, str):
        raise _schema_error(frame, "choices.0.delta.content", "expected a string")
    role = delta.get("role")
    return content or "", role if isinstance(role, str) else None


def _completion_text(frame: dict[str, Any], choice: dict[str, Any]) -> tuple[str, str | None]:
    text = choice.get("text")
    if not isinstance(text, str):
        raise _schema_error(frame, "choices.0.text", "expected a string")
    return text, None


def _optional_str(
    data: dict[str, Any], key: str, frame: dict[str, Any] | None = None
) -> str | None:
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    raise _schema_error(frame or data, key, "expected a string")


def _schema_error(frame: dict[str, Any], field_path: str, reason: str) -> DecodeError:
    return DecodeError(
        f"unexpected stream frame: {reason}",
        field_path=field_path,
        payload=json.dumps(frame, default=str),
    )
