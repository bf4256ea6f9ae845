"""
Chat completion requests and responses.

Provides Pythonic helpers for building conversations:
- ChatMessage.system / user / assistant / function factories
- ChatCompletion.to_message() to continue a conversation with a reply
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar

from pydantic import ConfigDict, Field, model_validator

from fieri.types.common import (
    ApiObject,
    ApiRequest,
    Usage,
    RequestPart,
    constraint_error,
)
from fieri.types.completion import check_logit_bias, check_stop


class ChatRole(str, Enum):
    """Message role enumeration."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    FUNCTION = "function"


class ChatMessage(RequestPart):
    """One message of a chat conversation.

    Examples:
        >>> ChatMessage.system("You are a terse assistant.")
        >>> ChatMessage.user("Name three moons of Jupiter.")
    """

    model_config = ConfigDict(frozen=True, extra="forbid", use_enum_values=True)

    role: ChatRole = Field(description="Author of the message")
    content: str | None = Field(default=None, description="Message text")
    name: str | None = Field(
        default=None, min_length=1, max_length=64, description="Author or function name"
    )
    function_call: dict[str, Any] | None = Field(
        default=None, description="Function call requested by the assistant"
    )

    @model_validator(mode="after")
    def _check_role_fields(self) -> ChatMessage:
        if self.role == ChatRole.FUNCTION and not self.name:
            raise constraint_error("name", "missing required field")
        if self.content is None and not (
            self.role == ChatRole.ASSISTANT and self.function_call
        ):
            raise constraint_error("content", "missing required field")
        return self

    @classmethod
    def system(cls, text: str) -> ChatMessage:
        """Create a system message."""
        return cls.create(role=ChatRole.SYSTEM, content=text)

    @classmethod
    def user(cls, text: str, name: str | None = None) -> ChatMessage:
        """Create a user message."""
        return cls.create(role=ChatRole.USER, content=text, name=name)

    @classmethod
    def assistant(cls, text: str) -> ChatMessage:
        """Create an assistant message."""
        return cls.create(role=ChatRole.ASSISTANT, content=text)

    @classmethod
    def function(cls, name: str, result: str) -> ChatMessage:
        """Create a message carrying a function's result.

        Args:
            name: Name of the function that produced the result
            result: Function output, usually JSON text

        Returns:
            Message with function role
        """
        return cls.create(role=ChatRole.FUNCTION, name=name, content=result)


class ChatRequest(ApiRequest):
    """Parameters for the chat completions endpoint."""

    streamable: ClassVar[bool] = True

    model: str = Field(min_length=1, description="Model used for the completion")
    messages: list[ChatMessage] = Field(min_length=1, description="Conversation so far")
    functions: list[dict[str, Any]] | None = Field(
        default=None, min_length=1, description="Functions the model may call"
    )
    function_call: str | dict[str, Any] | None = None
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)
    n: int | None = Field(default=None, ge=1, le=128)
    stop: str | list[str] | None = None
    max_tokens: int | None = Field(default=None, ge=1)
    presence_penalty: float | None = Field(default=None, ge=-2.0, le=2.0)
    frequency_penalty: float | None = Field(default=None, ge=-2.0, le=2.0)
    logit_bias: dict[str, int] | None = None
    user: str | None = None

    @model_validator(mode="after")
    def _check_cross_fields(self) -> ChatRequest:
        check_stop(self.stop)
        check_logit_bias(self.logit_bias)
        if self.function_call is not None and not self.functions:
            raise constraint_error("function_call", "requires functions")
        return self


class ChatResponseMessage(ApiObject):
    """Message generated by the model."""

    role: str = "assistant"
    content: str | None = None
    name: str | None = None
    function_call: dict[str, Any] | None = None


class ChatChoice(ApiObject):
    """One generated chat reply."""

    index: int = 0
    message: ChatResponseMessage
    finish_reason: str | None = None


class ChatCompletion(ApiObject):
    """Response from the chat completions endpoint.

    Attributes:
        id: Completion identifier
        model: Model that generated the response
        choices: Generated replies
        usage: Token usage information
    """

    id: str
    object: str = "chat.completion"
    created: int | None = None
    model: str | None = None
    choices: list[ChatChoice]
    usage: Usage | None = None

    @property
    def content(self) -> str:
        """Text of the first reply, or an empty string."""
        if not self.choices:
            return ""
        return self.choices[0].message.content or ""

    @property
    def finish_reason(self) -> str | None:
        return self.choices[0].finish_reason if self.choices else None

    def to_message(self) -> ChatMessage:
        """Convert the first reply into a message for the next request."""
        message = self.choices[0].message
        return ChatMessage.create(
            role=ChatRole.ASSISTANT,
            content=message.content if message.content is not None or message.function_call else "",
            function_call=message.function_call,
        )
