"""
Text completion requests and responses.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field, model_validator

from fieri.types.common import ApiObject, ApiRequest, Usage, constraint_error

# Stop sequences accepted by the service per request
MAX_STOP_SEQUENCES = 4


def check_stop(stop: str | list[str] | None) -> None:
    """Validate a stop parameter shared by completion and chat requests."""
    if isinstance(stop, list):
        if not stop:
            raise constraint_error("stop", "must not be empty")
        if len(stop) > MAX_STOP_SEQUENCES:
            raise constraint_error("stop", f"at most {MAX_STOP_SEQUENCES} sequences")


def check_logit_bias(logit_bias: dict[str, int] | None) -> None:
    """Validate that every logit bias lies in [-100, 100]."""
    for value in (logit_bias or {}).values():
        if not -100 <= value <= 100:
            raise constraint_error("logit_bias", "out of range")


class CompletionRequest(ApiRequest):
    """Parameters for the completions endpoint."""

    streamable: ClassVar[bool] = True

    model: str = Field(min_length=1, description="Model used for the completion")
    prompt: str | list[str] | None = Field(default=None, description="Prompt(s) to complete")
    suffix: str | None = Field(default=None, description="Text after the completion")
    max_tokens: int | None = Field(default=None, ge=1, description="Maximum tokens to generate")
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)
    n: int | None = Field(default=None, ge=1, le=128, description="Completions per prompt")
    logprobs: int | None = Field(default=None, ge=0, le=5)
    echo: bool | None = None
    stop: str | list[str] | None = None
    presence_penalty: float | None = Field(default=None, ge=-2.0, le=2.0)
    frequency_penalty: float | None = Field(default=None, ge=-2.0, le=2.0)
    best_of: int | None = Field(default=None, ge=1, le=128)
    logit_bias: dict[str, int] | None = None
    user: str | None = None

    @model_validator(mode="after")
    def _check_cross_fields(self) -> CompletionRequest:
        check_stop(self.stop)
        check_logit_bias(self.logit_bias)
        if self.best_of is not None and self.best_of < (self.n or 1):
            raise constraint_error("best_of", "must be greater than or equal to n")
        return self


class LogProbs(ApiObject):
    """Log probabilities of the generated tokens."""

    tokens: list[str] = Field(default_factory=list)
    token_logprobs: list[float | None] = Field(default_factory=list)
    top_logprobs: list[dict[str, float] | None] | None = None
    text_offset: list[int] = Field(default_factory=list)


class CompletionChoice(ApiObject):
    """One generated completion."""

    text: str
    index: int = 0
    logprobs: LogProbs | None = None
    finish_reason: str | None = None


class Completion(ApiObject):
    """Response from the completions endpoint."""

    id: str
    object: str = "text_completion"
    created: int | None = None
    model: str | None = None
    choices: list[CompletionChoice]
    usage: Usage | None = None

    @property
    def text(self) -> str:
        """Text of the first choice, or an empty string."""
        return self.choices[0].text if self.choices else ""
