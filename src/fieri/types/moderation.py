"""
Content moderation requests and results.

The classifier reports, per policy category, a boolean verdict and a raw
confidence score in [0, 1] (not a probability).
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, model_validator

from fieri.types.common import ApiObject, ApiRequest, Usage, constraint_error


class ModerationRequest(ApiRequest):
    """Parameters for the moderations endpoint."""

    input: str | list[str] = Field(description="Text or texts to classify")
    model: Literal["text-moderation-stable", "text-moderation-latest"] | None = None

    @model_validator(mode="after")
    def _check_input(self) -> ModerationRequest:
        if not self.input:
            raise constraint_error("input", "must not be empty")
        return self


class Categories(ApiObject):
    """Per-category policy violation flags."""

    hate: bool = False
    hate_threatening: bool = Field(default=False, alias="hate/threatening")
    self_harm: bool = Field(default=False, alias="self-harm")
    sexual: bool = False
    sexual_minors: bool = Field(default=False, alias="sexual/minors")
    violence: bool = False
    violence_graphic: bool = Field(default=False, alias="violence/graphic")


class CategoryScores(ApiObject):
    """Per-category raw scores; higher means more confident."""

    hate: float = 0.0
    hate_threatening: float = Field(default=0.0, alias="hate/threatening")
    self_harm: float = Field(default=0.0, alias="self-harm")
    sexual: float = 0.0
    sexual_minors: float = Field(default=0.0, alias="sexual/minors")
    violence: float = 0.0
    violence_graphic: float = Field(default=0.0, alias="violence/graphic")


class ModerationResult(ApiObject):
    flagged: bool = False
    categories: Categories
    category_scores: CategoryScores


class Moderation(ApiObject):
    """Response from the moderations endpoint."""

    id: str
    model: str | None = None
    results: list[ModerationResult]
    usage: Usage | None = None

    @property
    def flagged(self) -> bool:
        """Whether any input was flagged."""
        return any(result.flagged for result in self.results)
