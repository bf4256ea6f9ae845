"""
Text edit requests and responses.
"""

from __future__ import annotations

from pydantic import Field

from fieri.types.common import ApiObject, ApiRequest, Usage


class EditRequest(ApiRequest):
    """Parameters for the edits endpoint."""

    model: str = Field(min_length=1, description="Edit model, e.g. text-davinci-edit-001")
    instruction: str = Field(min_length=1, description="How the model should edit the input")
    input: str | None = Field(default=None, description="Text to edit")
    n: int | None = Field(default=None, ge=1, le=20)
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)


class EditChoice(ApiObject):
    text: str
    index: int = 0


class Edit(ApiObject):
    """Response from the edits endpoint."""

    object: str = "edit"
    created: int | None = None
    choices: list[EditChoice]
    usage: Usage | None = None

    @property
    def text(self) -> str:
        return self.choices[0].text if self.choices else ""
