"""
Fine-tune job requests, job objects and job events.
"""

from __future__ import annotations

from pydantic import Field, model_validator

from fieri.types.common import ApiObject, ApiRequest, constraint_error
from fieri.types.file import File

MAX_SUFFIX_CHARS = 40


class FineTuneRequest(ApiRequest):
    """Parameters for creating a fine-tune job."""

    training_file: str = Field(min_length=1, description="ID of an uploaded training file")
    validation_file: str | None = Field(default=None, min_length=1)
    model: str | None = Field(default=None, min_length=1, description="Base model to tune")
    n_epochs: int | None = Field(default=None, ge=1)
    batch_size: int | None = Field(default=None, ge=1)
    learning_rate_multiplier: float | None = Field(default=None, gt=0.0)
    prompt_loss_weight: float | None = Field(default=None, ge=0.0)
    compute_classification_metrics: bool | None = None
    classification_n_classes: int | None = Field(default=None, ge=1)
    classification_positive_class: str | None = None
    classification_betas: list[float] | None = None
    suffix: str | None = Field(default=None, min_length=1, max_length=MAX_SUFFIX_CHARS)

    @model_validator(mode="after")
    def _check_classification(self) -> FineTuneRequest:
        if self.compute_classification_metrics and self.validation_file is None:
            raise constraint_error("validation_file", "required for classification metrics")
        return self


class FineTuneEvent(ApiObject):
    """A progress event of a fine-tune job."""

    object: str = "fine-tune-event"
    created_at: int | None = None
    level: str | None = None
    message: str


class FineTune(ApiObject):
    """A fine-tune job."""

    id: str
    object: str = "fine-tune"
    model: str | None = None
    created_at: int | None = None
    updated_at: int | None = None
    events: list[FineTuneEvent] = Field(default_factory=list)
    fine_tuned_model: str | None = None
    hyperparams: dict[str, object] = Field(default_factory=dict)
    organization_id: str | None = None
    result_files: list[File] = Field(default_factory=list)
    status: str
    validation_files: list[File] = Field(default_factory=list)
    training_files: list[File] = Field(default_factory=list)
