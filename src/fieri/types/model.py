"""
Model objects returned by the models endpoints.
"""

from __future__ import annotations

from pydantic import Field

from fieri.types.common import ApiObject


class ModelPermission(ApiObject):
    id: str | None = None
    object: str = "model_permission"
    created: int | None = None
    allow_create_engine: bool = False
    allow_sampling: bool = False
    allow_logprobs: bool = False
    allow_search_indices: bool = False
    allow_view: bool = False
    allow_fine_tuning: bool = False
    organization: str | None = None
    group: str | None = None
    is_blocking: bool = False


class Model(ApiObject):
    """A model available to the account."""

    id: str
    object: str = "model"
    created: int | None = None
    owned_by: str | None = None
    permission: list[ModelPermission] = Field(default_factory=list)
    root: str | None = None
    parent: str | None = None
