"""
File upload requests and file objects.
"""

from __future__ import annotations

from pydantic import Field

from fieri.types.common import ApiObject, MultipartRequest, Upload


class FileUploadRequest(MultipartRequest):
    """Parameters for uploading a file (e.g. JSON Lines training data)."""

    file: Upload
    purpose: str = Field(min_length=1, description="Intended use, e.g. 'fine-tune'")


class File(ApiObject):
    """A file stored by the service."""

    id: str
    object: str = "file"
    bytes: int | None = None
    created_at: int | None = None
    filename: str | None = None
    purpose: str | None = None
    status: str | None = None
    status_details: str | None = None
