"""
Image generation, edit and variation requests.

Generation is a JSON request; edits and variations upload the source image
as multipart form data.
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field

from fieri.types.common import ApiObject, ApiRequest, MultipartRequest, Upload

ImageSize = Literal["256x256", "512x512", "1024x1024"]
ImageFormat = Literal["url", "b64_json"]

MAX_PROMPT_CHARS = 1000
MAX_IMAGES = 10


class ImageRequest(ApiRequest):
    """Parameters for generating images from a prompt."""

    prompt: str = Field(min_length=1, max_length=MAX_PROMPT_CHARS)
    n: int | None = Field(default=None, ge=1, le=MAX_IMAGES, description="Images to generate")
    size: ImageSize | None = None
    response_format: ImageFormat | None = None
    user: str | None = None


class ImageEditRequest(MultipartRequest):
    """Parameters for editing an image given a prompt and optional mask.

    The transparent areas of ``mask`` (or of ``image`` when no mask is
    given) mark where the image is edited.
    """

    image: Upload = Field(description="Square PNG to edit")
    prompt: str = Field(min_length=1, max_length=MAX_PROMPT_CHARS)
    mask: Upload | None = Field(default=None, description="PNG mask, same size as image")
    n: int | None = Field(default=None, ge=1, le=MAX_IMAGES)
    size: ImageSize | None = None
    response_format: ImageFormat | None = None
    user: str | None = None


class ImageVariationRequest(MultipartRequest):
    """Parameters for creating variations of an image."""

    image: Upload = Field(description="Square PNG to vary")
    n: int | None = Field(default=None, ge=1, le=MAX_IMAGES)
    size: ImageSize | None = None
    response_format: ImageFormat | None = None
    user: str | None = None


class ImageData(ApiObject):
    """One generated image, either hosted or inline."""

    url: str | None = None
    b64_json: str | None = None


class ImageResponse(ApiObject):
    """Response from the image endpoints."""

    created: int | None = None
    data: list[ImageData]

    @property
    def urls(self) -> list[str]:
        return [item.url for item in self.data if item.url]
