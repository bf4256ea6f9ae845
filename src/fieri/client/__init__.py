"""
Client layer - endpoint facade, request builders and streams.
"""

from fieri.client.builder import (
    ChatRequestBuilder,
    CompletionRequestBuilder,
    EditRequestBuilder,
    EmbeddingRequestBuilder,
    FileUploadRequestBuilder,
    FineTuneRequestBuilder,
    ImageEditRequestBuilder,
    ImageRequestBuilder,
    ImageVariationRequestBuilder,
    ModerationRequestBuilder,
    RequestBuilder,
)
from fieri.client.core import Client
from fieri.client.stream import ChunkStream

__all__ = [
    "ChatRequestBuilder",
    "ChunkStream",
    "Client",
    "CompletionRequestBuilder",
    "EditRequestBuilder",
    "EmbeddingRequestBuilder",
    "FileUploadRequestBuilder",
    "FineTuneRequestBuilder",
    "ImageEditRequestBuilder",
    "ImageRequestBuilder",
    "ImageVariationRequestBuilder",
    "ModerationRequestBuilder",
    "RequestBuilder",
]
