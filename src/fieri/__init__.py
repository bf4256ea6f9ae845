"""fieri: async client and interactive shell for the OpenAI REST API.

Covers text completions, chat, edits, images, embeddings, moderation,
files and fine-tunes, with streamed responses for completions, chat and
fine-tune events.
"""
from __future__ import annotations

__version__ = "0.7.0"

from fieri.client import (
    ChatRequestBuilder,
    ChunkStream,
    Client,
    CompletionRequestBuilder,
    EditRequestBuilder,
    EmbeddingRequestBuilder,
    FileUploadRequestBuilder,
    FineTuneRequestBuilder,
    ImageEditRequestBuilder,
    ImageRequestBuilder,
    ImageVariationRequestBuilder,
    ModerationRequestBuilder,
)
from fieri.config import ClientConfig
from fieri.errors import (
    ApiError,
    DecodeError,
    ErrorKind,
    FieriError,
    TransportError,
    ValidationError,
)
from fieri.types import ChatMessage, StreamChunk, Upload

__all__ = [
    # Errors
    "ApiError",
    # Builders
    "ChatRequestBuilder",
    "ChatMessage",
    "ChunkStream",
    # Client
    "Client",
    "ClientConfig",
    "CompletionRequestBuilder",
    "DecodeError",
    "EditRequestBuilder",
    "EmbeddingRequestBuilder",
    "ErrorKind",
    "FieriError",
    "FileUploadRequestBuilder",
    "FineTuneRequestBuilder",
    "ImageEditRequestBuilder",
    "ImageRequestBuilder",
    "ImageVariationRequestBuilder",
    "ModerationRequestBuilder",
    "StreamChunk",
    "TransportError",
    "Upload",
    "ValidationError",
    # Version
    "__version__",
]
