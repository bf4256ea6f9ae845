"""
Types layer - request and response models for every endpoint.

Requests are immutable and validated on construction; responses mirror the
service's JSON schema.
"""

from fieri.types.chat import (
    ChatChoice,
    ChatCompletion,
    ChatMessage,
    ChatRequest,
    ChatResponseMessage,
    ChatRole,
)
from fieri.types.common import (
    ApiObject,
    ApiRequest,
    DataList,
    DeletedObject,
    MultipartRequest,
    Upload,
    Usage,
)
from fieri.types.completion import (
    Completion,
    CompletionChoice,
    CompletionRequest,
    LogProbs,
)
from fieri.types.edit import Edit, EditChoice, EditRequest
from fieri.types.embedding import Embedding, EmbeddingRequest, EmbeddingResponse
from fieri.types.file import File, FileUploadRequest
from fieri.types.fine_tune import FineTune, FineTuneEvent, FineTuneRequest
from fieri.types.image import (
    ImageData,
    ImageEditRequest,
    ImageRequest,
    ImageResponse,
    ImageVariationRequest,
)
from fieri.types.model import Model, ModelPermission
from fieri.types.moderation import (
    Categories,
    CategoryScores,
    Moderation,
    ModerationRequest,
    ModerationResult,
)
from fieri.types.stream import StreamChunk

__all__ = [
    "ApiObject",
    "ApiRequest",
    "Categories",
    "CategoryScores",
    # Chat
    "ChatChoice",
    "ChatCompletion",
    "ChatMessage",
    "ChatRequest",
    "ChatResponseMessage",
    "ChatRole",
    # Completion
    "Completion",
    "CompletionChoice",
    "CompletionRequest",
    "DataList",
    "DeletedObject",
    "Edit",
    "EditChoice",
    "EditRequest",
    "Embedding",
    "EmbeddingRequest",
    "EmbeddingResponse",
    "File",
    "FileUploadRequest",
    "FineTune",
    "FineTuneEvent",
    "FineTuneRequest",
    "ImageData",
    "ImageEditRequest",
    "ImageRequest",
    "ImageResponse",
    "ImageVariationRequest",
    "LogProbs",
    "Model",
    "ModelPermission",
    "Moderation",
    "ModerationRequest",
    "ModerationResult",
    "MultipartRequest",
    # Streaming
    "StreamChunk",
    "Upload",
    "Usage",
]
