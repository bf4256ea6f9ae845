"""
Embedding requests and responses.
"""

from __future__ import annotations

from pydantic import Field, model_validator

from fieri.types.common import ApiObject, ApiRequest, Usage, constraint_error


class EmbeddingRequest(ApiRequest):
    """Parameters for the embeddings endpoint."""

    model: str = Field(min_length=1, description="Embedding model, e.g. text-embedding-ada-002")
    input: str | list[str] = Field(description="Text or batch of texts to embed")
    user: str | None = None

    @model_validator(mode="after")
    def _check_input(self) -> EmbeddingRequest:
        texts = [self.input] if isinstance(self.input, str) else self.input
        if not texts or any(not text for text in texts):
            raise constraint_error("input", "must not be empty")
        return self


class Embedding(ApiObject):
    """A single embedding vector.

    Attributes:
        index: Position of the input in the batch
        embedding: The embedding vector
    """

    object: str = "embedding"
    index: int = 0
    embedding: list[float]

    @property
    def dimensions(self) -> int:
        return len(self.embedding)


class EmbeddingResponse(ApiObject):
    """Response from the embeddings endpoint."""

    object: str = "list"
    data: list[Embedding]
    model: str | None = None
    usage: Usage | None = None

    @property
    def first(self) -> Embedding | None:
        return self.data[0] if self.data else None
