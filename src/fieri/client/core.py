"""Core Client implementation.

One method per endpoint of the service. Every method validates its input
locally, sends exactly one HTTP request, and decodes the answer into a
typed object or raises a ``FieriError``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar
from urllib.parse import quote

from fieri.client.stream import ChunkStream
from fieri.config import ClientConfig
from fieri.errors import FieriError, ValidationError
from fieri.pipeline import (
    Pipeline,
    SSEDecoder,
    decode_content,
    decode_response,
    raise_for_stream_status,
)
from fieri.telemetry import CallContext, clear_call_context, get_logger, set_call_context
from fieri.transport import HttpTransport
from fieri.types import (
    ChatCompletion,
    ChatRequest,
    Completion,
    CompletionRequest,
    DataList,
    DeletedObject,
    Edit,
    EditRequest,
    EmbeddingRequest,
    EmbeddingResponse,
    File,
    FileUploadRequest,
    FineTune,
    FineTuneEvent,
    FineTuneRequest,
    ImageEditRequest,
    ImageRequest,
    ImageResponse,
    ImageVariationRequest,
    Model,
    Moderation,
    ModerationRequest,
    StreamChunk,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable

    import httpx
    from pydantic import BaseModel

    from fieri.types.common import ApiRequest

T = TypeVar("T")

logger = get_logger("fieri.client")


def _ident(field: str, value: str) -> str:
    """Validate and URL-quote a path identifier."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, "must not be empty")
    return quote(value, safe="")


class Client:
    """Async client for the completion, chat and image service.

    The client is cheap to share: concurrent calls reuse one connection
    pool and hold no other mutable state.

    Example:
        >>> async with Client() as client:
        ...     completion = await client.complete(
        ...         CompletionRequestBuilder("text-davinci-003").prompt("Hi").build()
        ...     )
        ...     print(completion.text)

        >>> # Streaming
        >>> async with client.chat_stream(request) as stream:
        ...     async for chunk in stream:
        ...         print(chunk.delta, end="")
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Connection settings; resolved from the environment when
                omitted
            transport: Optional httpx transport, mainly for tests

        Raises:
            ValidationError: If no credential can be resolved
        """
        self._config = config or ClientConfig.from_env()
        self._transport = HttpTransport(self._config, transport=transport)

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def close(self) -> None:
        """Release the connection pool."""
        await self._transport.close()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Plumbing

    async def _request(
        self,
        method: str,
        path: str,
        model: type[BaseModel] | None,
        request: ApiRequest | None = None,
        *,
        params: dict[str, Any] | None = None,
    ) -> Any:
        set_call_context(
            CallContext(method=method, path=path, model=getattr(request, "model", None))
        )
        try:
            response = await self._transport.send(method, path, request, params=params)
            if model is None:
                return decode_content(response)
            return decode_response(response, model)
        except FieriError as e:
            logger.debug("call failed", kind=e.kind.value, error=e.message)
            raise
        finally:
            clear_call_context()

    def _stream(
        self,
        method: str,
        path: str,
        parse: Callable[[dict[str, Any]], T],
        request: ApiRequest | None = None,
        *,
        params: dict[str, Any] | None = None,
    ) -> ChunkStream[T]:
        transport = self._transport

        async def open_stream() -> AsyncGenerator[T, None]:
            async with transport.stream(method, path, request, params=params) as response:
                await raise_for_stream_status(response)
                pipeline = Pipeline(SSEDecoder(), parse)
                async for item in pipeline.process(response.aiter_bytes()):
                    yield item

        return ChunkStream(open_stream, path=path)

    # ------------------------------------------------------------------
    # Models

    async def list_models(self) -> DataList[Model]:
        """List the models available to the account."""
        return await self._request("GET", "models", DataList[Model])

    async def retrieve_model(self, model_id: str) -> Model:
        """Retrieve one model by id.

        Raises:
            ValidationError: If ``model_id`` is empty
            ApiError: If the service does not know the model
        """
        return await self._request("GET", f"models/{_ident('model', model_id)}", Model)

    async def delete_model(self, model_id: str) -> DeletedObject:
        """Delete a fine-tuned model owned by the organization."""
        return await self._request(
            "DELETE", f"models/{_ident('model', model_id)}", DeletedObject
        )

    # ------------------------------------------------------------------
    # Text generation

    async def complete(self, request: CompletionRequest) -> Completion:
        """Create a text completion.

        Args:
            request: Validated completion request

        Returns:
            Completion with one choice per generated text

        Raises:
            TransportError: On connection, TLS or timeout failures
            ApiError: If the service rejects the request
            DecodeError: If the response does not match the schema
        """
        return await self._request("POST", "completions", Completion, request)

    def complete_stream(self, request: CompletionRequest) -> ChunkStream[StreamChunk]:
        """Stream a text completion.

        Nothing is sent until the returned stream is first iterated.

        Args:
            request: Validated completion request

        Returns:
            Stream of incremental text chunks
        """
        return self._stream(
            "POST", "completions", StreamChunk.from_completion_frame, request
        )

    async def chat(self, request: ChatRequest) -> ChatCompletion:
        """Create a chat completion.

        Args:
            request: Validated chat request

        Returns:
            Chat completion; ``content`` holds the first choice's reply
        """
        return await self._request("POST", "chat/completions", ChatCompletion, request)

    def chat_stream(self, request: ChatRequest) -> ChunkStream[StreamChunk]:
        """Stream a chat completion; see ``complete_stream``."""
        return self._stream(
            "POST", "chat/completions", StreamChunk.from_chat_frame, request
        )

    async def edit(self, request: EditRequest) -> Edit:
        """Create an edit of the input following the instruction."""
        return await self._request("POST", "edits", Edit, request)

    # ------------------------------------------------------------------
    # Images

    async def generate_image(self, request: ImageRequest) -> ImageResponse:
        """Generate images from a prompt."""
        return await self._request("POST", "images/generations", ImageResponse, request)

    async def edit_image(self, request: ImageEditRequest) -> ImageResponse:
        """Edit an image given a prompt and optional mask (multipart upload)."""
        return await self._request("POST", "images/edits", ImageResponse, request)

    async def create_image_variation(self, request: ImageVariationRequest) -> ImageResponse:
        """Create variations of an image (multipart upload)."""
        return await self._request("POST", "images/variations", ImageResponse, request)

    # ------------------------------------------------------------------
    # Embeddings and moderation

    async def embed(self, request: EmbeddingRequest) -> EmbeddingResponse:
        return await self._request("POST", "embeddings", EmbeddingResponse, request)

    async def moderate(self, request: ModerationRequest) -> Moderation:
        return await self._request("POST", "moderations", Moderation, request)

    # ------------------------------------------------------------------
    # Files

    async def list_files(self) -> DataList[File]:
        return await self._request("GET", "files", DataList[File])

    async def upload_file(self, request: FileUploadRequest) -> File:
        """Upload a file, e.g. JSONL training data for fine-tuning."""
        return await self._request("POST", "files", File, request)

    async def retrieve_file(self, file_id: str) -> File:
        return await self._request("GET", f"files/{_ident('file', file_id)}", File)

    async def delete_file(self, file_id: str) -> DeletedObject:
        return await self._request(
            "DELETE", f"files/{_ident('file', file_id)}", DeletedObject
        )

    async def retrieve_file_content(self, file_id: str) -> bytes:
        """Download the raw content of an uploaded file."""
        return await self._request(
            "GET", f"files/{_ident('file', file_id)}/content", None
        )

    # ------------------------------------------------------------------
    # Fine-tunes

    async def create_fine_tune(self, request: FineTuneRequest) -> FineTune:
        """Start a fine-tune job."""
        return await self._request("POST", "fine-tunes", FineTune, request)

    async def list_fine_tunes(self) -> DataList[FineTune]:
        return await self._request("GET", "fine-tunes", DataList[FineTune])

    async def retrieve_fine_tune(self, fine_tune_id: str) -> FineTune:
        return await self._request(
            "GET", f"fine-tunes/{_ident('fine_tune', fine_tune_id)}", FineTune
        )

    async def cancel_fine_tune(self, fine_tune_id: str) -> FineTune:
        """Cancel a running fine-tune job."""
        return await self._request(
            "POST", f"fine-tunes/{_ident('fine_tune', fine_tune_id)}/cancel", FineTune
        )

    async def list_fine_tune_events(self, fine_tune_id: str) -> DataList[FineTuneEvent]:
        """List the status events recorded for a fine-tune job."""
        return await self._request(
            "GET",
            f"fine-tunes/{_ident('fine_tune', fine_tune_id)}/events",
            DataList[FineTuneEvent],
        )

    def fine_tune_events_stream(self, fine_tune_id: str) -> ChunkStream[FineTuneEvent]:
        """Follow the events of a fine-tune job as they are recorded.

        Raises:
            ValidationError: If ``fine_tune_id`` is empty (raised immediately)
        """
        path = f"fine-tunes/{_ident('fine_tune', fine_tune_id)}/events"
        return self._stream(
            "GET",
            path,
            FineTuneEvent.model_validate,
            params={"stream": "true"},
        )
