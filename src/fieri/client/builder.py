"""
Builder classes for fluent request construction.

Every builder stages fields through chained setters and validates them all
at once in ``build()``, which returns an immutable request or raises
``ValidationError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar, Generic, TypeVar

from fieri.types import (
    ChatMessage,
    ChatRequest,
    CompletionRequest,
    EditRequest,
    EmbeddingRequest,
    FileUploadRequest,
    FineTuneRequest,
    ImageEditRequest,
    ImageRequest,
    ImageVariationRequest,
    ModerationRequest,
    Upload,
)
from fieri.types.common import ApiRequest

R = TypeVar("R", bound=ApiRequest)


def _as_upload(value: Upload | str | Path) -> Upload:
    if isinstance(value, Upload):
        return value
    return Upload.from_path(value)


class RequestBuilder(Generic[R]):
    """Base class for request builders.

    Subclasses set ``request_type`` and add one setter per field. Setting a
    field to ``None`` removes it again.
    """

    request_type: ClassVar[type[ApiRequest]]

    def __init__(self, **fields: Any) -> None:
        self._fields: dict[str, Any] = {}
        for name, value in fields.items():
            self._set(name, value)

    def _set(self, name: str, value: Any) -> Any:
        if value is None:
            self._fields.pop(name, None)
        else:
            self._fields[name] = value
        return self

    @property
    def fields(self) -> dict[str, Any]:
        """Copy of the staged fields."""
        return dict(self._fields)

    def build(self) -> R:
        """Build the immutable request.

        Returns:
            Validated request

        Raises:
            ValidationError: On a missing required field or a violated
                constraint
        """
        return self.request_type(**self._fields)  # type: ignore[return-value]


class _SamplingMixin:
    """Setters shared by the text generation builders."""

    _set: Any

    def temperature(self, value: float | None) -> Any:
        """Sampling temperature in [0, 2]."""
        return self._set("temperature", value)

    def top_p(self, value: float | None) -> Any:
        """Nucleus sampling mass in [0, 1]."""
        return self._set("top_p", value)

    def n(self, value: int | None) -> Any:
        return self._set("n", value)

    def max_tokens(self, value: int | None) -> Any:
        return self._set("max_tokens", value)

    def stop(self, value: str | list[str] | None) -> Any:
        """Up to four sequences where generation stops."""
        return self._set("stop", value)

    def presence_penalty(self, value: float | None) -> Any:
        return self._set("presence_penalty", value)

    def frequency_penalty(self, value: float | None) -> Any:
        return self._set("frequency_penalty", value)

    def logit_bias(self, value: dict[str, int] | None) -> Any:
        """Token id to bias in [-100, 100]."""
        return self._set("logit_bias", value)

    def user(self, value: str | None) -> Any:
        """End-user identifier for abuse monitoring."""
        return self._set("user", value)


class CompletionRequestBuilder(_SamplingMixin, RequestBuilder[CompletionRequest]):
    """Builder for text completion requests.

    Example:
        >>> request = (
        ...     CompletionRequestBuilder("text-davinci-003")
        ...     .prompt("Say this is a test")
        ...     .max_tokens(7)
        ...     .temperature(0)
        ...     .build()
        ... )
    """

    request_type = CompletionRequest

    def __init__(self, model: str | None = None) -> None:
        super().__init__(model=model)

    def model(self, value: str | None) -> CompletionRequestBuilder:
        return self._set("model", value)

    def prompt(self, value: str | list[str] | None) -> CompletionRequestBuilder:
        return self._set("prompt", value)

    def suffix(self, value: str | None) -> CompletionRequestBuilder:
        return self._set("suffix", value)

    def logprobs(self, value: int | None) -> CompletionRequestBuilder:
        return self._set("logprobs", value)

    def echo(self, value: bool | None) -> CompletionRequestBuilder:
        return self._set("echo", value)

    def best_of(self, value: int | None) -> CompletionRequestBuilder:
        return self._set("best_of", value)


class ChatRequestBuilder(_SamplingMixin, RequestBuilder[ChatRequest]):
    """Builder for chat completion requests.

    Provides a fluent API for configuring chat requests:

    Example:
        >>> request = (
        ...     ChatRequestBuilder("gpt-3.5-turbo")
        ...     .system("You are terse.")
        ...     .user("Hello!")
        ...     .temperature(0.7)
        ...     .build()
        ... )
    """

    request_type = ChatRequest

    def __init__(
        self,
        model: str | None = None,
        messages: list[ChatMessage] | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            model: Chat model name
            messages: Conversation to start from (copied)
        """
        super().__init__(model=model)
        self._messages: list[ChatMessage] = list(messages or [])

    def model(self, value: str | None) -> ChatRequestBuilder:
        return self._set("model", value)

    def messages(self, messages: list[ChatMessage]) -> ChatRequestBuilder:
        """Replace the conversation.

        Args:
            messages: List of messages

        Returns:
            Self for chaining
        """
        self._messages = list(messages)
        return self

    def message(self, message: ChatMessage) -> ChatRequestBuilder:
        """Append one message.

        Args:
            message: Message to add

        Returns:
            Self for chaining
        """
        self._messages.append(message)
        return self

    def system(self, content: str) -> ChatRequestBuilder:
        """Append a system message.

        Args:
            content: System message content

        Returns:
            Self for chaining
        """
        return self.message(ChatMessage.system(content))

    def user(self, content: str, name: str | None = None) -> ChatRequestBuilder:  # type: ignore[override]
        """Append a user message.

        Args:
            content: User message content
            name: Optional author name

        Returns:
            Self for chaining
        """
        return self.message(ChatMessage.user(content, name=name))

    def assistant(self, content: str) -> ChatRequestBuilder:
        """Append an assistant message.

        Args:
            content: Assistant message content

        Returns:
            Self for chaining
        """
        return self.message(ChatMessage.assistant(content))

    def end_user(self, value: str | None) -> ChatRequestBuilder:
        """Set the end-user identifier (``user`` field of the request)."""
        return self._set("user", value)

    def functions(self, value: list[dict[str, Any]] | None) -> ChatRequestBuilder:
        return self._set("functions", value)

    def function_call(self, value: str | dict[str, Any] | None) -> ChatRequestBuilder:
        return self._set("function_call", value)

    def build(self) -> ChatRequest:
        return ChatRequest(**self._fields, messages=list(self._messages))


class EditRequestBuilder(RequestBuilder[EditRequest]):
    """Builder for edit requests."""

    request_type = EditRequest

    def __init__(self, model: str | None = None, instruction: str | None = None) -> None:
        super().__init__(model=model, instruction=instruction)

    def model(self, value: str | None) -> EditRequestBuilder:
        return self._set("model", value)

    def instruction(self, value: str | None) -> EditRequestBuilder:
        return self._set("instruction", value)

    def input(self, value: str | None) -> EditRequestBuilder:
        return self._set("input", value)

    def n(self, value: int | None) -> EditRequestBuilder:
        return self._set("n", value)

    def temperature(self, value: float | None) -> EditRequestBuilder:
        return self._set("temperature", value)

    def top_p(self, value: float | None) -> EditRequestBuilder:
        return self._set("top_p", value)


class _ImageOptionsMixin:
    _set: Any

    def n(self, value: int | None) -> Any:
        """Number of images, 1 to 10."""
        return self._set("n", value)

    def size(self, value: str | None) -> Any:
        """One of 256x256, 512x512, 1024x1024."""
        return self._set("size", value)

    def response_format(self, value: str | None) -> Any:
        """``url`` or ``b64_json``."""
        return self._set("response_format", value)

    def user(self, value: str | None) -> Any:
        return self._set("user", value)


class ImageRequestBuilder(_ImageOptionsMixin, RequestBuilder[ImageRequest]):
    """Builder for image generation requests."""

    request_type = ImageRequest

    def __init__(self, prompt: str | None = None) -> None:
        super().__init__(prompt=prompt)

    def prompt(self, value: str | None) -> ImageRequestBuilder:
        return self._set("prompt", value)


class ImageEditRequestBuilder(_ImageOptionsMixin, RequestBuilder[ImageEditRequest]):
    """Builder for image edit requests.

    ``image`` and ``mask`` accept an ``Upload`` or a path to read.
    """

    request_type = ImageEditRequest

    def __init__(self, image: Upload | str | Path | None = None, prompt: str | None = None) -> None:
        super().__init__(prompt=prompt)
        if image is not None:
            self.image(image)

    def image(self, value: Upload | str | Path | None) -> ImageEditRequestBuilder:
        return self._set("image", None if value is None else _as_upload(value))

    def mask(self, value: Upload | str | Path | None) -> ImageEditRequestBuilder:
        return self._set("mask", None if value is None else _as_upload(value))

    def prompt(self, value: str | None) -> ImageEditRequestBuilder:
        return self._set("prompt", value)


class ImageVariationRequestBuilder(_ImageOptionsMixin, RequestBuilder[ImageVariationRequest]):
    """Builder for image variation requests."""

    request_type = ImageVariationRequest

    def __init__(self, image: Upload | str | Path | None = None) -> None:
        super().__init__()
        if image is not None:
            self.image(image)

    def image(self, value: Upload | str | Path | None) -> ImageVariationRequestBuilder:
        return self._set("image", None if value is None else _as_upload(value))


class EmbeddingRequestBuilder(RequestBuilder[EmbeddingRequest]):
    """Builder for embedding requests."""

    request_type = EmbeddingRequest

    def __init__(self, model: str | None = None, input: str | list[str] | None = None) -> None:
        super().__init__(model=model, input=input)

    def model(self, value: str | None) -> EmbeddingRequestBuilder:
        return self._set("model", value)

    def input(self, value: str | list[str] | None) -> EmbeddingRequestBuilder:
        return self._set("input", value)

    def user(self, value: str | None) -> EmbeddingRequestBuilder:
        return self._set("user", value)


class FileUploadRequestBuilder(RequestBuilder[FileUploadRequest]):
    """Builder for file uploads."""

    request_type = FileUploadRequest

    def __init__(self, file: Upload | str | Path | None = None, purpose: str | None = None) -> None:
        super().__init__(purpose=purpose)
        if file is not None:
            self.file(file)

    def file(self, value: Upload | str | Path | None) -> FileUploadRequestBuilder:
        return self._set("file", None if value is None else _as_upload(value))

    def purpose(self, value: str | None) -> FileUploadRequestBuilder:
        return self._set("purpose", value)


class FineTuneRequestBuilder(RequestBuilder[FineTuneRequest]):
    """Builder for fine-tune jobs.

    Example:
        >>> request = (
        ...     FineTuneRequestBuilder("file-abc123")
        ...     .model("curie")
        ...     .n_epochs(4)
        ...     .suffix("support-bot")
        ...     .build()
        ... )
    """

    request_type = FineTuneRequest

    def __init__(self, training_file: str | None = None) -> None:
        super().__init__(training_file=training_file)

    def training_file(self, value: str | None) -> FineTuneRequestBuilder:
        return self._set("training_file", value)

    def validation_file(self, value: str | None) -> FineTuneRequestBuilder:
        return self._set("validation_file", value)

    def model(self, value: str | None) -> FineTuneRequestBuilder:
        return self._set("model", value)

    def n_epochs(self, value: int | None) -> FineTuneRequestBuilder:
        return self._set("n_epochs", value)

    def batch_size(self, value: int | None) -> FineTuneRequestBuilder:
        return self._set("batch_size", value)

    def learning_rate_multiplier(self, value: float | None) -> FineTuneRequestBuilder:
        return self._set("learning_rate_multiplier", value)

    def prompt_loss_weight(self, value: float | None) -> FineTuneRequestBuilder:
        return self._set("prompt_loss_weight", value)

    def compute_classification_metrics(self, value: bool | None) -> FineTuneRequestBuilder:
        return self._set("compute_classification_metrics", value)

    def classification_n_classes(self, value: int | None) -> FineTuneRequestBuilder:
        return self._set("classification_n_classes", value)

    def classification_positive_class(self, value: str | None) -> FineTuneRequestBuilder:
        return self._set("classification_positive_class", value)

    def classification_betas(self, value: list[float] | None) -> FineTuneRequestBuilder:
        return self._set("classification_betas", value)

    def suffix(self, value: str | None) -> FineTuneRequestBuilder:
        """Up to 40 characters added to the fine-tuned model name."""
        return self._set("suffix", value)


class ModerationRequestBuilder(RequestBuilder[ModerationRequest]):
    """Builder for moderation requests."""

    request_type = ModerationRequest

    def __init__(self, input: str | list[str] | None = None) -> None:
        super().__init__(input=input)

    def input(self, value: str | list[str] | None) -> ModerationRequestBuilder:
        return self._set("input", value)

    def model(self, value: str | None) -> ModerationRequestBuilder:
        return self._set("model", value)
