"""
Base abstractions for the pipeline layer.

A pipeline turns the raw body of a streamed response into typed values:
bytes are decoded into JSON frames, error frames are raised, and every
other frame is parsed into the caller's chunk type.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import ValidationError as PydanticValidationError

from fieri.errors import DecodeError
from fieri.pipeline.response import raise_for_error_frame

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

T = TypeVar("T")


class Decoder(ABC):
    """Abstract decoder that converts byte stream to JSON frames.

    Decoders handle the transport-level parsing of streaming responses,
    converting raw bytes into structured JSON objects.
    """

    @abstractmethod
    def decode(
        self, byte_stream: AsyncIterator[bytes]
    ) -> AsyncIterator[dict[str, Any]]:
        """Decode a byte stream into JSON frames.

        Args:
            byte_stream: Async iterator of raw bytes

        Yields:
            Parsed JSON frames as dictionaries
        """
        ...


class Pipeline(Generic[T]):
    """Complete pipeline for processing streaming responses.

    Example:
        >>> pipeline = Pipeline(SSEDecoder(), StreamChunk.from_chat_frame)
        >>> async for chunk in pipeline.process(response.aiter_bytes()):
        ...     print(chunk.delta, end="")
    """

    def __init__(
        self,
        decoder: Decoder,
        parse: Callable[[dict[str, Any]], T],
    ) -> None:
        """Initialize the pipeline.

        Args:
            decoder: The decoder to convert bytes to frames
            parse: Maps one frame to a typed value
        """
        self._decoder = decoder
        self._parse = parse

    async def process(self, byte_stream: AsyncIterator[bytes]) -> AsyncIterator[T]:
        """Process a byte stream through the complete pipeline.

        Args:
            byte_stream: Async iterator of raw bytes

        Yields:
            One typed value per data frame, in arrival order

        Raises:
            ApiError: When the service reports an error inside the stream
            DecodeError: When a frame cannot be decoded or parsed
        """
        async for frame in self._decoder.decode(byte_stream):
            raise_for_error_frame(frame)
            yield self._parse_frame(frame)

    def _parse_frame(self, frame: dict[str, Any]) -> T:
        try:
            return self._parse(frame)
        except DecodeError:
            raise
        except PydanticValidationError as e:
            first = e.errors()[0] if e.errors() else {}
            field_path = ".".join(str(part) for part in first.get("loc", ())) or None
            raise DecodeError(
                f"unexpected stream frame: {first.get('msg', 'schema mismatch')}",
                field_path=field_path,
                payload=json.dumps(frame, default=str),
                cause=e,
            ) from e
        except (TypeError, ValueError, KeyError) as e:
            raise DecodeError(
                f"unexpected stream frame: {e}",
                payload=json.dumps(frame, default=str),
                cause=e,
            ) from e
