"""
Lazy, closeable sequence of streamed chunks.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from fieri.errors import FieriError
from fieri.telemetry import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable

T = TypeVar("T")

logger = get_logger("fieri.client")


class ChunkStream(Generic[T]):
    """Async iterator over the chunks of one streamed response.

    The request is sent on the first pull, not when the stream is created.
    The connection is released when the sequence ends, when an error is
    raised, or when the stream is closed early, whichever comes first.

    Example:
        >>> async with client.chat_stream(request) as stream:
        ...     async for chunk in stream:
        ...         print(chunk.delta, end="")

        >>> text = await client.complete_stream(request).text()
    """

    def __init__(
        self,
        open_stream: Callable[[], AsyncGenerator[T, None]],
        *,
        path: str,
    ) -> None:
        """Initialize the stream.

        Args:
            open_stream: Factory for the generator that performs the request
            path: Endpoint path, for logging
        """
        self._open_stream = open_stream
        self._path = path
        self._iterator: AsyncGenerator[T, None] | None = None
        self._closed = False
        self._received = 0

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def received(self) -> int:
        """Number of chunks delivered so far."""
        return self._received

    def __aiter__(self) -> ChunkStream[T]:
        return self

    async def __anext__(self) -> T:
        if self._closed:
            raise StopAsyncIteration
        if self._iterator is None:
            self._iterator = self._open_stream()

        try:
            chunk = await self._iterator.__anext__()
        except StopAsyncIteration:
            logger.debug("stream finished", path=self._path, chunks=self._received)
            await self.aclose()
            raise
        except FieriError as e:
            logger.debug(
                "stream failed",
                path=self._path,
                chunks=self._received,
                kind=e.kind.value,
            )
            await self.aclose()
            raise
        except (asyncio.CancelledError, Exception) as e:
            logger.debug(
                "stream aborted",
                path=self._path,
                chunks=self._received,
                cause=type(e).__name__,
            )
            await self.aclose()
            raise

        self._received += 1
        return chunk

    async def aclose(self) -> None:
        """Stop the stream and release its connection. Idempotent."""
        if self._closed:
            return
        self._closed = True
        if self._iterator is not None:
            await self._iterator.aclose()

    async def __aenter__(self) -> ChunkStream[T]:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if not self._closed and self._iterator is not None:
            logger.debug("stream closed early", path=self._path, chunks=self._received)
        await self.aclose()

    async def collect(self) -> list[T]:
        """Drain the stream into a list."""
        return [chunk async for chunk in self]

    async def text(self) -> str:
        """Drain the stream and join the text deltas of its chunks."""
        parts: list[str] = []
        async for chunk in self:
            parts.append(getattr(chunk, "delta", "") or "")
        return "".join(parts)
