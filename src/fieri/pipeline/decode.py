"""
Server-Sent Events decoder.

Parses the event stream format used by streamed completions:
```
data: {"key": "value"}

data: {"key": "value2"}

data: [DONE]
```
"""

from __future__ import annotations

import codecs
import json
from typing import TYPE_CHECKING, Any

from fieri.errors import DecodeError
from fieri.pipeline.base import Decoder

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

DONE_SIGNAL = "[DONE]"


def _normalise_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


class SSEDecoder(Decoder):
    """Server-Sent Events (SSE) decoder.

    A frame is emitted only once its blank-line delimiter has arrived, so the
    way the body is split into network reads never changes the output.
    Multi-byte UTF-8 characters cut across reads are reassembled.

    Attributes:
        delimiter: Frame delimiter (default: "\\n\\n")
        done_signal: End of stream signal (default: "[DONE]")
    """

    def __init__(
        self,
        delimiter: str = "\n\n",
        done_signal: str = DONE_SIGNAL,
    ) -> None:
        self._delimiter = delimiter
        self._done_signal = done_signal

    async def decode(
        self, byte_stream: AsyncIterator[bytes]
    ) -> AsyncIterator[dict[str, Any]]:
        """Decode SSE byte stream into JSON frames.

        Args:
            byte_stream: Async iterator of raw bytes

        Yields:
            Parsed JSON objects, one per data frame

        Raises:
            DecodeError: On invalid UTF-8, a payload that is not a JSON
                object, or a body that ends before the done signal
        """
        utf8 = codecs.getincrementaldecoder("utf-8")()
        buffer = ""
        pending_cr = ""

        async for chunk in byte_stream:
            try:
                text = pending_cr + utf8.decode(chunk)
            except UnicodeDecodeError as e:
                raise DecodeError("stream is not valid UTF-8", cause=e) from e

            # A trailing CR may be the first half of a CRLF in the next read
            pending_cr = "\r" if text.endswith("\r") else ""
            if pending_cr:
                text = text[:-1]
            buffer += _normalise_newlines(text)

            while self._delimiter in buffer:
                frame, buffer = buffer.split(self._delimiter, 1)
                data = self._frame_data(frame)
                if data is None:
                    continue
                if data == self._done_signal:
                    return
                yield self._parse(data)

        try:
            tail = utf8.decode(b"", final=True)
        except UnicodeDecodeError as e:
            raise DecodeError("stream ended inside a UTF-8 sequence", cause=e) from e

        leftover = (buffer + _normalise_newlines(pending_cr + tail)).strip()
        # The done signal may arrive without its closing blank line
        if leftover and self._frame_data(leftover) == self._done_signal:
            return
        if leftover:
            raise DecodeError(
                "stream ended with an incomplete frame",
                payload=leftover,
            )
        raise DecodeError(f"stream ended without {self._done_signal}")

    @staticmethod
    def _frame_data(frame: str) -> str | None:
        """Join the ``data:`` lines of one frame, or None if it has none."""
        lines: list[str] = []
        for line in frame.split("\n"):
            # Comments and event/id/retry fields carry nothing we use
            if not line.startswith("data:"):
                continue
            value = line[5:]
            if value.startswith(" "):
                value = value[1:]
            lines.append(value)
        if not lines:
            return None
        return "\n".join(lines).strip()

    @staticmethod
    def _parse(data: str) -> dict[str, Any]:
        try:
            payload = json.loads(data)
        except json.JSONDecodeError as e:
            raise DecodeError(
                f"malformed stream frame: {e.msg}",
                payload=data,
                cause=e,
            ) from e
        if not isinstance(payload, dict):
            raise DecodeError("stream frame is not a JSON object", payload=data)
        return payload
