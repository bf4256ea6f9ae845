"""
Pipeline layer - response and stream decoding.

- SSEDecoder: parses an event stream body into JSON frames
- Pipeline: maps frames to typed chunks, raising service errors
- decode_response / decode_content: complete (non-streamed) responses
"""

from fieri.pipeline.base import Decoder, Pipeline
from fieri.pipeline.decode import DONE_SIGNAL, SSEDecoder
from fieri.pipeline.response import (
    decode_content,
    decode_response,
    raise_for_error_frame,
    raise_for_status,
    raise_for_stream_status,
)

__all__ = [
    "DONE_SIGNAL",
    "Decoder",
    "Pipeline",
    "SSEDecoder",
    "decode_content",
    "decode_response",
    "raise_for_error_frame",
    "raise_for_status",
    "raise_for_stream_status",
]
