"""Root pytest fixtures for fieri tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import pytest

from fieri.config import ClientConfig

BASE_URL = "https://api.openai.com/v1/"

_ENV_VARS = (
    "OPENAI_API_KEY",
    "OPENAI_BASE_URL",
    "OPENAI_ORGANIZATION",
    "OPENAI_TIMEOUT_SECS",
    "FIERI_PROXY_URL",
    "FIERI_HTTP_TRUST_ENV",
    "FIERI_LOG_LEVEL",
    "FIERI_LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment out of every test."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config() -> ClientConfig:
    """Client configuration pointing at the default base URL."""
    return ClientConfig(api_key="sk-test-0123456789")


def encode_sse(*frames: dict[str, Any] | str, done: bool = True) -> bytes:
    """Encode frames as an event stream body, optionally ending with [DONE]."""
    lines = []
    for frame in frames:
        data = frame if isinstance(frame, str) else json.dumps(frame)
        lines.append(f"data: {data}\n\n")
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode()


@pytest.fixture
def sse() -> Callable[..., bytes]:
    """Build event stream bodies: ``sse({"delta": "Hel"}, done=False)``."""
    return encode_sse
