"""Fixtures for client tests against a mocked service."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest_asyncio

from fieri import Client
from fieri.config import ClientConfig


@pytest_asyncio.fixture
async def client(config: ClientConfig) -> AsyncIterator[Client]:
    """Client whose requests are answered by ``httpx_mock``."""
    async with Client(config) as client:
        yield client
