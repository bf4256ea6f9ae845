"""Fixtures for shell and command-line tests."""

from __future__ import annotations

import io
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from rich.console import Console
from typer.testing import CliRunner, Result

from fieri import Client
from fieri.cli import Shell, app
from fieri.cli.history import History
from fieri.cli.render import Renderer
from fieri.config import ClientConfig
from fieri.telemetry import FieriLogger

API_KEY = "sk-test-0123456789"


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """The entry point binds log output to the runner's stderr."""
    yield
    FieriLogger.configure()


@pytest.fixture
def invoke(tmp_path: Path) -> Callable[..., Result]:
    """Run the ``fieri`` entry point with a private history file."""
    runner = CliRunner()

    def _invoke(*args: str, input: str | None = None, api_key: str | None = API_KEY) -> Result:
        env = {"OPENAI_API_KEY": api_key}
        return runner.invoke(
            app,
            ["--history-file", str(tmp_path / "history"), *args],
            input=input,
            env=env,
        )

    return _invoke


class Captured:
    """Shell wired to in-memory consoles."""

    def __init__(self, config: ClientConfig) -> None:
        self.config = config
        self.out = io.StringIO()
        self.err = io.StringIO()
        self.clients: list[Client] = []
        renderer = Renderer(
            Console(file=self.out, width=120, highlight=False),
            Console(file=self.err, width=120, highlight=False),
        )
        self.shell = Shell(self._make_client, history=History(None), renderer=renderer)

    def _make_client(self) -> Client:
        client = Client(self.config)
        self.clients.append(client)
        return client


@pytest.fixture
def captured(config: ClientConfig) -> Iterator[Captured]:
    result = Captured(config)
    yield result
    result.shell.close()
