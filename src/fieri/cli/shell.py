"""
Interactive shell.

Reads one line at a time, splits it like a POSIX shell, and dispatches it
through the command group in ``fieri.cli.commands``. All commands share
one event loop and one client, so connections are reused between lines.
"""

from __future__ import annotations

import asyncio
import shlex
from typing import TYPE_CHECKING, Any, TypeVar

import typer

from fieri.cli.commands import repl
from fieri.cli.history import History
from fieri.cli.render import Renderer
from fieri.errors import FieriError
from fieri.telemetry import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable, Coroutine

    from fieri.client import Client
    from fieri.types import ChatMessage

T = TypeVar("T")

PROMPT = "fieri> "

# Ctrl-C inside a command surfaces as this exit code instead of an exception
INTERRUPTED_EXIT_CODE = 130

logger = get_logger("fieri.cli")


class Shell:
    """Read-eval-print loop over the client.

    Attributes:
        history: Lines entered so far
        render: Output renderer
        conversation: Chat messages exchanged by the ``chat`` command
        running: Cleared by ``exit``/``quit``
    """

    def __init__(
        self,
        client_factory: Callable[[], Client],
        *,
        history: History | None = None,
        renderer: Renderer | None = None,
    ) -> None:
        """Initialize the shell.

        Args:
            client_factory: Creates the client on first use, so commands
                that need no network work without a credential
            history: Session history (in-memory only when omitted)
            renderer: Output renderer
        """
        self._client_factory = client_factory
        self._client: Client | None = None
        self._runner = asyncio.Runner()
        self._group = typer.main.get_command(repl)
        self.history = history or History(None)
        self.render = renderer or Renderer()
        self.conversation: list[ChatMessage] = []
        self.running = True

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    def run(self, coro: Coroutine[Any, Any, T]) -> T:
        """Run a coroutine to completion on the shell's event loop."""
        return self._runner.run(coro)

    def execute(self, line: str) -> bool:
        """Execute one input line.

        Returns:
            True if the command succeeded
        """
        try:
            args = shlex.split(line)
        except ValueError as e:
            self.render.usage_error(str(e))
            return False
        if not args:
            return True
        return self.execute_args(args)

    def execute_args(self, args: list[str]) -> bool:
        """Execute one already split command.

        Every failure is rendered; none of them ends the shell.

        Returns:
            True if the command succeeded
        """
        logger.debug("executing command", command=args[0])
        try:
            code = self._group.main(
                args=list(args),
                prog_name="fieri",
                obj=self,
                standalone_mode=False,
            )
        except FieriError as e:
            self.render.error(e)
            return False
        except typer.Abort:
            self.render.end_stream()
            self.render.info("interrupted")
            return False
        except typer.TyperException as e:
            self.render.usage_error(e.format_message())
            return False
        if code == INTERRUPTED_EXIT_CODE:
            self.render.end_stream()
            self.render.info("interrupted")
            return False
        return not code

    def loop(self) -> int:
        """Prompt for commands until ``exit``, ``quit`` or end of input.

        Returns:
            Process exit code
        """
        self.history.load()
        self.render.info("fieri shell. Type 'help' for commands, 'exit' to leave.")
        while self.running:
            try:
                line = input(PROMPT)
            except EOFError:
                self.render.text("")
                break
            except KeyboardInterrupt:
                self.render.text("")
                continue
            if not line.strip():
                continue
            self.history.add(line)
            self.execute(line)
        return 0

    def close(self) -> None:
        """Close the client and the event loop."""
        try:
            if self._client is not None:
                self._runner.run(self._client.close())
        finally:
            self._client = None
            self._runner.close()

    def __enter__(self) -> Shell:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
