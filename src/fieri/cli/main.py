"""fieri command-line entry point implemented with Typer."""

from __future__ import annotations

from pathlib import Path

import typer

from fieri.cli.history import DEFAULT_HISTORY_FILE, History
from fieri.cli.shell import Shell
from fieri.client import Client
from fieri.config import API_KEY_ENV, BASE_URL_ENV, ORGANIZATION_ENV, ClientConfig
from fieri.telemetry import FieriLogger

SUCCESS_EXIT_CODE = 0
FAILURE_EXIT_CODE = 1

app = typer.Typer(add_completion=False, help="Client and interactive shell for the OpenAI API")


@app.command(
    context_settings={
        "allow_extra_args": True,
        "ignore_unknown_options": True,
        "allow_interspersed_args": False,
    }
)
def main(
    api_key: str | None = typer.Option(
        None, "--api-key", envvar=API_KEY_ENV, show_envvar=True, help="API key"
    ),
    base_url: str | None = typer.Option(
        None, "--base-url", envvar=BASE_URL_ENV, help="Service root URL"
    ),
    organization: str | None = typer.Option(
        None, "--organization", envvar=ORGANIZATION_ENV, help="Organization ID"
    ),
    timeout: float | None = typer.Option(
        None, "--timeout", min=0.001, help="Per-call timeout in seconds"
    ),
    history_file: Path = typer.Option(
        DEFAULT_HISTORY_FILE, "--history-file", help="Where shell history is kept"
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="debug, info, warning or error"
    ),
    command: list[str] | None = typer.Argument(
        None, help="Run this shell command and exit instead of starting the shell"
    ),
) -> None:
    """Start the fieri shell, or run a single shell command."""
    try:
        FieriLogger.configure_from_env(log_level)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--log-level") from e

    def client_factory() -> Client:
        return Client(
            ClientConfig.from_env(
                api_key=api_key,
                base_url=base_url,
                organization=organization,
                timeout=timeout,
            )
        )

    with Shell(client_factory, history=History(history_file)) as shell:
        if command:
            ok = shell.execute_args(command)
            raise typer.Exit(code=SUCCESS_EXIT_CODE if ok else FAILURE_EXIT_CODE)
        raise typer.Exit(code=shell.loop())


def run() -> None:
    """Console script entry point."""
    app()
