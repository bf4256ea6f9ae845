"""
Terminal rendering for shell results (rich).

Lists become tables, text results are printed plain, and streamed deltas
are written as they arrive without line breaks in between.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table
from rich.text import Text

from fieri.errors import FieriError

if TYPE_CHECKING:
    from pydantic import BaseModel

    from fieri.types import (
        DataList,
        EmbeddingResponse,
        File,
        FineTune,
        FineTuneEvent,
        ImageResponse,
        Model,
        Moderation,
    )


def _timestamp(value: int | None) -> str:
    if value is None:
        return "-"
    return datetime.fromtimestamp(value, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


class Renderer:
    """Prints results and errors for the shell."""

    def __init__(self, console: Console | None = None, error_console: Console | None = None) -> None:
        self.console = console or Console(highlight=False)
        self.error_console = error_console or Console(stderr=True, highlight=False)
        self._mid_stream = False

    # Plain output

    def text(self, value: str) -> None:
        self.console.print(Text(value))

    def info(self, value: str) -> None:
        self.console.print(Text(value, style="dim"))

    def error(self, exc: FieriError) -> None:
        """Render a library error as ``<kind> error: <message>``."""
        self.end_stream()
        self.error_console.print(Text(f"{exc.kind.value} error: {exc.message}", style="red"))
        if exc.context.hint:
            self.error_console.print(Text(f"hint: {exc.context.hint}", style="dim"))

    def usage_error(self, message: str) -> None:
        self.end_stream()
        self.error_console.print(Text(f"usage error: {message}", style="red"))

    def delta(self, value: str) -> None:
        """Write one streamed fragment."""
        if value:
            self.console.print(Text(value), end="", soft_wrap=True)
            self._mid_stream = True

    def end_stream(self) -> None:
        """Terminate a streamed line, if one is open."""
        if self._mid_stream:
            self.console.print()
            self._mid_stream = False

    def json(self, obj: BaseModel) -> None:
        """Print any response object as indented JSON."""
        self.console.print_json(obj.model_dump_json(exclude_none=True, by_alias=True))

    # Tables

    def models(self, models: DataList[Model]) -> None:
        table = Table(title="Models")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Owner")
        table.add_column("Created")
        for model in sorted(models.data, key=lambda m: m.id):
            table.add_row(model.id, model.owned_by or "-", _timestamp(model.created))
        self.console.print(table)

    def files(self, files: DataList[File]) -> None:
        table = Table(title="Files")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Filename")
        table.add_column("Purpose")
        table.add_column("Bytes", justify="right")
        table.add_column("Created")
        for item in files.data:
            table.add_row(
                item.id,
                item.filename or "-",
                item.purpose or "-",
                str(item.bytes) if item.bytes is not None else "-",
                _timestamp(item.created_at),
            )
        self.console.print(table)

    def fine_tunes(self, fine_tunes: DataList[FineTune]) -> None:
        table = Table(title="Fine-tunes")
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Status")
        table.add_column("Model")
        table.add_column("Fine-tuned model")
        for job in fine_tunes.data:
            table.add_row(job.id, job.status, job.model or "-", job.fine_tuned_model or "-")
        self.console.print(table)

    def fine_tune(self, job: FineTune) -> None:
        self.text(f"{job.id}: {job.status}")
        if job.fine_tuned_model:
            self.text(f"fine-tuned model: {job.fine_tuned_model}")

    def event(self, event: FineTuneEvent) -> None:
        self.text(f"[{_timestamp(event.created_at)}] {event.message}")

    def events(self, events: DataList[FineTuneEvent]) -> None:
        for event in events.data:
            self.event(event)

    def images(self, images: ImageResponse) -> None:
        for item in images.data:
            if item.url:
                self.text(item.url)
            elif item.b64_json:
                self.info(f"<base64 image, {len(item.b64_json)} chars>")

    def embeddings(self, response: EmbeddingResponse) -> None:
        for item in response.data:
            head = ", ".join(f"{x:.4f}" for x in item.embedding[:4])
            self.text(f"[{item.index}] {item.dimensions} dimensions: [{head}, ...]")

    def moderation(self, moderation: Moderation) -> None:
        for result in moderation.results:
            table = Table(title="flagged" if result.flagged else "not flagged")
            table.add_column("Category")
            table.add_column("Flagged")
            table.add_column("Score", justify="right")
            flags = result.categories.model_dump(by_alias=True)
            scores = result.category_scores.model_dump(by_alias=True)
            for name, flagged in flags.items():
                score = scores.get(name)
                table.add_row(
                    name,
                    "yes" if flagged else "no",
                    f"{score:.6f}" if isinstance(score, float) else "-",
                )
            self.console.print(table)
