"""
Shell command set.

One command per endpoint plus the session commands. Commands receive the
running ``Shell`` through ``ctx.obj`` and execute their call on the
shell's event loop before returning.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import typer

from fieri.client import (
    ChatRequestBuilder,
    CompletionRequestBuilder,
    EditRequestBuilder,
    EmbeddingRequestBuilder,
    FileUploadRequestBuilder,
    FineTuneRequestBuilder,
    ImageEditRequestBuilder,
    ImageRequestBuilder,
    ImageVariationRequestBuilder,
    ModerationRequestBuilder,
)
from fieri.types import ChatMessage

if TYPE_CHECKING:
    from fieri.cli.shell import Shell
    from fieri.client import ChunkStream
    from fieri.types import StreamChunk

DEFAULT_COMPLETION_MODEL = "text-davinci-003"
DEFAULT_CHAT_MODEL = "gpt-3.5-turbo"
DEFAULT_EDIT_MODEL = "text-davinci-edit-001"
DEFAULT_EMBEDDING_MODEL = "text-embedding-ada-002"

repl = typer.Typer(
    name="fieri",
    add_completion=False,
    no_args_is_help=False,
    help="Commands available at the fieri> prompt.",
)


def _shell(ctx: typer.Context) -> Shell:
    from fieri.cli.shell import Shell

    shell = ctx.obj
    if not isinstance(shell, Shell):
        raise RuntimeError("shell not initialized")
    return shell


async def _print_stream(shell: Shell, stream: ChunkStream[StreamChunk]) -> str:
    """Print deltas as they arrive and return the joined text."""
    parts: list[str] = []
    try:
        async with stream:
            async for chunk in stream:
                shell.render.delta(chunk.delta)
                parts.append(chunk.delta)
    finally:
        shell.render.end_stream()
    return "".join(parts)


# ----------------------------------------------------------------------
# Models


@repl.command("models")
def models_command(ctx: typer.Context) -> None:
    """List available models."""
    shell = _shell(ctx)
    shell.render.models(shell.run(shell.client.list_models()))


@repl.command("model")
def model_command(ctx: typer.Context, model_id: str = typer.Argument(..., help="Model ID")) -> None:
    """Show one model."""
    shell = _shell(ctx)
    shell.render.json(shell.run(shell.client.retrieve_model(model_id)))


@repl.command("delete-model")
def delete_model_command(
    ctx: typer.Context, model_id: str = typer.Argument(..., help="Fine-tuned model ID")
) -> None:
    """Delete a fine-tuned model."""
    shell = _shell(ctx)
    result = shell.run(shell.client.delete_model(model_id))
    shell.render.text(f"{result.id}: {'deleted' if result.deleted else 'not deleted'}")


# ----------------------------------------------------------------------
# Text generation


@repl.command("complete")
def complete_command(
    ctx: typer.Context,
    prompt: str = typer.Argument(..., help="Prompt to complete"),
    model: str = typer.Option(DEFAULT_COMPLETION_MODEL, "--model", "-m", help="Model ID"),
    max_tokens: int | None = typer.Option(None, "--max-tokens", help="Maximum tokens"),
    temperature: float | None = typer.Option(None, "--temperature", "-t", help="0 to 2"),
    stream: bool = typer.Option(False, "--stream", help="Print text as it is generated"),
) -> None:
    """Complete a prompt."""
    shell = _shell(ctx)
    request = (
        CompletionRequestBuilder(model)
        .prompt(prompt)
        .max_tokens(max_tokens)
        .temperature(temperature)
        .build()
    )
    if stream:
        shell.run(_print_stream(shell, shell.client.complete_stream(request)))
        return
    shell.render.text(shell.run(shell.client.complete(request)).text)


@repl.command("chat")
def chat_command(
    ctx: typer.Context,
    message: str = typer.Argument(..., help="Your message"),
    model: str = typer.Option(DEFAULT_CHAT_MODEL, "--model", "-m", help="Model ID"),
    system: str | None = typer.Option(None, "--system", help="System instruction for this turn"),
    max_tokens: int | None = typer.Option(None, "--max-tokens", help="Maximum tokens"),
    temperature: float | None = typer.Option(None, "--temperature", "-t", help="0 to 2"),
    stream: bool = typer.Option(False, "--stream", help="Print the reply as it is generated"),
) -> None:
    """Chat, continuing the session conversation."""
    shell = _shell(ctx)
    user_message = ChatMessage.user(message)
    messages = [*shell.conversation, user_message]
    if system:
        messages.insert(0, ChatMessage.system(system))
    request = (
        ChatRequestBuilder(model, messages)
        .max_tokens(max_tokens)
        .temperature(temperature)
        .build()
    )
    if stream:
        reply = shell.run(_print_stream(shell, shell.client.chat_stream(request)))
        shell.conversation.extend([user_message, ChatMessage.assistant(reply)])
        return
    completion = shell.run(shell.client.chat(request))
    shell.conversation.extend([user_message, completion.to_message()])
    shell.render.text(completion.content)


@repl.command("edit")
def edit_command(
    ctx: typer.Context,
    text: str = typer.Argument(..., help="Text to edit"),
    instruction: str = typer.Option(..., "--instruction", "-i", help="How to edit the text"),
    model: str = typer.Option(DEFAULT_EDIT_MODEL, "--model", "-m", help="Model ID"),
) -> None:
    """Edit text following an instruction."""
    shell = _shell(ctx)
    request = EditRequestBuilder(model, instruction).input(text).build()
    shell.render.text(shell.run(shell.client.edit(request)).text)


# ----------------------------------------------------------------------
# Images


@repl.command("image")
def image_command(
    ctx: typer.Context,
    prompt: str = typer.Argument(..., help="Image description"),
    n: int | None = typer.Option(None, "--n", help="Number of images"),
    size: str | None = typer.Option(None, "--size", help="256x256, 512x512 or 1024x1024"),
) -> None:
    """Generate images."""
    shell = _shell(ctx)
    request = ImageRequestBuilder(prompt).n(n).size(size).build()
    shell.render.images(shell.run(shell.client.generate_image(request)))


@repl.command("image-edit")
def image_edit_command(
    ctx: typer.Context,
    image: Path = typer.Argument(..., help="Square PNG to edit"),
    prompt: str = typer.Argument(..., help="Description of the edited image"),
    mask: Path | None = typer.Option(None, "--mask", help="PNG mask"),
    n: int | None = typer.Option(None, "--n", help="Number of images"),
    size: str | None = typer.Option(None, "--size", help="256x256, 512x512 or 1024x1024"),
) -> None:
    """Edit an image."""
    shell = _shell(ctx)
    request = ImageEditRequestBuilder(image, prompt).mask(mask).n(n).size(size).build()
    shell.render.images(shell.run(shell.client.edit_image(request)))


@repl.command("image-variation")
def image_variation_command(
    ctx: typer.Context,
    image: Path = typer.Argument(..., help="Square PNG to vary"),
    n: int | None = typer.Option(None, "--n", help="Number of images"),
    size: str | None = typer.Option(None, "--size", help="256x256, 512x512 or 1024x1024"),
) -> None:
    """Create variations of an image."""
    shell = _shell(ctx)
    request = ImageVariationRequestBuilder(image).n(n).size(size).build()
    shell.render.images(shell.run(shell.client.create_image_variation(request)))


# ----------------------------------------------------------------------
# Embeddings and moderation


@repl.command("embed")
def embed_command(
    ctx: typer.Context,
    texts: list[str] = typer.Argument(..., help="Text(s) to embed"),
    model: str = typer.Option(DEFAULT_EMBEDDING_MODEL, "--model", "-m", help="Model ID"),
) -> None:
    """Embed one or more texts."""
    shell = _shell(ctx)
    value: str | list[str] = texts[0] if len(texts) == 1 else list(texts)
    request = EmbeddingRequestBuilder(model, value).build()
    shell.render.embeddings(shell.run(shell.client.embed(request)))


@repl.command("moderate")
def moderate_command(
    ctx: typer.Context,
    text: str = typer.Argument(..., help="Text to classify"),
) -> None:
    """Classify text against the content policy."""
    shell = _shell(ctx)
    request = ModerationRequestBuilder(text).build()
    shell.render.moderation(shell.run(shell.client.moderate(request)))


# ----------------------------------------------------------------------
# Files


@repl.command("files")
def files_command(ctx: typer.Context) -> None:
    """List uploaded files."""
    shell = _shell(ctx)
    shell.render.files(shell.run(shell.client.list_files()))


@repl.command("file")
def file_command(ctx: typer.Context, file_id: str = typer.Argument(..., help="File ID")) -> None:
    """Show one uploaded file."""
    shell = _shell(ctx)
    shell.render.json(shell.run(shell.client.retrieve_file(file_id)))


@repl.command("upload")
def upload_command(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="Local file to upload"),
    purpose: str = typer.Option("fine-tune", "--purpose", help="Intended use"),
) -> None:
    """Upload a file."""
    shell = _shell(ctx)
    request = FileUploadRequestBuilder(path, purpose).build()
    uploaded = shell.run(shell.client.upload_file(request))
    shell.render.text(f"uploaded {uploaded.filename or path.name} as {uploaded.id}")


@repl.command("delete-file")
def delete_file_command(
    ctx: typer.Context, file_id: str = typer.Argument(..., help="File ID")
) -> None:
    """Delete an uploaded file."""
    shell = _shell(ctx)
    result = shell.run(shell.client.delete_file(file_id))
    shell.render.text(f"{result.id}: {'deleted' if result.deleted else 'not deleted'}")


@repl.command("file-content")
def file_content_command(
    ctx: typer.Context,
    file_id: str = typer.Argument(..., help="File ID"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write to this path"),
) -> None:
    """Print (or save) the content of an uploaded file."""
    shell = _shell(ctx)
    content = shell.run(shell.client.retrieve_file_content(file_id))
    if output is None:
        shell.render.text(content.decode("utf-8", errors="replace"))
        return
    try:
        output.write_bytes(content)
    except OSError as e:
        raise typer.BadParameter(f"cannot write {output}: {e.strerror or e}") from e
    shell.render.text(f"wrote {len(content)} bytes to {output}")


# ----------------------------------------------------------------------
# Fine-tunes


@repl.command("fine-tune")
def fine_tune_command(
    ctx: typer.Context,
    training_file: str = typer.Argument(..., help="ID of an uploaded training file"),
    model: str | None = typer.Option(None, "--model", "-m", help="Base model"),
    validation_file: str | None = typer.Option(None, "--validation-file", help="Validation file ID"),
    n_epochs: int | None = typer.Option(None, "--n-epochs", help="Training epochs"),
    suffix: str | None = typer.Option(None, "--suffix", help="Up to 40 characters"),
) -> None:
    """Start a fine-tune job."""
    shell = _shell(ctx)
    request = (
        FineTuneRequestBuilder(training_file)
        .model(model)
        .validation_file(validation_file)
        .n_epochs(n_epochs)
        .suffix(suffix)
        .build()
    )
    shell.render.fine_tune(shell.run(shell.client.create_fine_tune(request)))


@repl.command("fine-tunes")
def fine_tunes_command(ctx: typer.Context) -> None:
    """List fine-tune jobs."""
    shell = _shell(ctx)
    shell.render.fine_tunes(shell.run(shell.client.list_fine_tunes()))


@repl.command("fine-tune-status")
def fine_tune_status_command(
    ctx: typer.Context, fine_tune_id: str = typer.Argument(..., help="Fine-tune ID")
) -> None:
    """Show the status of a fine-tune job."""
    shell = _shell(ctx)
    shell.render.fine_tune(shell.run(shell.client.retrieve_fine_tune(fine_tune_id)))


@repl.command("cancel-fine-tune")
def cancel_fine_tune_command(
    ctx: typer.Context, fine_tune_id: str = typer.Argument(..., help="Fine-tune ID")
) -> None:
    """Cancel a fine-tune job."""
    shell = _shell(ctx)
    shell.render.fine_tune(shell.run(shell.client.cancel_fine_tune(fine_tune_id)))


@repl.command("fine-tune-events")
def fine_tune_events_command(
    ctx: typer.Context,
    fine_tune_id: str = typer.Argument(..., help="Fine-tune ID"),
    stream: bool = typer.Option(False, "--stream", help="Follow new events"),
) -> None:
    """Show the events of a fine-tune job."""
    shell = _shell(ctx)
    if not stream:
        shell.render.events(shell.run(shell.client.list_fine_tune_events(fine_tune_id)))
        return

    async def follow() -> None:
        async with shell.client.fine_tune_events_stream(fine_tune_id) as events:
            async for event in events:
                shell.render.event(event)

    shell.run(follow())


# ----------------------------------------------------------------------
# Session


@repl.command("history")
def history_command(ctx: typer.Context) -> None:
    """Show the lines entered in this session."""
    shell = _shell(ctx)
    for number, line in enumerate(shell.history.entries, start=1):
        shell.render.text(f"{number:4d}  {line}")


@repl.command("reset")
def reset_command(ctx: typer.Context) -> None:
    """Forget the chat conversation."""
    shell = _shell(ctx)
    shell.conversation.clear()
    shell.render.info("conversation cleared")


@repl.command("help")
def help_command(ctx: typer.Context) -> None:
    """Show the available commands."""
    shell = _shell(ctx)
    shell.render.text(ctx.find_root().get_help())


@repl.command("exit")
def exit_command(ctx: typer.Context) -> None:
    """Leave the shell."""
    _shell(ctx).running = False


@repl.command("quit")
def quit_command(ctx: typer.Context) -> None:
    """Leave the shell."""
    _shell(ctx).running = False
