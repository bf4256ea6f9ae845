"""Tests for the interactive shell and the ``fieri`` entry point."""

import json
import shlex

import httpx
import pytest
from pytest_httpx import HTTPXMock

from fieri import Client
from fieri.config import ClientConfig

API = "https://api.openai.com/v1"

MODELS = {
    "object": "list",
    "data": [
        {"id": "gpt-3.5-turbo", "object": "model", "owned_by": "openai"},
        {"id": "text-davinci-003", "object": "model", "owned_by": "openai-internal"},
    ],
}


def _chat_reply(content: str) -> dict:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}
        ],
    }


def _sent_messages(request) -> list[dict]:
    return json.loads(request.read())["messages"]


class TestSingleCommand:
    """``fieri <command>`` runs one command and exits."""

    def test_success(self, httpx_mock: HTTPXMock, invoke) -> None:
        httpx_mock.add_response(url=f"{API}/models", json=MODELS)
        result = invoke("models")
        assert result.exit_code == 0
        assert "gpt-3.5-turbo" in result.output
        assert "text-davinci-003" in result.output

    def test_api_error(self, httpx_mock: HTTPXMock, invoke) -> None:
        httpx_mock.add_response(
            url=f"{API}/models",
            status_code=401,
            json={"error": {"message": "Incorrect API key provided", "type": "invalid_request_error"}},
        )
        result = invoke("models")
        assert result.exit_code == 1
        assert "api error: Incorrect API key provided" in result.output

    def test_missing_api_key(self, httpx_mock: HTTPXMock, invoke) -> None:
        result = invoke("models", api_key=None)
        assert result.exit_code == 1
        assert "validation error: invalid 'api_key': missing credential" in result.output
        assert "hint: pass api_key or set OPENAI_API_KEY" in result.output
        assert httpx_mock.get_requests() == []

    def test_invalid_temperature(self, httpx_mock: HTTPXMock, invoke) -> None:
        result = invoke("chat", "hi", "--temperature", "3")
        assert result.exit_code == 1
        assert "validation error: invalid 'temperature': out of range" in result.output
        assert httpx_mock.get_requests() == []

    def test_unknown_command(self, invoke) -> None:
        result = invoke("frobnicate")
        assert result.exit_code == 1
        assert "usage error: No such command 'frobnicate'" in result.output

    def test_missing_argument(self, invoke) -> None:
        result = invoke("model")
        assert result.exit_code == 1
        assert "usage error:" in result.output

    def test_transport_error(self, httpx_mock: HTTPXMock, invoke) -> None:
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))
        result = invoke("models")
        assert result.exit_code == 1
        assert "transport error: Connection failed" in result.output

    def test_streamed_chat(self, httpx_mock: HTTPXMock, invoke, sse) -> None:
        httpx_mock.add_response(
            url=f"{API}/chat/completions",
            content=sse({"delta": "Hel"}, {"delta": "lo"}),
        )
        result = invoke("chat", "Say hello", "--stream")
        assert result.exit_code == 0
        assert "Hello\n" in result.output

    def test_streamed_completion_cut_short(self, httpx_mock: HTTPXMock, invoke, sse) -> None:
        httpx_mock.add_response(url=f"{API}/completions", content=sse({"delta": "Hel"}, done=False))
        result = invoke("complete", "Say hello", "--stream")
        assert result.exit_code == 1
        assert "Hel" in result.output
        assert "decode error: stream ended without [DONE]" in result.output

    def test_help(self, invoke) -> None:
        result = invoke("help")
        assert result.exit_code == 0
        for name in ("models", "chat", "exit"):
            assert name in result.output

    def test_bad_log_level(self, invoke) -> None:
        result = invoke("--log-level", "loud", "models")
        assert result.exit_code == 2


class TestInteractiveSession:
    """``fieri`` without a command reads commands from the prompt."""

    def test_models_then_exit(self, httpx_mock: HTTPXMock, invoke) -> None:
        httpx_mock.add_response(url=f"{API}/models", json=MODELS)
        result = invoke(input="models\nexit\n")
        assert result.exit_code == 0
        assert "fieri> " in result.output
        assert "gpt-3.5-turbo" in result.output

    def test_end_of_input_exits(self, invoke) -> None:
        result = invoke(input="")
        assert result.exit_code == 0

    def test_errors_do_not_end_the_session(self, httpx_mock: HTTPXMock, invoke) -> None:
        httpx_mock.add_response(url=f"{API}/models", json=MODELS)
        result = invoke(input='frobnicate\nchat "unbalanced\nmodels\nquit\n')
        assert result.exit_code == 0
        assert "usage error: No such command 'frobnicate'" in result.output
        assert "usage error: No closing quotation" in result.output
        assert "gpt-3.5-turbo" in result.output

    def test_commands_after_exit_are_ignored(self, httpx_mock: HTTPXMock, invoke) -> None:
        result = invoke(input="exit\nmodels\n")
        assert result.exit_code == 0
        assert httpx_mock.get_requests() == []

    def test_chat_keeps_conversation(self, httpx_mock: HTTPXMock, invoke) -> None:
        httpx_mock.add_response(url=f"{API}/chat/completions", json=_chat_reply("Hi Ada."))
        httpx_mock.add_response(url=f"{API}/chat/completions", json=_chat_reply("You are Ada."))
        httpx_mock.add_response(url=f"{API}/chat/completions", json=_chat_reply("I don't know."))

        result = invoke(
            input='chat "My name is Ada"\nchat "What is my name?"\nreset\nchat "What is my name?"\n'
        )

        assert result.exit_code == 0
        assert "You are Ada." in result.output
        assert "conversation cleared" in result.output
        first, second, third = httpx_mock.get_requests()
        assert len(_sent_messages(first)) == 1
        assert _sent_messages(second) == [
            {"role": "user", "content": "My name is Ada"},
            {"role": "assistant", "content": "Hi Ada."},
            {"role": "user", "content": "What is my name?"},
        ]
        assert _sent_messages(third) == [{"role": "user", "content": "What is my name?"}]

    def test_failed_chat_is_not_remembered(self, httpx_mock: HTTPXMock, invoke) -> None:
        httpx_mock.add_response(
            url=f"{API}/chat/completions",
            status_code=500,
            json={"error": {"message": "The server had an error", "type": "server_error"}},
        )
        httpx_mock.add_response(url=f"{API}/chat/completions", json=_chat_reply("Hello."))

        result = invoke(input="chat one\nchat two\n")

        assert "api error: The server had an error" in result.output
        _, second = httpx_mock.get_requests()
        assert _sent_messages(second) == [{"role": "user", "content": "two"}]

    def test_history(self, invoke) -> None:
        result = invoke(input="reset\nhistory\n")
        assert "1  reset" in result.output
        assert "2  history" in result.output

    def test_history_file_persists(self, invoke, tmp_path) -> None:
        pytest.importorskip("readline")
        invoke(input="reset\n")
        assert "reset" in (tmp_path / "history").read_text()


class TestShell:
    """Tests for Shell driven directly."""

    def test_client_created_on_first_use(self, captured) -> None:
        assert captured.shell.execute("history")
        assert captured.shell.execute("reset")
        assert captured.clients == []

    def test_blank_line(self, captured) -> None:
        assert captured.shell.execute("   ")

    def test_exit_stops_loop(self, captured) -> None:
        assert captured.shell.running
        captured.shell.execute("exit")
        assert not captured.shell.running

    def test_client_reused_between_commands(self, httpx_mock: HTTPXMock, captured) -> None:
        httpx_mock.add_response(url=f"{API}/models", json=MODELS)
        httpx_mock.add_response(url=f"{API}/files", json={"object": "list", "data": []})

        assert captured.shell.execute("models")
        assert captured.shell.execute("files")
        assert len(captured.clients) == 1

    def test_error_output(self, httpx_mock: HTTPXMock, captured) -> None:
        httpx_mock.add_response(
            url=f"{API}/models/nope",
            status_code=404,
            json={"error": {"message": "no such model"}},
        )
        assert not captured.shell.execute("model nope")
        assert captured.err.getvalue().strip() == "api error: no such model"
        assert captured.out.getvalue() == ""

    def test_unknown_command_keeps_running(self, captured) -> None:
        assert not captured.shell.execute("frobnicate")
        assert "usage error: No such command 'frobnicate'" in captured.err.getvalue()
        assert captured.shell.running

    def test_missing_argument_keeps_running(self, captured) -> None:
        assert not captured.shell.execute("model")
        assert "usage error: Missing argument" in captured.err.getvalue()
        assert captured.shell.running
        assert captured.clients == []

    def test_interrupted_command(self, captured, monkeypatch: pytest.MonkeyPatch) -> None:
        def interrupt(coro):
            coro.close()
            raise KeyboardInterrupt

        monkeypatch.setattr(captured.shell, "run", interrupt)
        assert not captured.shell.execute("models")
        assert "interrupted" in captured.out.getvalue()
        assert captured.shell.running

    def test_error_hint(self, captured) -> None:
        captured.shell._client_factory = lambda: Client(ClientConfig.from_env())
        assert not captured.shell.execute("models")
        lines = captured.err.getvalue().splitlines()
        assert lines == [
            "validation error: invalid 'api_key': missing credential",
            "hint: pass api_key or set OPENAI_API_KEY",
        ]

    def test_embed(self, httpx_mock: HTTPXMock, captured) -> None:
        httpx_mock.add_response(
            url=f"{API}/embeddings",
            json={"data": [{"index": 0, "embedding": [0.5, 0.25, 0.125]}]},
        )
        assert captured.shell.execute("embed 'The food was delicious'")
        assert "3 dimensions" in captured.out.getvalue()
        assert json.loads(httpx_mock.get_request().read())["input"] == "The food was delicious"

    def test_upload(self, httpx_mock: HTTPXMock, captured, tmp_path) -> None:
        data = tmp_path / "train.jsonl"
        data.write_text('{"prompt": "a", "completion": "b"}\n')
        httpx_mock.add_response(
            url=f"{API}/files",
            method="POST",
            json={"id": "file-abc", "object": "file", "filename": "train.jsonl", "purpose": "fine-tune"},
        )
        assert captured.shell.execute(f"upload {shlex.quote(str(data))}")
        assert "uploaded train.jsonl as file-abc" in captured.out.getvalue()

    def test_upload_missing_file(self, httpx_mock: HTTPXMock, captured, tmp_path) -> None:
        assert not captured.shell.execute(f"upload {shlex.quote(str(tmp_path / 'missing.jsonl'))}")
        assert "validation error" in captured.err.getvalue()
        assert "cannot read file" in captured.err.getvalue()

    def test_file_content_to_disk(self, httpx_mock: HTTPXMock, captured, tmp_path) -> None:
        httpx_mock.add_response(url=f"{API}/files/file-abc/content", content=b"line\n")
        target = tmp_path / "out.jsonl"
        assert captured.shell.execute(f"file-content file-abc -o {shlex.quote(str(target))}")
        assert target.read_bytes() == b"line\n"

    def test_fine_tune_events_stream(self, httpx_mock: HTTPXMock, captured, sse) -> None:
        httpx_mock.add_response(
            url=f"{API}/fine-tunes/ft-1/events?stream=true",
            content=sse(
                {"object": "fine-tune-event", "created_at": 0, "message": "Job enqueued"},
                {"object": "fine-tune-event", "created_at": 60, "message": "Job started"},
            ),
        )
        assert captured.shell.execute("fine-tune-events ft-1 --stream")
        out = captured.out.getvalue()
        assert "[1970-01-01 00:00:00] Job enqueued" in out
        assert "[1970-01-01 00:01:00] Job started" in out
