"""Request/response tests for every client endpoint."""

import json

import pytest
from pytest_httpx import HTTPXMock

from fieri import Client
from fieri.client import ChatRequestBuilder
from fieri.errors import ApiError, DecodeError, ErrorClass, ValidationError
from fieri.types import (
    ChatMessage,
    CompletionRequest,
    EditRequest,
    EmbeddingRequest,
    FileUploadRequest,
    FineTuneRequest,
    ImageEditRequest,
    ImageRequest,
    ImageVariationRequest,
    ModerationRequest,
    Upload,
)

API = "https://api.openai.com/v1"
PNG = Upload(filename="otter.png", content=b"\x89PNG\r\n", content_type="image/png")

FINE_TUNE = {
    "id": "ft-AF1WoRqd3aJAHsqc9NY7iL8F",
    "object": "fine-tune",
    "model": "curie",
    "created_at": 1614807352,
    "events": [],
    "fine_tuned_model": None,
    "hyperparams": {"n_epochs": 4},
    "status": "pending",
}


def _sent_json(httpx_mock: HTTPXMock) -> dict:
    return json.loads(httpx_mock.get_request().read())


class TestModels:
    @pytest.mark.asyncio
    async def test_list_models(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(
            url=f"{API}/models",
            method="GET",
            json={
                "object": "list",
                "data": [
                    {"id": "davinci", "object": "model", "owned_by": "openai"},
                    {"id": "gpt-3.5-turbo", "object": "model", "owned_by": "openai"},
                ],
            },
        )
        models = await client.list_models()
        assert [m.id for m in models.data] == ["davinci", "gpt-3.5-turbo"]

    @pytest.mark.asyncio
    async def test_retrieve_model(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(
            url=f"{API}/models/text-davinci-003",
            json={"id": "text-davinci-003", "object": "model", "owned_by": "openai-internal"},
        )
        model = await client.retrieve_model("text-davinci-003")
        assert model.owned_by == "openai-internal"

    @pytest.mark.asyncio
    async def test_identifier_is_quoted(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(
            url=f"{API}/models/curie%3Aft-acme%3Asuffix-2023",
            method="DELETE",
            json={"id": "curie:ft-acme:suffix-2023", "object": "model", "deleted": True},
        )
        deleted = await client.delete_model("curie:ft-acme:suffix-2023")
        assert deleted.deleted

    @pytest.mark.asyncio
    async def test_empty_identifier(self, httpx_mock: HTTPXMock, client: Client) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await client.retrieve_model(" ")
        assert exc_info.value.field == "model"
        assert httpx_mock.get_requests() == []

    @pytest.mark.asyncio
    async def test_unknown_model(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(
            url=f"{API}/models/nope",
            status_code=404,
            json={
                "error": {
                    "message": "The model 'nope' does not exist",
                    "type": "invalid_request_error",
                    "param": "model",
                    "code": "model_not_found",
                }
            },
        )
        with pytest.raises(ApiError) as exc_info:
            await client.retrieve_model("nope")
        assert exc_info.value.status_code == 404
        assert exc_info.value.code == "model_not_found"
        assert exc_info.value.param == "model"
        assert exc_info.value.error_class is ErrorClass.NOT_FOUND


class TestTextGeneration:
    @pytest.mark.asyncio
    async def test_complete(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(
            url=f"{API}/completions",
            method="POST",
            json={
                "id": "cmpl-uqkvlQyYK7bGYrRHQ0eXlWi7",
                "object": "text_completion",
                "created": 1589478378,
                "model": "text-davinci-003",
                "choices": [
                    {"text": "\n\nThis is indeed a test", "index": 0, "finish_reason": "length"}
                ],
                "usage": {"prompt_tokens": 5, "completion_tokens": 7, "total_tokens": 12},
            },
        )
        completion = await client.complete(
            CompletionRequest(model="text-davinci-003", prompt="Say this is a test", max_tokens=7)
        )
        assert completion.text == "\n\nThis is indeed a test"
        assert completion.usage.total_tokens == 12
        assert _sent_json(httpx_mock) == {
            "model": "text-davinci-003",
            "prompt": "Say this is a test",
            "max_tokens": 7,
        }

    @pytest.mark.asyncio
    async def test_chat(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(
            url=f"{API}/chat/completions",
            method="POST",
            json={
                "id": "chatcmpl-123",
                "object": "chat.completion",
                "created": 1677652288,
                "choices": [
                    {
                        "index": 0,
                        "message": {"role": "assistant", "content": "Hello there!"},
                        "finish_reason": "stop",
                    }
                ],
            },
        )
        request = ChatRequestBuilder("gpt-3.5-turbo").user("Hello!").build()
        completion = await client.chat(request)

        assert completion.content == "Hello there!"
        assert completion.finish_reason == "stop"
        assert completion.to_message() == ChatMessage.assistant("Hello there!")
        assert _sent_json(httpx_mock)["messages"] == [{"role": "user", "content": "Hello!"}]

    @pytest.mark.asyncio
    async def test_edit(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(
            url=f"{API}/edits",
            method="POST",
            json={
                "object": "edit",
                "created": 1589478378,
                "choices": [{"text": "What day of the week is it?", "index": 0}],
            },
        )
        edit = await client.edit(
            EditRequest(
                model="text-davinci-edit-001",
                input="What day of the wek is it?",
                instruction="Fix the spelling mistakes",
            )
        )
        assert edit.text == "What day of the week is it?"

    @pytest.mark.asyncio
    async def test_invalid_request_sends_nothing(
        self, httpx_mock: HTTPXMock, client: Client
    ) -> None:
        with pytest.raises(ValidationError):
            await client.chat(
                ChatRequestBuilder("gpt-3.5-turbo").user("hi").temperature(3.0).build()
            )
        assert httpx_mock.get_requests() == []

    @pytest.mark.asyncio
    async def test_body_not_json(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(url=f"{API}/completions", text="<html>ok</html>")
        with pytest.raises(DecodeError, match="not valid JSON"):
            await client.complete(CompletionRequest(model="ada"))

    @pytest.mark.asyncio
    async def test_body_schema_mismatch(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(url=f"{API}/completions", json={"id": "cmpl-1"})
        with pytest.raises(DecodeError) as exc_info:
            await client.complete(CompletionRequest(model="ada"))
        assert exc_info.value.field_path == "choices"

    @pytest.mark.asyncio
    async def test_rate_limited(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(
            url=f"{API}/completions",
            status_code=429,
            headers={"retry-after": "7"},
            json={
                "error": {
                    "message": "Rate limit reached",
                    "type": "requests",
                    "code": "rate_limit_exceeded",
                }
            },
        )
        with pytest.raises(ApiError) as exc_info:
            await client.complete(CompletionRequest(model="ada"))
        assert exc_info.value.status_code == 429
        assert exc_info.value.retryable
        assert exc_info.value.retry_after == 7.0


class TestImages:
    @pytest.mark.asyncio
    async def test_generate(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(
            url=f"{API}/images/generations",
            method="POST",
            json={"created": 1589478378, "data": [{"url": "https://img/1"}, {"url": "https://img/2"}]},
        )
        images = await client.generate_image(ImageRequest(prompt="an otter", n=2, size="256x256"))
        assert images.urls == ["https://img/1", "https://img/2"]

    @pytest.mark.asyncio
    async def test_edit_is_multipart(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(
            url=f"{API}/images/edits",
            method="POST",
            json={"created": 1, "data": [{"url": "https://img/1"}]},
        )
        await client.edit_image(ImageEditRequest(image=PNG, mask=PNG, prompt="add a hat"))

        sent = httpx_mock.get_request()
        assert sent.headers["Content-Type"].startswith("multipart/form-data")
        body = sent.read()
        assert b'name="image"; filename="otter.png"' in body
        assert b'name="mask"; filename="otter.png"' in body
        assert b"add a hat" in body

    @pytest.mark.asyncio
    async def test_variation(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(
            url=f"{API}/images/variations",
            method="POST",
            json={"created": 1, "data": [{"b64_json": "aGk="}]},
        )
        images = await client.create_image_variation(
            ImageVariationRequest(image=PNG, response_format="b64_json")
        )
        assert images.data[0].b64_json == "aGk="
        assert images.urls == []


class TestEmbeddingsAndModeration:
    @pytest.mark.asyncio
    async def test_embed(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(
            url=f"{API}/embeddings",
            method="POST",
            json={
                "object": "list",
                "data": [{"object": "embedding", "index": 0, "embedding": [0.1, -0.2, 0.3]}],
                "model": "text-embedding-ada-002",
                "usage": {"prompt_tokens": 8, "total_tokens": 8},
            },
        )
        response = await client.embed(
            EmbeddingRequest(model="text-embedding-ada-002", input="The food was delicious")
        )
        assert response.first.dimensions == 3

    @pytest.mark.asyncio
    async def test_moderate(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(
            url=f"{API}/moderations",
            method="POST",
            json={
                "id": "modr-5MWoLO",
                "model": "text-moderation-001",
                "results": [
                    {
                        "flagged": True,
                        "categories": {"hate": False, "violence": True, "self-harm": False},
                        "category_scores": {"hate": 0.01, "violence": 0.97, "self-harm": 0.0},
                    }
                ],
            },
        )
        moderation = await client.moderate(ModerationRequest(input="I will hurt you"))
        assert moderation.flagged
        assert moderation.results[0].categories.violence
        assert moderation.results[0].category_scores.violence == 0.97


class TestFiles:
    FILE = {
        "id": "file-XjGxS3KTG0uNmNOK362iJua3",
        "object": "file",
        "bytes": 140,
        "created_at": 1613779121,
        "filename": "mydata.jsonl",
        "purpose": "fine-tune",
    }

    @pytest.mark.asyncio
    async def test_list(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(url=f"{API}/files", method="GET", json={"data": [self.FILE]})
        files = await client.list_files()
        assert files.data[0].filename == "mydata.jsonl"

    @pytest.mark.asyncio
    async def test_upload(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(url=f"{API}/files", method="POST", json=self.FILE)
        upload = Upload(filename="mydata.jsonl", content=b'{"prompt": "a", "completion": "b"}\n')
        file = await client.upload_file(FileUploadRequest(file=upload, purpose="fine-tune"))
        assert file.id == "file-XjGxS3KTG0uNmNOK362iJua3"
        assert b'name="purpose"' in httpx_mock.get_request().read()

    @pytest.mark.asyncio
    async def test_retrieve_and_delete(self, httpx_mock: HTTPXMock, client: Client) -> None:
        file_id = self.FILE["id"]
        httpx_mock.add_response(url=f"{API}/files/{file_id}", method="GET", json=self.FILE)
        httpx_mock.add_response(
            url=f"{API}/files/{file_id}",
            method="DELETE",
            json={"id": file_id, "object": "file", "deleted": True},
        )
        assert (await client.retrieve_file(file_id)).bytes == 140
        assert (await client.delete_file(file_id)).deleted

    @pytest.mark.asyncio
    async def test_content(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(url=f"{API}/files/file-1/content", content=b"raw\nlines\n")
        assert await client.retrieve_file_content("file-1") == b"raw\nlines\n"

    @pytest.mark.asyncio
    async def test_content_error(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(
            url=f"{API}/files/file-1/content",
            status_code=400,
            json={"error": {"message": "Not allowed to download files of purpose: fine-tune"}},
        )
        with pytest.raises(ApiError, match="Not allowed"):
            await client.retrieve_file_content("file-1")


class TestFineTunes:
    @pytest.mark.asyncio
    async def test_create(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(url=f"{API}/fine-tunes", method="POST", json=FINE_TUNE)
        fine_tune = await client.create_fine_tune(
            FineTuneRequest(training_file="file-XGinujblHPwGLSztz8cPS8XY", model="curie")
        )
        assert fine_tune.status == "pending"
        assert _sent_json(httpx_mock) == {
            "training_file": "file-XGinujblHPwGLSztz8cPS8XY",
            "model": "curie",
        }

    @pytest.mark.asyncio
    async def test_list_retrieve_cancel(self, httpx_mock: HTTPXMock, client: Client) -> None:
        ft_id = FINE_TUNE["id"]
        httpx_mock.add_response(url=f"{API}/fine-tunes", method="GET", json={"data": [FINE_TUNE]})
        httpx_mock.add_response(url=f"{API}/fine-tunes/{ft_id}", method="GET", json=FINE_TUNE)
        httpx_mock.add_response(
            url=f"{API}/fine-tunes/{ft_id}/cancel",
            method="POST",
            json={**FINE_TUNE, "status": "cancelled"},
        )

        assert len((await client.list_fine_tunes()).data) == 1
        assert (await client.retrieve_fine_tune(ft_id)).hyperparams == {"n_epochs": 4}
        assert (await client.cancel_fine_tune(ft_id)).status == "cancelled"

    @pytest.mark.asyncio
    async def test_events(self, httpx_mock: HTTPXMock, client: Client) -> None:
        httpx_mock.add_response(
            url=f"{API}/fine-tunes/ft-1/events",
            method="GET",
            json={
                "object": "list",
                "data": [
                    {"object": "fine-tune-event", "created_at": 1, "level": "info", "message": "Job enqueued"},
                    {"object": "fine-tune-event", "created_at": 2, "level": "info", "message": "Job started"},
                ],
            },
        )
        events = await client.list_fine_tune_events("ft-1")
        assert [e.message for e in events.data] == ["Job enqueued", "Job started"]

    @pytest.mark.asyncio
    async def test_empty_id(self, httpx_mock: HTTPXMock, client: Client) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await client.cancel_fine_tune("")
        assert exc_info.value.field == "fine_tune"
        assert httpx_mock.get_requests() == []
