"""Tests for client configuration."""

import pytest

from fieri.config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, ClientConfig
from fieri.errors import ValidationError


class TestClientConfig:
    def test_defaults(self) -> None:
        config = ClientConfig(api_key="sk-test-0123456789")
        assert config.base_url == DEFAULT_BASE_URL
        assert config.timeout == DEFAULT_TIMEOUT
        assert config.organization is None
        assert config.proxy is None

    def test_missing_credential(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ClientConfig()
        assert exc_info.value.field == "api_key"
        assert exc_info.value.reason == "missing credential"
        assert "OPENAI_API_KEY" in str(exc_info.value)

    def test_empty_credential(self) -> None:
        with pytest.raises(ValidationError, match="missing credential"):
            ClientConfig(api_key="")

    def test_base_url_scheme(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ClientConfig(api_key="sk-x", base_url="ftp://example.com")
        assert exc_info.value.field == "base_url"

    def test_timeout_positive(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ClientConfig(api_key="sk-x", timeout=0)
        assert exc_info.value.field == "timeout"
        assert exc_info.value.reason == "out of range"

    def test_api_key_not_in_repr(self) -> None:
        config = ClientConfig(api_key="sk-secret-value")
        assert "sk-secret-value" not in repr(config)

    def test_header_map(self) -> None:
        config = ClientConfig(
            api_key="sk-abc",
            organization="org-42",
            headers={"X-Trace": "1"},
        )
        assert config.header_map() == {
            "Authorization": "Bearer sk-abc",
            "OpenAI-Organization": "org-42",
            "X-Trace": "1",
        }

    def test_config_is_frozen(self) -> None:
        config = ClientConfig(api_key="sk-abc")
        with pytest.raises(Exception):
            config.timeout = 5  # type: ignore[misc]


class TestFromEnv:
    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("OPENAI_BASE_URL", "http://localhost:8080/v1")
        monkeypatch.setenv("OPENAI_ORGANIZATION", "org-env")
        monkeypatch.setenv("OPENAI_TIMEOUT_SECS", "12.5")

        config = ClientConfig.from_env()
        assert config.api_key == "sk-env"
        assert config.base_url == "http://localhost:8080/v1"
        assert config.organization == "org-env"
        assert config.timeout == 12.5

    def test_arguments_win(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("OPENAI_TIMEOUT_SECS", "12")
        config = ClientConfig.from_env(api_key="sk-arg", timeout=3)
        assert config.api_key == "sk-arg"
        assert config.timeout == 3

    def test_unparsable_timeout_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("OPENAI_TIMEOUT_SECS", "soon")
        assert ClientConfig.from_env().timeout == DEFAULT_TIMEOUT

    def test_missing_credential(self) -> None:
        with pytest.raises(ValidationError, match="missing credential") as exc_info:
            ClientConfig.from_env()
        assert "(hint: pass api_key or set OPENAI_API_KEY)" in str(exc_info.value)

    def test_proxy_requires_trust_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
        monkeypatch.setenv("FIERI_PROXY_URL", "http://proxy:3128")
        assert ClientConfig.from_env().proxy is None

        monkeypatch.setenv("FIERI_HTTP_TRUST_ENV", "1")
        assert ClientConfig.from_env().proxy == "http://proxy:3128"
