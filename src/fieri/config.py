"""
Client configuration.

``ClientConfig`` is built once per process and shared read-only by every
call. Values resolve from explicit arguments first, then environment
variables, then defaults.
"""

from __future__ import annotations

import os
from contextlib import suppress
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from fieri.errors import ValidationError
from fieri.types.common import translate_validation_error

DEFAULT_BASE_URL = "https://api.openai.com/v1/"
DEFAULT_TIMEOUT = 60.0
DEFAULT_CONNECT_TIMEOUT = 10.0

# Environment variables
API_KEY_ENV = "OPENAI_API_KEY"
BASE_URL_ENV = "OPENAI_BASE_URL"
ORGANIZATION_ENV = "OPENAI_ORGANIZATION"
TIMEOUT_ENV = "OPENAI_TIMEOUT_SECS"
PROXY_ENV = "FIERI_PROXY_URL"
TRUST_ENV = "FIERI_HTTP_TRUST_ENV"
LOG_LEVEL_ENV = "FIERI_LOG_LEVEL"
LOG_FORMAT_ENV = "FIERI_LOG_FORMAT"


def trust_env_enabled() -> bool:
    """Use environment proxy settings only when explicitly enabled."""
    return os.getenv(TRUST_ENV, "0") == "1"


class ClientConfig(BaseModel):
    """Connection settings shared by all calls of a client.

    Attributes:
        api_key: Bearer credential sent with every request
        base_url: Service root, e.g. https://api.openai.com/v1/
        organization: Optional organization header value
        timeout: Per-call timeout in seconds
        connect_timeout: Connection establishment timeout in seconds
        proxy: Optional proxy URL
        headers: Extra headers sent with every request

    Example:
        >>> config = ClientConfig.from_env(timeout=30)
        >>> config = ClientConfig(api_key="sk-...", base_url="http://localhost:8080/v1")
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    api_key: str = Field(min_length=1, repr=False)
    base_url: str = DEFAULT_BASE_URL
    organization: str | None = None
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    connect_timeout: float = Field(default=DEFAULT_CONNECT_TIMEOUT, gt=0)
    proxy: str | None = None
    headers: tuple[tuple[str, str], ...] = ()

    def __init__(self, **data: Any) -> None:
        if not data.get("api_key"):
            raise ValidationError("api_key", "missing credential").with_hint(
                f"pass api_key or set {API_KEY_ENV}"
            )
        if isinstance(data.get("headers"), dict):
            data["headers"] = tuple(data["headers"].items())
        try:
            super().__init__(**data)
        except PydanticValidationError as exc:
            raise translate_validation_error(exc) from None

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("must be an http(s) URL")
        return value

    @classmethod
    def from_env(
        cls,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        organization: str | None = None,
        timeout: float | None = None,
        proxy: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> ClientConfig:
        """Resolve a configuration from arguments and the environment.

        Args:
            api_key: Explicit credential (overrides OPENAI_API_KEY)
            base_url: Explicit base URL (overrides OPENAI_BASE_URL)
            organization: Explicit organization (overrides OPENAI_ORGANIZATION)
            timeout: Explicit timeout in seconds (overrides OPENAI_TIMEOUT_SECS)
            proxy: Explicit proxy URL
            headers: Extra headers for every request

        Returns:
            Frozen ClientConfig

        Raises:
            ValidationError: If no credential can be resolved or a value is invalid
        """
        if timeout is None:
            env_timeout = os.getenv(TIMEOUT_ENV)
            if env_timeout:
                with suppress(ValueError):
                    timeout = float(env_timeout)

        if proxy is None and trust_env_enabled():
            proxy = os.getenv(PROXY_ENV)

        values: dict[str, Any] = {
            "api_key": api_key or os.getenv(API_KEY_ENV),
            "base_url": base_url or os.getenv(BASE_URL_ENV) or DEFAULT_BASE_URL,
            "organization": organization or os.getenv(ORGANIZATION_ENV),
            "proxy": proxy,
            "headers": headers or {},
        }
        if timeout is not None:
            values["timeout"] = timeout
        return cls(**values)

    def header_map(self) -> dict[str, str]:
        """Authentication and extra headers for every request."""
        headers = {"Authorization": f"Bearer {self.api_key}"}
        if self.organization:
            headers["OpenAI-Organization"] = self.organization
        headers.update(dict(self.headers))
        return headers
