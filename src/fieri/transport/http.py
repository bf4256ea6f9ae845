"""HTTP transport using httpx for async requests.

Provides:
- JSON, multipart and streaming requests against one base URL
- Configurable timeouts and proxy
- Automatic header management
- Mapping of httpx failures onto ``TransportError``
"""

from __future__ import annotations

import importlib.util
import ssl
import time
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version
from typing import TYPE_CHECKING, Any

import httpx

from fieri.config import trust_env_enabled
from fieri.errors import TransportError, TransportFailure
from fieri.telemetry import get_logger
from fieri.types.common import ApiRequest, MultipartRequest

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fieri.config import ClientConfig

logger = get_logger("fieri.transport")

_UA_VERSION: str | None = None


def _http2_enabled() -> bool:
    """Enable HTTP/2 only when optional dependency is present."""
    return importlib.util.find_spec("h2") is not None


def _get_ua_version() -> str:
    """Get package version for User-Agent (cached)."""
    global _UA_VERSION
    if _UA_VERSION is None:
        try:
            _UA_VERSION = version("fieri")
        except PackageNotFoundError:
            from fieri import __version__

            _UA_VERSION = __version__
    return _UA_VERSION


def _is_tls_failure(exc: BaseException) -> bool:
    seen: BaseException | None = exc
    while seen is not None:
        if isinstance(seen, ssl.SSLError):
            return True
        seen = seen.__cause__ or seen.__context__
    return "ssl" in str(exc).lower() or "certificate" in str(exc).lower()


class HttpTransport:
    """HTTP transport for API communication.

    One instance owns one ``httpx.AsyncClient``, created on first use and
    reused by every call until ``close``.

    Example:
        >>> transport = HttpTransport(ClientConfig.from_env())
        >>> response = await transport.send("GET", "models")
        >>> async with transport.stream("POST", "chat/completions", request) as resp:
        ...     async for chunk in resp.aiter_bytes():
        ...         process(chunk)
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize HTTP transport.

        Args:
            config: Connection settings
            transport: Optional httpx transport (e.g. ``httpx.MockTransport``)
        """
        self._config = config
        self._base_url = config.base_url if config.base_url.endswith("/") else config.base_url + "/"
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            timeout = httpx.Timeout(
                self._config.timeout,
                connect=self._config.connect_timeout,
            )
            kwargs: dict[str, Any] = {
                "base_url": self._base_url,
                "timeout": timeout,
                "proxy": self._config.proxy,
                "trust_env": trust_env_enabled(),
            }
            if self._transport is not None:
                kwargs["transport"] = self._transport
            else:
                kwargs["http2"] = _http2_enabled()
            self._client = httpx.AsyncClient(**kwargs)

        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _build_headers(self, *, streaming: bool = False) -> dict[str, str]:
        """Build request headers.

        Content-Type is left to httpx, which sets it from the body kind
        (JSON or multipart with boundary).
        """
        headers = {
            "Accept": "text/event-stream" if streaming else "application/json",
            "User-Agent": f"fieri/{_get_ua_version()}",
        }
        headers.update(self._config.header_map())
        return headers

    def _body(self, request: ApiRequest | None, *, stream: bool = False) -> dict[str, Any]:
        if request is None:
            return {}
        if isinstance(request, MultipartRequest):
            data, files = request.to_multipart()
            return {"data": data, "files": files}
        return {"json": request.to_payload(stream=stream)}

    def _map_error(self, exc: httpx.HTTPError, path: str) -> TransportError:
        url = f"{self._base_url}{path}"
        if isinstance(exc, httpx.TimeoutException):
            return TransportError(
                f"Request timed out: {exc}",
                failure=TransportFailure.TIMEOUT,
                url=url,
                cause=exc,
            )
        if isinstance(exc, httpx.ConnectError):
            failure = TransportFailure.TLS if _is_tls_failure(exc) else TransportFailure.CONNECT
            return TransportError(
                f"Connection failed: {exc}",
                failure=failure,
                url=url,
                cause=exc,
            )
        return TransportError(
            f"HTTP error: {exc}",
            failure=TransportFailure.NETWORK,
            url=url,
            cause=exc,
        )

    async def send(
        self,
        method: str,
        path: str,
        request: ApiRequest | None = None,
        *,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Send one request and read the whole response.

        Non-2xx responses are returned as-is; turning them into errors is
        the caller's concern.

        Args:
            method: HTTP method
            path: Request path (relative to base URL)
            request: Validated request, sent as JSON or multipart
            params: Query parameters

        Returns:
            HTTP response with its body read

        Raises:
            TransportError: On network, TLS or timeout failures
        """
        client = self._get_client()
        logger.debug("sending request", method=method, path=path)
        started = time.perf_counter()

        try:
            response = await client.request(
                method=method,
                url=path,
                headers=self._build_headers(),
                params=params,
                **self._body(request),
            )
        except httpx.HTTPError as e:
            error = self._map_error(e, path)
            logger.debug("transport failure", path=path, failure=error.failure.value)
            raise error from e

        logger.debug(
            "response received",
            path=path,
            status=response.status_code,
            elapsed_ms=round((time.perf_counter() - started) * 1000),
        )
        return response

    @asynccontextmanager
    async def stream(
        self,
        method: str,
        path: str,
        request: ApiRequest | None = None,
        *,
        params: dict[str, Any] | None = None,
    ) -> AsyncIterator[httpx.Response]:
        """Make a streaming HTTP request.

        The JSON body carries ``"stream": true``. Read failures raised while
        the caller consumes the body inside the ``async with`` block are
        mapped to ``TransportError`` as well.

        Args:
            method: HTTP method
            path: Request path
            request: Validated request
            params: Query parameters

        Yields:
            HTTP response whose body has not been read

        Example:
            >>> async with transport.stream("POST", "completions", request) as resp:
            ...     async for chunk in resp.aiter_bytes():
            ...         process(chunk)
        """
        client = self._get_client()
        logger.debug("opening stream", method=method, path=path)

        try:
            async with client.stream(
                method=method,
                url=path,
                headers=self._build_headers(streaming=True),
                params=params,
                **self._body(request, stream=True),
            ) as response:
                logger.debug("stream opened", path=path, status=response.status_code)
                yield response
        except httpx.HTTPError as e:
            error = self._map_error(e, path)
            logger.debug("stream transport failure", path=path, failure=error.failure.value)
            raise error from e

    async def __aenter__(self) -> HttpTransport:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
