"""
HTTP transport for the LINE Messaging API.

The delivery layer only sees the `Transport` protocol: bytes in, status and
bytes out. `HttpTransport` is the httpx implementation.
"""

import logging
from typing import Mapping, Optional, Protocol

import httpx

from line_messaging.errors import TransportError

logger = logging.getLogger(__name__)

USER_AGENT = "line-messaging-sdk/0.1.0"


class Transport(Protocol):
    async def get(
        self, token: str, url: str, query: Optional[Mapping[str, str]] = None,
    ) -> tuple[int, bytes]: ...

    async def post_json(self, token: str, url: str, body: bytes) -> tuple[int, bytes, Mapping[str, str]]: ...


class HttpTransport:
    def __init__(self, timeout: float = 30.0, client: Optional[httpx.AsyncClient] = None):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
        )

    @staticmethod
    def _auth_headers(token: str, json_body: bool = False) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {token}"}
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    async def get(
        self, token: str, url: str, query: Optional[Mapping[str, str]] = None,
    ) -> tuple[int, bytes]:
        try:
            resp = await self._client.get(url, params=dict(query) if query else None, headers=self._auth_headers(token))
        except httpx.HTTPError as e:
            raise TransportError(f"GET {url} failed: {e}") from e
        logger.debug("GET %s -> %s", url, resp.status_code)
        return resp.status_code, resp.content

    async def post_json(self, token: str, url: str, body: bytes) -> tuple[int, bytes, Mapping[str, str]]:
        try:
            resp = await self._client.post(url, content=body, headers=self._auth_headers(token, json_body=True))
        except httpx.HTTPError as e:
            raise TransportError(f"POST {url} failed: {e}") from e
        logger.debug("POST %s -> %s", url, resp.status_code)
        return resp.status_code, resp.content, resp.headers

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
