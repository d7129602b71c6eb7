"""Shared fixtures: an in-memory transport that records calls and replays canned replies."""

import json
from typing import Any, Mapping, Optional

import pytest


class FakeTransport:
    def __init__(self, status: int = 200, body: bytes = b"{}", headers: Optional[Mapping[str, str]] = None):
        self.status = status
        self.body = body
        self.headers = dict(headers or {})
        self.posts: list[dict[str, Any]] = []
        self.gets: list[dict[str, Any]] = []

    def reply_with(self, status: int, body: Any = b"{}", headers: Optional[Mapping[str, str]] = None) -> "FakeTransport":
        self.status = status
        self.body = body if isinstance(body, bytes) else json.dumps(body).encode()
        self.headers = dict(headers or {})
        return self

    async def get(self, token: str, url: str, query: Optional[Mapping[str, str]] = None) -> tuple[int, bytes]:
        self.gets.append({"token": token, "url": url, "query": dict(query) if query else None})
        return self.status, self.body

    async def post_json(self, token: str, url: str, body: bytes) -> tuple[int, bytes, Mapping[str, str]]:
        self.posts.append({"token": token, "url": url, "body": body})
        return self.status, self.body, self.headers

    @property
    def last_payload(self) -> dict[str, Any]:
        return json.loads(self.posts[-1]["body"])


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
