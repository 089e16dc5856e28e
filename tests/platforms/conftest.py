"""Shared fixtures for platform client tests."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest


class FakeApi:
    """Routes requests by (method, raw path) and records every request.

    A fresh httpx.Response is built per request from the registered kwargs.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], list[dict[str, Any]]] = {}

    def route(self, method: str, path: str, status_code: int = 200, **kwargs: Any) -> None:
        """Register a response. Repeated registrations for a route are served in order."""
        self._routes.setdefault((method, path), []).append(
            {"status_code": status_code, **kwargs}
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, self._path(request))
        queue = self._routes.get(key)
        if not queue:
            return httpx.Response(404, json={"message": f"no route for {key[0]} {key[1]}"})
        response_kwargs = queue.pop(0) if len(queue) > 1 else queue[0]
        return httpx.Response(**response_kwargs)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @staticmethod
    def _path(request: httpx.Request) -> str:
        return request.url.raw_path.decode().split("?", 1)[0]

    def calls(self) -> list[tuple[str, str]]:
        return [(r.method, self._path(r)) for r in self.requests]

    def body(self, index: int) -> Any:
        return json.loads(self.requests[index].content)


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()
