"""Shared test fixtures for safejson-loader tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx
import pytest


@pytest.fixture
def sample_json_nested() -> dict:
    """Return a nested dict carrying pollution keys at several levels."""
    return {
        "user": {
            "name": "Alice",
            "__proto__": {"isAdmin": True},
            "address": {"city": "Springfield", "constructor": {"prototype": 1}},
        },
        "items": [{"prototype": "x", "id": 1}, {"id": 2}],
        "active": True,
    }


@pytest.fixture
def tmp_json_file(tmp_path: Path):
    """Factory fixture to write JSON data to a temp file and return the path."""

    def _write(data: Any, filename: str = "test.json") -> str:
        file_path = tmp_path / filename
        with open(file_path, "w", encoding="utf-8") as fh:
            json.dump(data, fh)
        return str(file_path)

    return _write


@pytest.fixture
def tmp_raw_file(tmp_path: Path):
    """Factory fixture to write raw bytes/text to a temp file and return the path."""

    def _write(content: str | bytes, filename: str = "raw.json") -> str:
        file_path = tmp_path / filename
        if isinstance(content, str):
            content = content.encode("utf-8")
        file_path.write_bytes(content)
        return str(file_path)

    return _write


@pytest.fixture
def mock_http():
    """Factory fixture building an ``httpx.AsyncClient`` over a MockTransport.

    *routes* maps URLs to either an ``httpx.Response`` or a callable taking
    the request.  Returns ``(client, requested)`` where *requested* records
    every URL in request order.  Unknown URLs answer 404.
    """

    def _build(
        routes: dict[str, httpx.Response | Callable[..., Any]],
    ) -> tuple[httpx.AsyncClient, list[str]]:
        requested: list[str] = []

        async def handler(request: httpx.Request) -> httpx.Response:
            url = str(request.url)
            requested.append(url)
            route = routes.get(url)
            if route is None:
                return httpx.Response(404, text="not found")
            if isinstance(route, httpx.Response):
                return route
            result = route(request)
            if not isinstance(result, httpx.Response):
                result = await result
            return result

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return client, requested

    return _build


def json_response(data: Any, content_type: str = "application/json") -> httpx.Response:
    """Build a 200 response with *data* serialized as JSON."""
    return httpx.Response(
        200,
        content=json.dumps(data).encode("utf-8"),
        headers={"content-type": content_type},
    )
