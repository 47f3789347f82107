"""Tests for the Brave search tool."""

import httpx
import pytest

from deep_research.tools import brave
from deep_research.tools.brave import search_brave

BRAVE_BODY = {
    "web": {
        "results": [
            {"url": "https://a.example", "title": "A", "description": "About A", "age": "1d"},
            {"url": "https://b.example", "title": "B", "description": "About B"},
        ]
    }
}


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_search_maps_results_and_sends_options():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        seen["headers"] = request.headers
        return httpx.Response(200, json=BRAVE_BODY)

    async with _client(handler) as client:
        results = await search_brave(
            "solid state batteries", lang="en", country="de", location="Berlin",
            client=client, api_key="test-key",
        )

    assert results == [
        {"url": "https://a.example", "title": "A", "description": "About A"},
        {"url": "https://b.example", "title": "B", "description": "About B"},
    ]
    assert seen["params"]["q"] == "solid state batteries"
    assert seen["params"]["search_lang"] == "en"
    assert seen["params"]["country"] == "de"
    assert seen["headers"]["X-Subscription-Token"] == "test-key"
    assert seen["headers"]["X-Loc-City"] == "Berlin"


@pytest.mark.asyncio
async def test_search_respects_max_results():
    async with _client(lambda request: httpx.Response(200, json=BRAVE_BODY)) as client:
        results = await search_brave("q", max_results=1, client=client, api_key="k")

    assert [r["url"] for r in results] == ["https://a.example"]


@pytest.mark.asyncio
async def test_transport_error_yields_empty_list():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        assert await search_brave("q", client=client, api_key="k") == []


@pytest.mark.asyncio
async def test_error_status_yields_empty_list():
    body = {"error": {"meta": {"errors": [{"msg": "invalid token"}]}}}
    async with _client(lambda request: httpx.Response(422, json=body)) as client:
        assert await search_brave("q", client=client, api_key="k") == []


@pytest.mark.asyncio
async def test_unexpected_body_yields_empty_list():
    async with _client(lambda request: httpx.Response(200, json=["not", "an", "object"])) as client:
        assert await search_brave("q", client=client, api_key="k") == []


@pytest.mark.asyncio
async def test_missing_api_key_skips_request(monkeypatch):
    monkeypatch.setattr(brave, "BRAVE_API_KEY", "")

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    async with _client(handler) as client:
        assert await search_brave("q", client=client) == []
    assert brave.is_available() is False
