"""Tests for the Serper search client."""

import httpx
import pytest

from common.config import Config
from services.serper_search.client import WebSearchService

ORGANIC = {
    "organic": [
        {"title": "Acme - Contact", "link": "https://acme.com/contact", "snippet": "Email info@acme.com", "position": 1},
        {"title": "Acme - Contact (dup)", "link": "https://acme.com/contact"},
        {"title": "", "link": "https://acme.com/empty"},
        {"title": "Jane Doe | LinkedIn", "link": "https://www.linkedin.com/in/janedoe", "position": 3},
    ],
    "credits": 1,
}


def make_service(handler, key="serper-key"):
    return WebSearchService(Config(serper_api_key=key), transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_search_parses_and_dedupes_hits():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["key"] = request.headers["X-API-KEY"]
        seen["body"] = request.content
        return httpx.Response(200, json=ORGANIC)

    result = await make_service(handler).search('"acme.com" contact', max_results=5)

    assert result.success
    assert seen["key"] == "serper-key"
    assert b'"num":5' in seen["body"].replace(b" ", b"")
    assert [h.link for h in result.hits] == ["https://acme.com/contact", "https://www.linkedin.com/in/janedoe"]
    assert result.hits[1].hostname == "www.linkedin.com"
    assert result.hits[0].mentions_contact
    assert result.credits_used == 1


@pytest.mark.asyncio
async def test_http_error_is_reported_not_raised():
    result = await make_service(lambda request: httpx.Response(429)).search("acme")
    assert not result.success
    assert result.error == "HTTP 429"


@pytest.mark.asyncio
async def test_missing_key():
    result = await make_service(lambda request: httpx.Response(200, json=ORGANIC), key="").search("acme")
    assert not result.success
    assert result.hits == []


@pytest.mark.asyncio
async def test_non_object_body_is_reported():
    result = await make_service(lambda request: httpx.Response(200, json=["unexpected"])).search("acme")

    assert not result.success
    assert result.error == "Unexpected response shape"
