"""Tests for static fetching and the shared page layer."""

import httpx
import pytest

from newstrack import config
from newstrack.services.errors import FetchError, UpstreamUnreachable
from newstrack.services.fetcher import StaticPageSession, fetch_document, fetch_html
from newstrack.services.page import absolute_url, normalize_site_url, outlet_host


def client_for(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_fetch_document_parses_html_with_browser_headers():
    seen = {}

    def handler(request):
        seen["ua"] = request.headers.get("User-Agent")
        return httpx.Response(200, text="<html><body><h1>Front page</h1></body></html>")

    async with client_for(handler) as client:
        doc = await fetch_document("https://example.com/", client=client)

    assert doc.h1.get_text() == "Front page"
    assert seen["ua"] == config.USER_AGENT


@pytest.mark.asyncio
async def test_non_2xx_is_fetch_error():
    async with client_for(lambda request: httpx.Response(503)) as client:
        with pytest.raises(FetchError) as excinfo:
            await fetch_html("https://example.com/", client=client)
    assert isinstance(excinfo.value, UpstreamUnreachable)
    assert "HTTP 503" in str(excinfo.value)


@pytest.mark.asyncio
async def test_timeout_is_fetch_error():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    async with client_for(handler) as client:
        with pytest.raises(FetchError, match="timed out"):
            await fetch_html("https://example.com/", client=client)


@pytest.mark.asyncio
async def test_network_error_is_fetch_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    async with client_for(handler) as client:
        with pytest.raises(FetchError, match="network error"):
            await fetch_html("https://example.com/", client=client)


@pytest.mark.asyncio
async def test_sub_crawl_skips_failing_pages(make_client):
    pages = {
        "https://example.com/a": "<p class='who'>Jane Roe</p>",
        "https://example.com/c": "<p class='who'>Amit Shah</p>",
    }

    def names(doc, url):
        return [el.get_text() for el in doc.select(".who")]

    async with StaticPageSession(make_client(pages)) as session:
        found = await session.sub_crawl(
            ["https://example.com/a", "https://example.com/b", "https://example.com/c"], names
        )
    assert found == ["Jane Roe", "Amit Shah"]


@pytest.mark.asyncio
async def test_sub_crawl_respects_limit(fake_session):
    pages = {f"https://example.com/{i}": "<p>x</p>" for i in range(20)}
    session = fake_session(pages)
    await session.sub_crawl(list(pages), lambda doc, url: [url])
    assert len(session.loaded) == config.MAX_SUBPAGES


@pytest.mark.asyncio
async def test_evaluate_requires_a_loaded_page(fake_session):
    with pytest.raises(RuntimeError):
        await fake_session({}).evaluate(lambda doc, url: [])


def test_url_helpers():
    assert absolute_url("https://example.com/news/", "/author/jane") == "https://example.com/author/jane"
    assert absolute_url("https://example.com/", "mailto:desk@example.com") is None
    assert absolute_url("https://example.com/", "javascript:void(0)") is None
    assert absolute_url("https://example.com/", None) is None
    assert normalize_site_url("bbc.com") == "https://bbc.com"
    assert normalize_site_url("http://bbc.com") == "http://bbc.com"
    assert outlet_host("https://www.ndtv.com/india") == "ndtv.com"


@pytest.mark.asyncio
async def test_invalid_url_is_fetch_error():
    client = client_for(lambda request: httpx.Response(200, text="<html></html>"))
    with pytest.raises(FetchError, match="invalid URL"):
        await fetch_html("https://exa\x00mple.com", client=client)
