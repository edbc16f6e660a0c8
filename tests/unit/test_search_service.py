import pytest
import httpx

from config import Config
from models.chat_models import SearchResult
from services.search import WebSearchTool
from tests.fixtures.responses import (
    MOCK_DUCKDUCKGO_HTML,
    MOCK_DOMAIN_SEARCH_HTML,
    MOCK_DOMAIN_NO_MATCH_HTML,
    MOCK_WEBPAGE_CONTENT,
)


@pytest.fixture
def search_tool():
    return WebSearchTool()


@pytest.mark.anyio
async def test_search_parses_results_and_sends_query(search_tool, mock_http):
    """Given a results page, search should send the query as 'q' and return parsed results."""
    mock_http.route("duckduckgo.com", httpx.Response(200, html=MOCK_DUCKDUCKGO_HTML))

    results = await search_tool.search("typescript tutorials", max_results=2)

    assert [r.title for r in results] == ["TypeScript Documentation", "TypeScript Handbook Mirror"]
    request = mock_http.requests[-1]
    assert request.url.params["q"] == "typescript tutorials"
    assert "Mozilla/5.0" in request.headers["User-Agent"]


@pytest.mark.parametrize("failure", [
    httpx.Response(503, html="<html></html>"),
    httpx.ConnectError("connection refused"),
    httpx.ReadTimeout("timed out"),
])
@pytest.mark.anyio
async def test_search_returns_empty_list_on_failure(search_tool, mock_http, failure):
    """Given a failing search engine, search should return an empty list instead of raising."""
    mock_http.route("duckduckgo.com", failure)

    assert await search_tool.search("anything") == []


@pytest.mark.anyio
async def test_search_domain_direct_stops_at_first_endpoint_with_results(search_tool, mock_http):
    """Given a first endpoint that fails and a second with matches, search_domain_direct should stop after the second."""
    mock_http.route("memory.net/search?q=", httpx.Response(404))
    mock_http.route("memory.net/?s=", httpx.Response(200, html=MOCK_DOMAIN_SEARCH_HTML))

    results = await search_tool.search_domain_direct("memory.net", "8gb ram")

    assert [r.url for r in results] == [
        "https://memory.net/products/ddr4-8gb",
        "https://shop.memory.net/ram/8gb-sodimm",
    ]
    assert mock_http.urls() == [
        "https://memory.net/search?q=8gb+ram",
        "https://memory.net/?s=8gb+ram",
    ]


@pytest.mark.anyio
async def test_search_domain_direct_tries_every_endpoint_then_gives_up(search_tool, mock_http):
    """Given endpoints that error or match nothing, search_domain_direct should try all four and return nothing."""
    mock_http.route("memory.net/search?q=", httpx.ConnectError("refused"))
    mock_http.route("memory.net/?s=", httpx.Response(200, html=MOCK_DOMAIN_NO_MATCH_HTML))
    mock_http.route("memory.net/search?query=", httpx.Response(500))
    mock_http.route("memory.net/?q=", httpx.ReadTimeout("slow"))

    results = await search_tool.search_domain_direct("memory.net", "8gb ram")

    assert results == []
    assert len(mock_http.requests) == 4


@pytest.mark.anyio
async def test_search_domain_direct_respects_max_results(search_tool, mock_http):
    """Given more matches than requested, search_domain_direct should cap the results."""
    mock_http.route("memory.net/search?q=", httpx.Response(200, html=MOCK_DOMAIN_SEARCH_HTML))

    results = await search_tool.search_domain_direct("memory.net", "8gb ram", max_results=1)

    assert len(results) == 1


@pytest.mark.anyio
async def test_fetch_page_content_extracts_main_text(search_tool, mock_http):
    """Given an HTML page, fetch_page_content should return its cleaned main text."""
    mock_http.route("example.com/paris", httpx.Response(200, html=MOCK_WEBPAGE_CONTENT))

    content = await search_tool.fetch_page_content("https://example.com/paris")

    assert content == "Paris Paris is the capital of France."


@pytest.mark.anyio
async def test_fetch_page_content_truncates_long_pages(search_tool, mock_http):
    """Given a very long page, fetch_page_content should return at most MAX_HTML_TEXT_LENGTH characters."""
    long_page = f"<html><body><article>{'word ' * 5000}</article></body></html>"
    mock_http.route("example.com/long", httpx.Response(200, html=long_page))

    content = await search_tool.fetch_page_content("https://example.com/long")

    assert len(content) == Config.MAX_HTML_TEXT_LENGTH


@pytest.mark.parametrize("response", [
    httpx.Response(404, html="<html><body>missing</body></html>"),
    httpx.Response(200, json={"not": "html"}),
    httpx.ReadTimeout("timed out"),
])
@pytest.mark.anyio
async def test_fetch_page_content_returns_empty_on_failure(search_tool, mock_http, response):
    """Given an error status, a non-HTML body or a timeout, fetch_page_content should return an empty string."""
    mock_http.route("example.com/broken", response)

    assert await search_tool.fetch_page_content("https://example.com/broken") == ""


@pytest.mark.anyio
async def test_fetch_page_content_rejects_oversized_body(search_tool, mock_http, monkeypatch):
    """Given a body above the size cap, fetch_page_content should return an empty string."""
    monkeypatch.setattr(Config, "MAX_RESPONSE_SIZE", 100)
    mock_http.route("example.com/huge", httpx.Response(200, html=f"<html><body>{'x' * 500}</body></html>"))

    assert await search_tool.fetch_page_content("https://example.com/huge") == ""


def test_format_search_results_empty():
    """Given no results, format_search_results should always return the fixed message."""
    assert WebSearchTool.format_search_results([]) == "No search results found."
    assert WebSearchTool.format_search_results([]) == "No search results found."


def test_format_search_results_numbers_results_in_order():
    """Given results, format_search_results should render numbered title/URL/snippet blocks."""
    results = [
        SearchResult(title="First", url="https://a.example", snippet="Snippet A"),
        SearchResult(title="Second", url="https://b.example", snippet=""),
    ]

    formatted = WebSearchTool.format_search_results(results)

    assert formatted == (
        "Search Results:\n\n"
        "1. First\n   URL: https://a.example\n   Snippet A\n\n"
        "2. Second\n   URL: https://b.example\n\n"
    )
