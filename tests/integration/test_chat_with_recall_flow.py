import httpx
import pytest

from tests.fixtures.responses import MOCK_DUCKDUCKGO_HTML, MOCK_WEBPAGE_CONTENT


@pytest.fixture
def mock_search_and_pages(mock_http):
    mock_http.route("duckduckgo.com", httpx.Response(200, html=MOCK_DUCKDUCKGO_HTML))
    mock_http.route("typescriptlang.org", httpx.Response(200, html=MOCK_WEBPAGE_CONTENT))
    return mock_http


def _search_calls(transport):
    return [url for url in transport.urls() if "duckduckgo.com" in url]


@pytest.mark.anyio
async def test_follow_up_reuses_cached_results_without_new_search(chat_service_factory, ollama_client_builder, mock_search_and_pages):
    """Given a search turn followed by 'show me those results', the cached results should be reused without any network call."""
    service = chat_service_factory(responses={1: "Found tutorials.", 2: "Here they are again."})

    await service.send_message("Search for X tutorials")
    requests_after_first_turn = len(mock_search_and_pages.requests)
    cached = service.last_search_results

    reply = await service.send_message("show me those results")

    assert reply == "Here they are again."
    assert len(mock_search_and_pages.requests) == requests_after_first_turn
    assert len(_search_calls(mock_search_and_pages)) == 1

    prompt = ollama_client_builder.call_history[1]["messages"][-1]["content"]
    assert prompt.startswith(f"show me those results\n\n{cached}\n\n")


@pytest.mark.anyio
async def test_follow_up_without_reference_words_gets_no_cached_context(chat_service_factory, ollama_client_builder, mock_search_and_pages):
    """Given cached results and an unrelated follow-up, no cached context should be added."""
    service = chat_service_factory()

    await service.send_message("Search for X tutorials")
    await service.send_message("thanks, that helps")

    prompt = ollama_client_builder.call_history[1]["messages"][-1]["content"]
    assert "Web Search Results:" not in prompt


@pytest.mark.anyio
async def test_reference_words_without_previous_search_add_nothing(chat_service_factory, ollama_client_builder, mock_http):
    """Given no earlier search, a 'show me again' message should not add context or hit the network."""
    service = chat_service_factory()

    await service.send_message("show me again")

    assert _search_calls(mock_http) == []
    prompt = ollama_client_builder.call_history[0]["messages"][-1]["content"]
    assert "Web Search Results:" not in prompt


@pytest.mark.anyio
async def test_new_search_replaces_cached_results(chat_service_factory, mock_search_and_pages):
    """Given a second search-intent turn, a fresh search should run even if reference words are present."""
    service = chat_service_factory()

    await service.send_message("Search for X tutorials")
    await service.send_message("search for those results again")

    assert len(_search_calls(mock_search_and_pages)) == 2
