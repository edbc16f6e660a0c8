import httpx
import pytest

from tests.fixtures.mock_clients import OllamaClientBuilder, RoutedTransport, build_http_client


@pytest.fixture
def anyio_backend():
    """RagService builds its index with asyncio tasks."""
    return "asyncio"


@pytest.fixture
def ollama_client_builder():
    return OllamaClientBuilder()


@pytest.fixture
def http_transport():
    """Mock transport shared by the search and general HTTP clients; Ollama probe answers 200."""
    transport = RoutedTransport()
    transport.route("/api/tags", httpx.Response(200, json={"models": [{"model": "qwen3:4b"}]}))
    return transport


@pytest.fixture
def mock_http(monkeypatch, http_transport):
    """Route every HTTPClientManager client through the mock transport."""
    client = build_http_client(http_transport)
    monkeypatch.setattr("utils.http_client.HTTPClientManager.get_search_client", lambda: client)
    monkeypatch.setattr("utils.http_client.HTTPClientManager.get_general_client", lambda: client)
    return http_transport


@pytest.fixture
def rag_data_dir(tmp_path):
    """Folder with a couple of notes for the RAG index."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "note1.txt").write_text("TypeScript is great for large JavaScript applications.", encoding="utf-8")
    (data_dir / "note2.md").write_text("Ollama serves local LLMs via HTTP on port 11434.", encoding="utf-8")
    return data_dir


@pytest.fixture
def chat_service_factory(monkeypatch, ollama_client_builder, mock_http):
    """Build ChatService instances wired to the mock Ollama client and HTTP transport."""
    from models.config_models import ChatConfig
    from services.chat_service import ChatService

    def _build(responses=None, **config_kwargs):
        for call_num, content in (responses or {}).items():
            ollama_client_builder.set_response(call_num, content)
        monkeypatch.setattr("services.chat_service.ollama.AsyncClient", ollama_client_builder.build())
        config_kwargs.setdefault("model", "qwen3:4b")
        config_kwargs.setdefault("host", "http://ollama.test:11434")
        config_kwargs.setdefault("rag_enabled", False)
        return ChatService(ChatConfig(**config_kwargs))

    return _build
