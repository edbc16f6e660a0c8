"""
Chat service containing the core chat processing logic.
Handles connectivity, search intent, context assembly and the model call for one session.
"""
import json
from typing import Awaitable, List, Optional, TypeVar

import httpx
import ollama

from config import Config
from models.chat_models import ConversationState, Message, SearchResult
from models.config_models import ChatConfig
from services.rag import RagService
from services.search import WebSearchTool
from services.search_intent import SearchIntentEngine
from utils.constants import DEFAULT_SYSTEM_PROMPT, CONTEXT_INSTRUCTION, NO_CONTEXT_INSTRUCTION
from utils.http_client import HTTPClientManager
from utils.logger import app_logger, truncate

T = TypeVar("T")


class OllamaConnectionError(RuntimeError):
    """The Ollama host did not answer the connectivity probe."""


class ChatService:
    """Service for handling one chat session."""

    def __init__(
        self,
        config: Optional[ChatConfig] = None,
        *,
        intent_engine: Optional[SearchIntentEngine] = None,
        web_search: Optional[WebSearchTool] = None,
        rag_service: Optional[RagService] = None
    ):
        config = config or ChatConfig()

        self.state = ConversationState(
            model=config.model or Config.OLLAMA_MODEL,
            host=config.host or Config.OLLAMA_HOST,
            rag_enabled=config.rag_enabled
        )
        self.state.append("system", DEFAULT_SYSTEM_PROMPT)

        self.intent_engine = intent_engine or SearchIntentEngine()
        self.web_search = web_search or WebSearchTool()
        self.rag_service = None
        if self.state.rag_enabled:
            self.rag_service = rag_service or RagService(config.rag)

        self.client = ollama.AsyncClient(host=self.state.host)

        app_logger.info(
            f"session:start host={self.host} model={self.model} rag={'on' if self.rag_enabled else 'off'}"
        )

    @property
    def model(self) -> str:
        return self.state.model

    @property
    def host(self) -> str:
        return self.state.host

    @property
    def rag_enabled(self) -> bool:
        return self.state.rag_enabled

    @property
    def last_search_results(self) -> str:
        return self.state.last_search_results

    async def send_message(self, user_message: str) -> str:
        """
        Run one chat turn and return the assistant's reply.

        Connectivity and model failures come back as an "Error: ..." reply
        instead of an exception.

        Args:
            user_message: Text typed by the user

        Returns:
            Assistant reply or error text
        """
        if not self.state.connection_checked:
            try:
                await self.ensure_connection()
            except OllamaConnectionError as e:
                return self._error_reply(e)
            self.state.connection_checked = True

        user_index = self.state.append("user", user_message)
        app_logger.info(f"user: {truncate(user_message)}")

        context_parts = await self.gather_context(user_message)
        prompt = self.build_prompt(user_message, context_parts)

        try:
            messages = self.prepare_messages(user_index, prompt)
            response = await self.client.chat(model=self.model, messages=messages)
            assistant_message = self._response_text(response)
        except Exception as e:
            app_logger.error(f"Chat error: {e} host={self.host} model={self.model}")
            return self._error_reply(e)

        self.state.append("assistant", assistant_message)
        app_logger.info(f"assistant: {truncate(assistant_message)}")

        return assistant_message

    async def ensure_connection(self) -> None:
        """
        Probe the Ollama status endpoint.

        Raises:
            OllamaConnectionError: non-200 status or the host could not be reached
        """
        url = f"{self.host.rstrip('/')}{Config.OLLAMA_STATUS_PATH}"
        try:
            client = HTTPClientManager.get_general_client()
            response = await client.get(url, timeout=Config.CONNECT_TIMEOUT)
            if response.status_code != 200:
                raise OllamaConnectionError(f"Ollama unreachable (status {response.status_code})")
        except (httpx.HTTPError, httpx.InvalidURL, OllamaConnectionError) as e:
            app_logger.error(f"connect: fail host={self.host} msg={e}")
            raise OllamaConnectionError(
                f"Cannot reach Ollama at {self.host}. Is it running and reachable from here? ({e})"
            ) from e

        app_logger.info(f"connect: ok host={self.host}")

    async def gather_context(self, user_message: str) -> List[str]:
        """
        Collect the context blocks for this turn.

        RAG runs first when enabled; then either a fresh search, a reuse of the
        previous search results, or nothing.
        """
        context_parts: List[str] = []

        if self.rag_enabled and self.rag_service is not None:
            rag_context = await self._best_effort(
                "RAG retrieval", self.rag_service.retrieve_context(user_message), ""
            )
            if rag_context:
                context_parts.append(rag_context)

        if self.intent_engine.detect_search_intent(user_message):
            context_parts.extend(await self._search_context(user_message))

        elif self.state.last_search_results and self.intent_engine.could_be_context_reference_question(user_message):
            app_logger.info("Reusing previous search results for follow-up question")
            context_parts.append(self.state.last_search_results)

        return context_parts

    async def _search_context(self, user_message: str) -> List[str]:
        """Search the web for the message and return the resulting context blocks."""
        search_query = self.intent_engine.extract_search_query(user_message)
        app_logger.info(f"Search triggered: '{search_query}'")

        results = await self.run_search(search_query)
        if not results:
            app_logger.info(f"No search results for '{search_query}'")
            return []

        formatted = "Web Search Results:\n" + self.web_search.format_search_results(results)
        self.state.last_search_results = formatted
        blocks = [formatted]

        top_result = results[0]
        page_content = await self._best_effort(
            f"Page fetch for {top_result.url}", self.web_search.fetch_page_content(top_result.url), ""
        )
        if page_content:
            blocks.append(f"Content from {top_result.title}:\n{page_content[:Config.PAGE_EXCERPT_LENGTH]}...")
        else:
            app_logger.info(f"Skipping page content for {top_result.url}")

        return blocks

    async def run_search(self, search_query: str) -> List[SearchResult]:
        """Site queries try the site's own search first, then the general engine."""
        site_query = self.intent_engine.parse_site_query(search_query)
        if site_query:
            domain, term = site_query
            results = await self._best_effort(
                f"Domain search on {domain}", self.web_search.search_domain_direct(domain, term), []
            )
            if results:
                return results
            app_logger.info(f"Domain search on {domain} found nothing, falling back to search engine")

        return await self._best_effort(
            "Web search", self.web_search.search(search_query, Config.DEFAULT_SEARCH_RESULTS_COUNT), []
        )

    @staticmethod
    def build_prompt(user_message: str, context_parts: List[str]) -> str:
        """Combine the user text, context blocks and the answering instruction."""
        if not context_parts:
            return f"{user_message}\n\n{NO_CONTEXT_INSTRUCTION}"

        context = "\n\n".join(context_parts)
        return f"{user_message}\n\n{context}\n\n{CONTEXT_INSTRUCTION}"

    def prepare_messages(self, user_index: int, prompt: str) -> List[dict]:
        """History as model messages, with the current user entry replaced by the prompt."""
        return [
            {"role": msg.role, "content": prompt if idx == user_index else msg.content}
            for idx, msg in enumerate(self.state.messages)
        ]

    def clear_history(self) -> None:
        """Drop every message, the system prompt included."""
        self.state.messages = []
        app_logger.info("history: cleared")

    def set_model(self, model: str) -> None:
        """Switch models. The client is rebuilt against the same host; history is kept."""
        self.state.model = model
        self.client = ollama.AsyncClient(host=self.host)
        app_logger.info(f"model: {model}")

    def get_history(self) -> List[Message]:
        """Snapshot of the conversation history."""
        return self.state.snapshot()

    async def _best_effort(self, label: str, operation: Awaitable[T], default: T) -> T:
        """Await an optional context source; on failure log it and use the default."""
        try:
            return await operation
        except Exception as e:
            app_logger.warning(f"{label} failed: {e}")
            return default

    def _error_reply(self, error: Exception) -> str:
        message = str(error) or type(error).__name__
        return f"Error: {message} (host={self.host}, model={self.model})"

    @staticmethod
    def _response_text(response) -> str:
        """Pull the reply text out of an Ollama chat response."""
        content = response['message']['content']
        if isinstance(content, str):
            return content
        return json.dumps(content)
