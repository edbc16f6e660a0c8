"""
Shared httpx clients for the chat client.
One pooled client for search engine requests, one for page fetches and Ollama probes.
"""
from typing import Dict, NamedTuple

import httpx
from config import Config


class ClientProfile(NamedTuple):
    """Pool settings for one kind of traffic."""
    timeout: float
    max_connections: int
    max_keepalive: int
    keepalive_expiry: float


class HTTPClientManager:
    """Lazily creates one pooled AsyncClient per profile and closes them on exit."""

    SEARCH = "search"
    GENERAL = "general"

    PROFILES: Dict[str, ClientProfile] = {
        SEARCH: ClientProfile(Config.SEARCH_TIMEOUT, Config.MAX_CONCURRENT_SCRAPES, 5, 30.0),
        GENERAL: ClientProfile(Config.WEB_SCRAPING_TIMEOUT, Config.MAX_CONCURRENT_SCRAPES * 2, 10, 60.0),
    }

    _clients: Dict[str, httpx.AsyncClient] = {}

    @classmethod
    def _get_client(cls, name: str) -> httpx.AsyncClient:
        client = cls._clients.get(name)
        if client is None or client.is_closed:
            profile = cls.PROFILES[name]
            client = httpx.AsyncClient(
                timeout=profile.timeout,
                follow_redirects=True,
                max_redirects=Config.MAX_REDIRECTS,
                limits=httpx.Limits(
                    max_connections=profile.max_connections,
                    max_keepalive_connections=profile.max_keepalive,
                    keepalive_expiry=profile.keepalive_expiry
                ),
                headers={"User-Agent": Config.USER_AGENT},
                http2=True
            )
            cls._clients[name] = client
        return client

    @classmethod
    def get_search_client(cls) -> httpx.AsyncClient:
        """Client for DuckDuckGo requests."""
        return cls._get_client(cls.SEARCH)

    @classmethod
    def get_general_client(cls) -> httpx.AsyncClient:
        """
        Client for result pages, on-site search pages and the Ollama status probe.

        Returns:
            Configured httpx.AsyncClient with scraping timeouts
        """
        return cls._get_client(cls.GENERAL)

    @classmethod
    async def close_all(cls) -> None:
        """Close every client created so far."""
        clients, cls._clients = cls._clients, {}
        for client in clients.values():
            await client.aclose()
