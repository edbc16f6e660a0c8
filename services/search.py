"""
Web search tool built on scraping DuckDuckGo's HTML results page.
Also probes a site's own search page and extracts text from result pages.
"""
from typing import List
from urllib.parse import quote_plus

import httpx

from config import Config
from models.chat_models import SearchResult
from utils.constants import NO_SEARCH_RESULTS
from utils.html_parser import HTMLParser
from utils.logger import app_logger
from utils.http_client import HTTPClientManager


class WebSearchTool:
    """Performs web searches and fetches page content. Failures yield empty results."""

    # Guessed on-site search endpoints, tried in order
    DOMAIN_SEARCH_ENDPOINTS = (
        "https://{domain}/search?q={term}",
        "https://{domain}/?s={term}",
        "https://{domain}/search?query={term}",
        "https://{domain}/?q={term}",
    )

    async def search(self, query: str, max_results: int = Config.DEFAULT_SEARCH_RESULTS_COUNT) -> List[SearchResult]:
        """
        Search DuckDuckGo and parse the HTML result list.

        Args:
            query: Search query string
            max_results: Maximum number of results to return

        Returns:
            Parsed results, or an empty list on any failure
        """
        try:
            client = HTTPClientManager.get_search_client()
            response = await client.get(
                Config.SEARCH_URL,
                params={"q": query},
                headers={"User-Agent": Config.USER_AGENT},
                timeout=Config.SEARCH_TIMEOUT
            )

            if response.status_code != 200:
                app_logger.warning(f"Search engine returned status {response.status_code} for '{query}'")
                return []

            results = HTMLParser.parse_search_results(response.text, max_results)
            app_logger.info(f"Search '{query}' returned {len(results)} results")
            return results

        except httpx.TimeoutException as e:
            app_logger.warning(f"Search timed out for '{query}': {e}")
        except httpx.RequestError as e:
            app_logger.warning(f"Search request failed for '{query}': {e}")
        except Exception as e:
            app_logger.error(f"Unexpected search error for '{query}': {e}")

        return []

    async def search_domain_direct(
        self,
        domain: str,
        term: str,
        max_results: int = Config.DOMAIN_SEARCH_RESULTS_COUNT
    ) -> List[SearchResult]:
        """
        Try the target site's own search page before the general engine.

        Endpoints are tried one at a time; the first one that yields any
        matching same-domain link wins.

        Args:
            domain: Site to search, e.g. "memory.net"
            term: Search terms, may be empty
            max_results: Maximum number of links to return

        Returns:
            Matching links, or an empty list when every endpoint failed
        """
        words = [word for word in term.lower().split() if len(word) > 2]
        client = HTTPClientManager.get_general_client()

        for template in self.DOMAIN_SEARCH_ENDPOINTS:
            url = template.format(domain=domain, term=quote_plus(term))
            try:
                html = await self._download(client, url, Config.DOMAIN_SEARCH_TIMEOUT)
                if html is None:
                    continue

                results = HTMLParser.extract_domain_links(html, url, domain, words, max_results)
                if results:
                    app_logger.info(f"Domain search on {url} found {len(results)} links")
                    return results[:max_results]

                app_logger.debug(f"Domain search on {url} found no matching links")

            except httpx.TimeoutException:
                app_logger.warning(f"Domain search timed out for {url}")
            except httpx.RequestError as e:
                app_logger.warning(f"Domain search request failed for {url}: {e}")
            except Exception as e:
                app_logger.warning(f"Unexpected domain search error for {url}: {e}")

        return []

    async def fetch_page_content(self, url: str) -> str:
        """
        Fetch a page and extract its main text.

        Args:
            url: Page URL

        Returns:
            Up to MAX_HTML_TEXT_LENGTH characters of text, or "" on any failure
        """
        try:
            client = HTTPClientManager.get_general_client()
            html = await self._download(client, url, Config.WEB_SCRAPING_TIMEOUT)
            if not html:
                return ""

            content = HTMLParser.extract_main_text(html, Config.MAX_HTML_TEXT_LENGTH)
            app_logger.info(f"Fetched {len(content)} chars from {url}")
            return content

        except httpx.TimeoutException:
            app_logger.warning(f"Fetching timed out for {url}")
        except httpx.RequestError as e:
            app_logger.warning(f"Fetch request failed for {url}: {e}")
        except UnicodeDecodeError as e:
            app_logger.warning(f"Failed to decode content from {url}: {e}")
        except Exception as e:
            app_logger.warning(f"Unexpected fetch error for {url}: {e}")

        return ""

    @staticmethod
    async def _download(client: httpx.AsyncClient, url: str, timeout: float) -> str | None:
        """
        Stream an HTML page with a size cap.

        Returns:
            Decoded body, or None for non-200 status, non-HTML content or oversized bodies
        """
        async with client.stream(
            'GET', url,
            headers={"User-Agent": Config.USER_AGENT},
            timeout=timeout,
            follow_redirects=True
        ) as response:

            if response.status_code != 200:
                app_logger.warning(f"Failed to fetch {url}: status {response.status_code}")
                return None

            content_type = response.headers.get('content-type', '').lower().split(';')[0].strip()
            if content_type and content_type not in Config.ALLOWED_CONTENT_TYPES:
                app_logger.warning(f"Skipping {url}: unsupported content-type '{content_type}'")
                return None

            size = 0
            chunks = []
            async for chunk in response.aiter_bytes():
                size += len(chunk)
                if size > Config.MAX_RESPONSE_SIZE:
                    app_logger.warning(f"Response from {url} exceeds size limit ({size} bytes)")
                    return None
                chunks.append(chunk)

        return b''.join(chunks).decode(response.encoding or 'utf-8', errors='ignore')

    @staticmethod
    def format_search_results(results: List[SearchResult]) -> str:
        """
        Format search results into readable text.

        Args:
            results: Search results in display order

        Returns:
            Numbered title / URL / snippet blocks, or the fixed no-results line
        """
        if not results:
            return NO_SEARCH_RESULTS

        formatted = "Search Results:\n\n"
        for idx, result in enumerate(results, 1):
            formatted += f"{idx}. {result.title}\n"
            formatted += f"   URL: {result.url}\n"
            if result.snippet:
                formatted += f"   {result.snippet}\n"
            formatted += "\n"

        return formatted
