"""
HTML parsing utilities for search result pages and fetched web pages.
Turns raw HTML into structured results or clean text for LLM consumption.
"""
import re
from typing import List
from urllib.parse import unquote, urljoin, urlparse

from bs4 import BeautifulSoup, Comment

from config import Config
from models.chat_models import SearchResult
from utils.constants import Patterns


class HTMLParser:
    """HTML parser for search engine results, on-site search pages and article text."""

    # Tags to remove completely before extracting page text
    UNWANTED_TAGS = ['script', 'style', 'nav', 'footer', 'header', 'aside']

    # CSS selectors for advertising blocks
    UNWANTED_SELECTORS = ['.ad', '.advertisement']

    # Main content containers, in priority order
    MAIN_CONTENT_SELECTORS = ['main', 'article', '.content', '#content', 'body']

    # Block containers used as the snippet source for on-site search links
    LINK_CONTAINERS = ['article', 'li', 'div', 'p']

    _whitespace: re.Pattern = re.compile(Patterns.WHITESPACE)
    _redirect_target: re.Pattern = re.compile(Patterns.DUCKDUCKGO_REDIRECT)

    @staticmethod
    def parse_search_results(html: str, max_results: int) -> List[SearchResult]:
        """
        Parse a DuckDuckGo HTML results page.

        Args:
            html: Raw HTML of the results page
            max_results: Maximum number of results to return

        Returns:
            Results in page order, without entries missing a title or URL
        """
        soup = BeautifulSoup(html, 'lxml')
        results: List[SearchResult] = []

        for block in soup.select('.result'):
            if len(results) >= max_results:
                break

            title_elem = block.select_one('.result__a')
            snippet_elem = block.select_one('.result__snippet')
            url_elem = block.select_one('.result__url')

            title = title_elem.get_text(strip=True) if title_elem else ""
            snippet = snippet_elem.get_text(strip=True) if snippet_elem else ""
            url = HTMLParser._unwrap_result_url(
                title_elem.get('href') if title_elem else None,
                url_elem.get_text(strip=True) if url_elem else ""
            )

            if title and url:
                results.append(SearchResult(title=title, url=url, snippet=snippet))

        return results

    @staticmethod
    def _unwrap_result_url(href: str | None, displayed_url: str) -> str:
        """Take the destination out of a redirect link, else use the displayed URL."""
        if href:
            match = HTMLParser._redirect_target.search(href)
            if match:
                return unquote(match.group(1))

        if displayed_url and not urlparse(displayed_url).scheme:
            return f"https://{displayed_url}"
        return displayed_url

    @staticmethod
    def extract_domain_links(
        html: str,
        page_url: str,
        domain: str,
        terms: List[str],
        max_results: int
    ) -> List[SearchResult]:
        """
        Collect same-domain links from an on-site search page.

        Args:
            html: Raw HTML of the site's search page
            page_url: URL the page was fetched from, used to resolve relative links
            domain: Hostname suffix a link must have to be kept
            terms: Lower-cased query words; a link must mention one of them
            max_results: Stop after this many matches

        Returns:
            Matching links as search results
        """
        soup = BeautifulSoup(html, 'lxml')
        results: List[SearchResult] = []

        for anchor in soup.find_all('a', href=True):
            if len(results) >= max_results:
                break

            try:
                resolved = urljoin(page_url, anchor['href'])
                host = urlparse(resolved).hostname or ""
            except ValueError:
                continue
            if not host.endswith(domain):
                continue

            text = HTMLParser._collapse(anchor.get_text(separator=' '))
            container = anchor.find_parent(HTMLParser.LINK_CONTAINERS)
            container_text = HTMLParser._collapse(container.get_text(separator=' ')) if container else ""
            snippet_source = container_text or text

            if not text and not snippet_source:
                continue

            haystack = f"{text} {snippet_source}".lower()
            if terms and not any(term in haystack for term in terms):
                continue

            results.append(SearchResult(
                title=text or snippet_source[:Config.DOMAIN_TITLE_LENGTH],
                url=resolved,
                snippet=snippet_source[:Config.DOMAIN_SNIPPET_LENGTH]
            ))

        return results

    @staticmethod
    def extract_main_text(html: str, max_length: int = Config.MAX_HTML_TEXT_LENGTH) -> str:
        """
        Extract readable text from the main content area of a page.

        Args:
            html: Raw HTML content
            max_length: Maximum length of extracted text

        Returns:
            Whitespace-collapsed text, cut at max_length characters
        """
        soup = BeautifulSoup(html, 'lxml')

        for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()

        for tag in soup(HTMLParser.UNWANTED_TAGS):
            tag.decompose()

        for selector in HTMLParser.UNWANTED_SELECTORS:
            for elem in soup.select(selector):
                elem.decompose()

        content_source = soup
        for selector in HTMLParser.MAIN_CONTENT_SELECTORS:
            found = soup.select_one(selector)
            if found:
                content_source = found
                break

        text = HTMLParser._collapse(content_source.get_text(separator=' '))
        return text[:max_length]

    @staticmethod
    def _collapse(text: str) -> str:
        """Normalize runs of whitespace to single spaces."""
        return HTMLParser._whitespace.sub(' ', text).strip()
