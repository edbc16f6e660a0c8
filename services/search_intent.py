"""
Search intent engine.
Keyword heuristics that decide whether a message asks for a web search,
derive the query for it, and spot follow-ups about earlier results.
"""
import re
from typing import Optional, Tuple

from utils.constants import SearchKeywords, Patterns


class SearchIntentEngine:
    """
    Substring-based intent classifier.

    Stateless and free of I/O. ChatService takes an instance, so a smarter
    classifier can replace it by overriding these methods.
    """

    _site_search_with_term: re.Pattern = re.compile(Patterns.SITE_SEARCH_WITH_TERM)
    _site_search: re.Pattern = re.compile(Patterns.SITE_SEARCH)
    _site_query: re.Pattern = re.compile(Patterns.SITE_QUERY)
    _query_prefix: re.Pattern = re.compile(Patterns.QUERY_PREFIX)

    def detect_search_intent(self, message: str) -> bool:
        """True when the message contains any search keyword, anywhere, in any case."""
        message_lower = message.lower()
        return any(keyword in message_lower for keyword in SearchKeywords.SEARCH_INTENT)

    def extract_search_query(self, message: str) -> str:
        """
        Derive the search engine query from a user message.

        "search <domain> for <term>" and "search on <domain> <rest>" become
        site-restricted queries; otherwise a leading request phrase is stripped.

        Args:
            message: Raw user message

        Returns:
            Lower-cased query, or the original message when nothing is left
        """
        text = message.lower().strip()

        match = self._site_search_with_term.search(text)
        if match:
            return f"site:{match.group(1)} {match.group(2).strip()}".strip()

        match = self._site_search.search(text)
        if match:
            rest = (match.group(2) or "").strip()
            return f"site:{match.group(1)} {rest}" if rest else f"site:{match.group(1)}"

        query = self._query_prefix.sub('', text, count=1).strip()
        return query or message

    def could_be_context_reference_question(self, message: str) -> bool:
        """True when the message may refer back to previously shown results."""
        message_lower = message.lower()
        return any(keyword in message_lower for keyword in SearchKeywords.CONTEXT_REFERENCE)

    def parse_site_query(self, query: str) -> Optional[Tuple[str, str]]:
        """Split a 'site:<domain> <term>' query into (domain, term)."""
        match = self._site_query.match(query.strip())
        if not match:
            return None
        return match.group(1), match.group(2).strip()
