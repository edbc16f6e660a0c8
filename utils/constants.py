"""
Constants and prompts for the Local Felix chat client.
"""

DEFAULT_SYSTEM_PROMPT = """You are Local Felix, a helpful assistant running on a local model.
Some user messages carry extra context: snippets from the user's local notes and
results scraped from a web search. Treat that context as reference material, prefer
it for recent or specific facts, and keep answers concise and conversational."""

# Appended after the assembled context blocks
CONTEXT_INSTRUCTION = """Use the context above to answer when it is relevant.
If you use information from the web search results, cite it with "(from web search)".
If the context does not help, answer from your own knowledge and state "(no web search used)"."""

# Appended when no context block was assembled for the turn
NO_CONTEXT_INSTRUCTION = """Answer from your own knowledge and state "(no web search used)"."""

WELCOME_MESSAGE = """Welcome to Local Felix! I'm your AI assistant powered by Ollama.

I can help you with questions and perform web searches.
Type your message and press Enter to chat.
Type "exit" or "quit" to leave.
Type "clear" to clear the conversation history.
Type "/model <name>" to switch models."""

NO_SEARCH_RESULTS = "No search results found."


class SearchKeywords:
    """Keyword sets for substring-based intent detection."""

    SEARCH_VERBS = ("search", "search for", "look up", "find", "find information", "google")
    FACTUAL_STARTERS = ("what is", "who is", "when did", "where is")
    RECENCY_CUES = ("latest", "current", "news about")
    HOW_TO_CUES = (
        "how to", "how do i", "walkthrough", "guide", "tutorial", "steps",
        "instructions", "setup", "install", "configure", "configuration",
    )

    SEARCH_INTENT = SEARCH_VERBS + FACTUAL_STARTERS + RECENCY_CUES + HOW_TO_CUES

    CONTEXT_REFERENCE = (
        "show", "display", "results", "see", "list", "links", "sources",
        "those", "again", "previous", "before", "earlier",
    )

    # Order matters: the first prefix that matches is stripped
    QUERY_PREFIXES = (
        "search for", "look up", "find information about", "what is",
        "who is", "when did", "where is", "find", "search",
    )


# Regular expression patterns
class Patterns:
    """Regular expression patterns for query extraction."""
    DOMAIN = r'((?:[a-z0-9-]+\.)+[a-z]{2,})'
    SITE_SEARCH_WITH_TERM = rf'\bsearch(?:es)?\s+(?:for\s+)?{DOMAIN}\s+for\s+(.+)$'
    SITE_SEARCH = rf'\bsearch(?:es)?\s+(?:on\s+)?{DOMAIN}(?:\s+(.*))?$'
    SITE_QUERY = r'^site:(\S+)\s*(.*)$'
    QUERY_PREFIX = r'^(?:' + '|'.join(p.replace(' ', r'\s+') for p in SearchKeywords.QUERY_PREFIXES) + r')\s+'
    DUCKDUCKGO_REDIRECT = r'uddg=([^&]+)'
    WHITESPACE = r'\s+'
