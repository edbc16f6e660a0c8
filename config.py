"""
Configuration module for the Local Felix terminal chat client.
Handles environment variables and application settings.
"""
import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean flag from the environment."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    """Read an integer from the environment, keeping the default on bad input."""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        print(f"   WARNING: {name}={value!r} is not an integer, using {default}")
        return default


class Config:
    """Application configuration class."""

    # Application Settings
    APP_TITLE: str = "Local Felix"

    # Ollama
    OLLAMA_HOST: str = os.getenv("OLLAMA_HOST", "http://localhost:11434")
    OLLAMA_MODEL: str = os.getenv("OLLAMA_MODEL", "qwen3:4b")
    OLLAMA_STATUS_PATH: str = "/api/tags"

    # Local RAG
    RAG_ENABLED: bool = _env_bool("RAG_ENABLED", True)
    RAG_DATA_DIR: str = os.getenv("RAG_DATA_DIR", "data")
    RAG_TOP_K: int = _env_int("RAG_TOP_K", 3)
    RAG_EXTENSIONS: tuple[str, ...] = (".txt", ".md", ".mdx")
    EMBEDDING_DIMENSIONS: int = 128

    # Logging
    LOG_FILE: str = os.getenv("LOG_FILE", os.path.join("logs", "app.log"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_TO_CONSOLE: bool = _env_bool("LOG_TO_CONSOLE", False)
    MAX_LOG_PREVIEW: int = 400

    # Web search
    SEARCH_URL: str = "https://html.duckduckgo.com/html/"
    USER_AGENT: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    DEFAULT_SEARCH_RESULTS_COUNT: int = 3
    DOMAIN_SEARCH_RESULTS_COUNT: int = 5

    # Timeouts (in seconds)
    CONNECT_TIMEOUT: float = 5.0
    SEARCH_TIMEOUT: float = 10.0
    DOMAIN_SEARCH_TIMEOUT: float = 8.0
    WEB_SCRAPING_TIMEOUT: float = 10.0

    # HTTP client limits
    MAX_REDIRECTS: int = 5
    MAX_CONCURRENT_SCRAPES: int = 4
    MAX_RESPONSE_SIZE: int = 5_000_000
    ALLOWED_CONTENT_TYPES: tuple[str, ...] = ("text/html", "application/xhtml+xml")

    # Content limits
    MAX_HTML_TEXT_LENGTH: int = 4000
    PAGE_EXCERPT_LENGTH: int = 2000
    DOMAIN_TITLE_LENGTH: int = 80
    DOMAIN_SNIPPET_LENGTH: int = 200

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and print warnings for unusable values."""
        if cls.RAG_TOP_K < 1:
            print(f"   WARNING: RAG_TOP_K must be at least 1 (got {cls.RAG_TOP_K}), using 3")
            cls.RAG_TOP_K = 3

        if not cls.OLLAMA_HOST.startswith(("http://", "https://")):
            print(f"   WARNING: OLLAMA_HOST '{cls.OLLAMA_HOST}' has no http:// or https:// scheme")
            print("   Connectivity checks against this host will fail.")


Config.validate()
