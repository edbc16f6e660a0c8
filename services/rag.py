"""
Local RAG service.
Builds an in-memory vector index over text files in a folder and returns the
closest documents as a context block for the prompt.
"""
import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import numpy as np

from config import Config
from models.config_models import RagConfig
from utils.embedding import embed_many, embed_text
from utils.logger import app_logger


@dataclass
class Document:
    """A loaded text file."""
    text: str
    source: str


class VectorIndex:
    """Unit-vector matrix over documents, searched by dot product."""

    def __init__(self, documents: List[Document]):
        self.documents = documents
        self.matrix = embed_many([doc.text for doc in documents])

    def __len__(self) -> int:
        return len(self.documents)

    def query(self, text: str, top_k: int) -> List[Document]:
        """Return the top_k documents closest to text, best first."""
        if not self.documents:
            return []
        scores = self.matrix @ embed_text(text)
        order = np.argsort(-scores, kind="stable")[:top_k]
        return [self.documents[idx] for idx in order]


class RagService:
    """Loads local documents into an in-memory vector index and retrieves relevant context."""

    def __init__(self, config: Optional[RagConfig] = None):
        self.config = config or RagConfig()
        self._index: Optional[VectorIndex] = None
        self._loading: Optional[asyncio.Task] = None
        self._available = True

    @property
    def is_available(self) -> bool:
        """False once an index build has failed."""
        return self._available

    @property
    def document_count(self) -> int:
        """Number of indexed documents (0 before the build or when empty)."""
        return len(self._index) if self._index is not None else 0

    async def ensure_ready(self) -> None:
        """
        Build the index once.

        The first caller starts the build; everyone else, including callers
        arriving while it runs, awaits the same task.
        """
        if self._loading is None:
            self._loading = asyncio.create_task(self._build_index())
        await asyncio.shield(self._loading)

    async def _build_index(self) -> None:
        """Load documents and embed them. Any failure disables the service for good."""
        try:
            documents = await asyncio.to_thread(self._load_documents)
            if not documents:
                app_logger.info(f"RAG: no documents in {self.config.data_dir}, index is empty")
                self._index = None
                return

            self._index = VectorIndex(documents)
            app_logger.info(f"RAG: indexed {len(documents)} documents from {self.config.data_dir}")

        except Exception as e:
            app_logger.error(f"RAG index build failed: {e}")
            self._index = None
            self._available = False

    def _load_documents(self) -> List[Document]:
        """Read every non-empty text file directly inside data_dir."""
        data_dir = Path(self.config.data_dir)
        try:
            entries = sorted(data_dir.iterdir())
        except FileNotFoundError:
            app_logger.info(f"RAG: data directory {data_dir} does not exist")
            return []

        documents = []
        for path in entries:
            if not path.is_file() or not self._is_text_file(path):
                continue

            text = path.read_text(encoding="utf-8", errors="replace")
            if not text.strip():
                continue
            documents.append(Document(text=text, source=path.name))

        return documents

    @staticmethod
    def _is_text_file(path: Path) -> bool:
        return path.suffix.lower() in Config.RAG_EXTENSIONS

    async def retrieve_context(self, query: str) -> str:
        """
        Return the top-K documents for a query as a numbered context block.

        Args:
            query: User message

        Returns:
            "Retrieved Context:" block, or "" when the index is disabled, empty or the query failed
        """
        await self.ensure_ready()
        if not self._available or self._index is None:
            return ""

        try:
            documents = self._index.query(query, self.config.top_k)
        except Exception as e:
            app_logger.warning(f"RAG query failed: {e}")
            return ""

        parts = [
            f"({idx}) {doc.text.strip()}"
            for idx, doc in enumerate(documents, 1)
            if doc.text.strip()
        ]

        if not parts:
            return ""
        return "Retrieved Context:\n" + "\n\n".join(parts)
