"""
Pydantic models for session and RAG configuration.
"""
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from config import Config


class RagConfig(BaseModel):
    """Local RAG settings, fixed once the service is built."""
    model_config = ConfigDict(frozen=True)

    data_dir: Path = Field(default_factory=lambda: Path(Config.RAG_DATA_DIR))
    top_k: int = Field(Config.RAG_TOP_K, ge=1, description="Number of documents returned per query")


class ChatConfig(BaseModel):
    """Chat session options. Unset model/host fall back to the environment defaults."""
    model: Optional[str] = None
    host: Optional[str] = None
    rag_enabled: bool = Config.RAG_ENABLED
    rag: Optional[RagConfig] = None
