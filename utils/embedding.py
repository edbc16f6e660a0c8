"""
Deterministic hashing embedding for the local RAG index.

Vectors are derived from character codes only, so the same text always maps to
the same unit vector. Similarity is coarse character overlap, not meaning.
"""
import numpy as np

from config import Config


def embed_text(text: str, dimensions: int = Config.EMBEDDING_DIMENSIONS) -> np.ndarray:
    """
    Embed text into a fixed-length, L2-normalized vector.

    Each character with code point c adds (c % 13) - 6 to bucket c % dimensions.

    Args:
        text: Text to embed
        dimensions: Vector length

    Returns:
        float64 vector of the given length; all zeros when nothing was hashed
    """
    vector = np.zeros(dimensions, dtype=np.float64)
    if text:
        codes = np.fromiter((ord(ch) for ch in text), dtype=np.int64, count=len(text))
        np.add.at(vector, codes % dimensions, (codes % 13) - 6)

    norm = np.linalg.norm(vector)
    if norm == 0:
        return vector
    return vector / norm


def embed_many(texts: list[str], dimensions: int = Config.EMBEDDING_DIMENSIONS) -> np.ndarray:
    """Embed several texts into a (len(texts), dimensions) matrix."""
    if not texts:
        return np.zeros((0, dimensions), dtype=np.float64)
    return np.vstack([embed_text(text, dimensions) for text in texts])
