"""
Retrieval — vector storage and similarity search.

This module wraps the vector store behind a clean interface so that
ingestion and answering never need to know which DB is backing them.

Public surface
--------------
- :class:`SemanticRetriever` — threshold-filtered similarity search.
- :class:`VectorStoreBase` — abstract backend.
- :class:`ChromaVectorStore` — default Chroma backend.
- :class:`ChunkDocument`, :class:`SearchResult` — data models.
"""

from notion_rag.retrieval.base import VectorStoreBase
from notion_rag.retrieval.models import ChunkDocument, SearchResult
from notion_rag.retrieval.retriever import SemanticRetriever

__all__ = [
    "ChromaVectorStore",
    "ChunkDocument",
    "SearchResult",
    "SemanticRetriever",
    "VectorStoreBase",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from notion_rag.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
