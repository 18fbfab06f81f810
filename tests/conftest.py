"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import math
from typing import Any, Sequence

import pytest

from notion_rag.errors import DocumentNotFoundError
from notion_rag.remote.embedder import Embedder, EmbeddingIntent
from notion_rag.retrieval.base import VectorStoreBase
from notion_rag.retrieval.models import ChunkDocument


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


def _cosine(a: Sequence[float], b: Sequence[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


class InMemoryVectorStore(VectorStoreBase):
    """Dict-backed store with exact cosine search."""

    def __init__(self, dimension: int | None = None) -> None:
        super().__init__("test-collection", dimension=dimension)
        self.records: dict[str, dict[str, Any]] = {}

    def _upsert(self, doc_id: str, vector: list[float], metadata: dict[str, str], content: str) -> None:
        self.records[doc_id] = {"vector": vector, "metadata": metadata, "content": content}

    def similarity_search(self, query_embedding: Sequence[float], *, k: int = 10) -> list[dict[str, Any]]:
        hits = [
            {
                "id": doc_id,
                "content": rec["content"],
                "score": _cosine(query_embedding, rec["vector"]),
                "metadata": rec["metadata"],
            }
            for doc_id, rec in self.records.items()
        ]
        hits.sort(key=lambda h: h["score"], reverse=True)
        return hits[:k]

    def count(self) -> int:
        return len(self.records)

    def get_by_id(self, doc_id: str) -> ChunkDocument:
        if doc_id not in self.records:
            raise DocumentNotFoundError(f"document not found: {doc_id}")
        rec = self.records[doc_id]
        return ChunkDocument.from_store(doc_id, rec["content"], rec["metadata"])

    def health_check(self) -> bool:
        return True


class FakeEmbedder(Embedder):
    """Deterministic embedder; records every call."""

    def __init__(self, vector: Sequence[float] = (1.0, 0.0, 0.0)) -> None:
        self.vector = list(vector)
        self.calls: list[tuple[str, EmbeddingIntent]] = []
        self.closed = False

    def embed(self, text: str, intent: EmbeddingIntent) -> list[float]:
        self.calls.append((text, intent))
        return list(self.vector)

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore(dimension=3)


@pytest.fixture()
def embedder() -> FakeEmbedder:
    return FakeEmbedder()
