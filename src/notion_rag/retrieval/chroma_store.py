"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import logging
import threading
from typing import Any, Sequence

import chromadb

from notion_rag.config import settings
from notion_rag.errors import DocumentNotFoundError, InvalidVectorError
from notion_rag.retrieval.base import VectorStoreBase
from notion_rag.retrieval.models import ChunkDocument

logger = logging.getLogger(__name__)


def create_client(
    *,
    path: str = settings.db_path,
    host: str = settings.chroma_host,
    port: int = settings.chroma_port,
) -> Any:
    """Return an HTTP client when *host* is set, else a local persistent one."""
    if host:
        return chromadb.HttpClient(host=host, port=port)
    return chromadb.PersistentClient(path=path)


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store using cosine distance.

    Parameters
    ----------
    collection_name:
        Name of the Chroma collection.
    client:
        A ``chromadb`` client.  Built from settings when *None*.
    dimension:
        Expected embedding size.

    Vectors are always supplied by the caller; the collection is created
    without an embedding function.
    """

    def __init__(
        self,
        collection_name: str = settings.chroma_collection,
        *,
        client: Any | None = None,
        dimension: int | None = settings.embedding_dimension,
    ) -> None:
        super().__init__(collection_name, dimension=dimension)
        self._client = client if client is not None else create_client()
        self._collection = self._client.get_or_create_collection(
            name=collection_name,
            metadata={"hnsw:space": "cosine"},
            embedding_function=None,
        )
        self._write_lock = threading.Lock()

    # -- VectorStoreBase overrides --------------------------------------------

    def _upsert(
        self,
        doc_id: str,
        vector: list[float],
        metadata: dict[str, str],
        content: str,
    ) -> None:
        with self._write_lock:
            self._collection.upsert(
                ids=[doc_id],
                embeddings=[vector],
                metadatas=[metadata],
                documents=[content],
            )

    def similarity_search(self, query_embedding: Sequence[float], *, k: int = 10) -> list[dict[str, Any]]:
        if not query_embedding:
            raise InvalidVectorError("query vector is empty")
        available = self.count()
        if available == 0:
            return []

        results = self._collection.query(
            query_embeddings=[list(query_embedding)],
            n_results=min(k, available),
            include=["documents", "metadatas", "distances"],
        )

        hits: list[dict[str, Any]] = []
        ids = results.get("ids", [[]])[0]
        docs = (results.get("documents") or [[]])[0]
        metas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        for doc_id, content, meta, dist in zip(ids, docs, metas, distances):
            # Cosine space: distance = 1 - cosine similarity.
            hits.append(
                {
                    "id": doc_id,
                    "content": content or "",
                    "score": 1.0 - dist,
                    "metadata": dict(meta or {}),
                }
            )
        return hits

    def count(self) -> int:
        return self._collection.count()

    def get_by_id(self, doc_id: str) -> ChunkDocument:
        result = self._collection.get(ids=[doc_id], include=["documents", "metadatas"])
        ids = result.get("ids") or []
        if not ids:
            raise DocumentNotFoundError(f"document not found: {doc_id}")
        content = (result.get("documents") or [""])[0] or ""
        meta = (result.get("metadatas") or [{}])[0] or {}
        return ChunkDocument.from_store(ids[0], content, {k: str(v) for k, v in meta.items()})

    def health_check(self) -> bool:
        try:
            self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False

    def delete(self, ids: list[str]) -> None:
        with self._write_lock:
            self._collection.delete(ids=ids)
