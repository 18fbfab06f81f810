"""Semantic retriever — top-K search with a relevance threshold.

The store returns the *k* nearest neighbours; anything whose similarity
is strictly below ``score_threshold`` is dropped.  Because the filter can
discard a large share of candidates, callers should over-fetch (ask for
more than they intend to show).

Usage::

    from notion_rag.retrieval.retriever import SemanticRetriever

    retriever = SemanticRetriever(store, embedder=GeminiEmbedder())
    for result in retriever.search("quarterly planning notes"):
        print(result.similarity, result.document.title)
"""

from __future__ import annotations

import logging
import math
from typing import Any, Sequence

from notion_rag.config import settings
from notion_rag.errors import InvalidVectorError
from notion_rag.remote.embedder import Embedder, EmbeddingIntent
from notion_rag.retrieval.base import VectorStoreBase
from notion_rag.retrieval.models import ChunkDocument, SearchResult

logger = logging.getLogger(__name__)


class SemanticRetriever:
    """High-level retriever that wraps any :class:`VectorStoreBase`.

    Parameters
    ----------
    store:
        A concrete vector-store backend.
    embedder:
        Used by :meth:`search` to embed text queries.  Optional when only
        :meth:`search_by_embedding` is used.
    default_k:
        Number of neighbours requested from the store by default.
    score_threshold:
        Minimum similarity; results strictly below it are discarded.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embedder: Embedder | None = None,
        *,
        default_k: int = settings.search_top_k,
        score_threshold: float = settings.relevance_threshold,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self.default_k = default_k
        self.score_threshold = score_threshold

    # -- public API -----------------------------------------------------------

    def search(self, query: str, *, k: int | None = None) -> list[SearchResult]:
        """Embed *query* (query intent) and run :meth:`search_by_embedding`."""
        if self._embedder is None:
            raise RuntimeError("SemanticRetriever.search needs an embedder; use search_by_embedding instead")
        vector = self._embedder.embed(query, EmbeddingIntent.QUERY)
        return self.search_by_embedding(vector, k=k)

    def search_by_embedding(self, embedding: Sequence[float], *, k: int | None = None) -> list[SearchResult]:
        """Return results ordered by similarity, highest first.

        Raises
        ------
        InvalidVectorError
            *embedding* is empty.
        """
        if not embedding:
            raise InvalidVectorError("query vector is empty")
        k = k or self.default_k
        raw_hits = self._store.similarity_search(embedding, k=k)
        return self._to_results(raw_hits)

    # -- internals ------------------------------------------------------------

    def _to_results(self, raw_hits: list[dict[str, Any]]) -> list[SearchResult]:
        results: list[SearchResult] = []
        filtered = 0
        for hit in raw_hits:
            score = float(hit.get("score", 0.0))
            if math.isnan(score) or score < self.score_threshold:
                filtered += 1
                continue
            document = ChunkDocument.from_store(
                hit["id"],
                hit.get("content", ""),
                hit.get("metadata", {}),
            )
            results.append(SearchResult(document=document, similarity=max(0.0, min(score, 1.0))))

        if filtered:
            logger.info("Filtered %d result(s) below similarity %.2f", filtered, self.score_threshold)
        results.sort(key=lambda r: r.similarity, reverse=True)
        return results
