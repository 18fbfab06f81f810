"""Embedding worker — consumer half of the ingestion pipeline."""

from __future__ import annotations

import logging

from notion_rag.config import settings
from notion_rag.ingestion.channel import BoundedQueue
from notion_rag.ingestion.stats import Outcome, PipelineStats
from notion_rag.remote.embedder import Embedder, EmbeddingIntent
from notion_rag.retrieval.base import VectorStoreBase
from notion_rag.retrieval.models import TITLE_SEPARATOR, ChunkDocument

logger = logging.getLogger(__name__)


class EmbeddingWorker:
    """Drain a queue of chunks: embed each one and store it.

    Every document yields exactly one :class:`Outcome` recorded in
    *stats*.  A failure on one document never stops the worker.

    Parameters
    ----------
    worker_id:
        Index used in log lines.
    embedder:
        This worker's own embedding client.
    store:
        Destination vector store (shared, thread-safe).
    stats:
        Shared counters.
    min_content_length:
        Chunks shorter than this are skipped without an embedding call.
    """

    def __init__(
        self,
        worker_id: int,
        embedder: Embedder,
        store: VectorStoreBase,
        stats: PipelineStats,
        *,
        min_content_length: int = settings.min_embed_length,
        title_separator: str = TITLE_SEPARATOR,
    ) -> None:
        self.worker_id = worker_id
        self._embedder = embedder
        self._store = store
        self._stats = stats
        self.min_content_length = min_content_length
        self.title_separator = title_separator

    def run(self, source: BoundedQueue[ChunkDocument]) -> None:
        """Process items until *source* is closed and drained."""
        logger.debug("Worker %d started", self.worker_id)
        for doc in source:
            self.process(doc)
        logger.debug("Worker %d finished", self.worker_id)

    def process(self, doc: ChunkDocument) -> Outcome:
        outcome = self._handle(doc)
        self._stats.record(outcome)
        return outcome

    def _handle(self, doc: ChunkDocument) -> Outcome:
        if len(doc.content) < self.min_content_length:
            return Outcome.SKIPPED

        try:
            vector = self._embedder.embed(doc.embedding_text(self.title_separator), EmbeddingIntent.DOCUMENT)
        except Exception as exc:
            logger.warning("[worker %d] embedding failed for %s: %s", self.worker_id, doc.id, exc)
            return Outcome.FAILED

        try:
            self._store.add(doc.with_vector(vector))
        except Exception as exc:
            logger.warning("[worker %d] storing %s failed: %s", self.worker_id, doc.id, exc)
            return Outcome.FAILED

        return Outcome.SUCCEEDED
