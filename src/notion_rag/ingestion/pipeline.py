"""Ingestion coordinator — producer, bounded queue, worker pool, progress.

    Notion ──► NotionLoader ──► BoundedQueue(2 × workers) ──► N × EmbeddingWorker ──► vector store

The producer and every worker run on their own thread.  :meth:`run`
returns once every worker has drained the queue and the producer has
returned.  Per-document failures only show up in the stats; a failure
to enumerate pages is reported in :attr:`IngestionReport.error`.
"""

from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable

from notion_rag.config import settings
from notion_rag.errors import FetchError
from notion_rag.ingestion.channel import BoundedQueue
from notion_rag.ingestion.loader import FetchSummary, NotionLoader
from notion_rag.ingestion.stats import PipelineStats, StatsSnapshot
from notion_rag.ingestion.worker import EmbeddingWorker
from notion_rag.remote.embedder import Embedder, GeminiEmbedder
from notion_rag.remote.retry import RateLimitedCaller, RetryCallback, RetryEvent
from notion_rag.retrieval.base import VectorStoreBase
from notion_rag.retrieval.models import ChunkDocument

logger = logging.getLogger(__name__)

EmbedderFactory = Callable[[RetryCallback | None], Embedder]


def gemini_embedder_factory(on_retry: RetryCallback | None = None) -> Embedder:
    """Default factory: one Gemini client per worker."""
    return GeminiEmbedder(caller=RateLimitedCaller(name="embedding", on_retry=on_retry))


@dataclass(frozen=True)
class IngestionReport:
    """Outcome of one pipeline run."""

    stats: StatsSnapshot
    fetch: FetchSummary | None = None
    error: FetchError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        """Re-raise the producer's error, if there was one."""
        if self.error is not None:
            raise self.error


class ProgressReporter:
    """Log a stats snapshot every *interval* seconds on a background thread.

    Retry notifications from the embedders are queued without blocking
    (dropped when the buffer is full) and logged by the same thread.
    """

    def __init__(
        self,
        stats: PipelineStats,
        *,
        interval: float = settings.progress_interval,
        emit: Callable[[StatsSnapshot], None] | None = None,
        max_pending_events: int = 100,
    ) -> None:
        self._stats = stats
        self.interval = interval
        self._emit = emit or (lambda snap: logger.info("Progress: %s", snap))
        self._events: queue.Queue[RetryEvent] = queue.Queue(maxsize=max_pending_events)
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def notify_retry(self, event: RetryEvent) -> None:
        try:
            self._events.put_nowait(event)
        except queue.Full:
            pass

    def start(self) -> None:
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="ingest-progress", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Signal the reporter thread and wait for it to exit."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        self._drain_events()

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self._drain_events()
            self._emit(self._stats.snapshot())

    def _drain_events(self) -> None:
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                return
            logger.info(
                "Embedding retry %d/%d, waiting %.0fs (%s)",
                event.attempt,
                event.max_attempts,
                event.delay,
                event.error,
            )


class IngestionPipeline:
    """Wire a loader, a worker pool and a store together.

    Parameters
    ----------
    loader:
        Producer that fills the queue and closes it.
    store:
        Destination vector store.
    embedder_factory:
        Called once per worker, with the progress reporter's retry
        callback, to build that worker's own embedder.
    worker_count:
        Number of embedding workers.
    progress_interval:
        Seconds between progress snapshots.
    """

    def __init__(
        self,
        loader: NotionLoader,
        store: VectorStoreBase,
        embedder_factory: EmbedderFactory = gemini_embedder_factory,
        *,
        worker_count: int = settings.workers,
        progress_interval: float = settings.progress_interval,
        min_content_length: int = settings.min_embed_length,
    ) -> None:
        if worker_count < 1:
            raise ValueError(f"worker_count must be >= 1, got {worker_count}")
        self._loader = loader
        self._store = store
        self._embedder_factory = embedder_factory
        self.worker_count = worker_count
        self.progress_interval = progress_interval
        self.min_content_length = min_content_length

    @property
    def queue_capacity(self) -> int:
        return 2 * self.worker_count

    def run(self) -> IngestionReport:
        stats = PipelineStats()
        reporter = ProgressReporter(stats, interval=self.progress_interval)
        embedders = self._create_embedders(reporter.notify_retry)
        docs: BoundedQueue[ChunkDocument] = BoundedQueue(self.queue_capacity)

        logger.info("Starting ingestion with %d worker(s)", self.worker_count)
        reporter.start()
        fetch_summary: FetchSummary | None = None
        fetch_error: FetchError | None = None
        try:
            with ThreadPoolExecutor(max_workers=self.worker_count + 1, thread_name_prefix="ingest") as pool:
                worker_futures = [
                    pool.submit(
                        EmbeddingWorker(
                            worker_id,
                            embedder,
                            self._store,
                            stats,
                            min_content_length=self.min_content_length,
                        ).run,
                        docs,
                    )
                    for worker_id, embedder in enumerate(embedders)
                ]
                producer = pool.submit(self._loader.stream_documents, docs)

                wait(worker_futures)
                # Unblocks the producer if every worker died unexpectedly.
                docs.close()
                for future in worker_futures:
                    if future.exception() is not None:
                        logger.error("Embedding worker crashed", exc_info=future.exception())

                try:
                    fetch_summary = producer.result()
                except FetchError as exc:
                    logger.error("Producer failed: %s", exc)
                    fetch_error = exc
                except Exception as exc:
                    logger.error("Producer crashed", exc_info=exc)
                    fetch_error = FetchError(f"producer crashed: {exc!r}")
                    fetch_error.__cause__ = exc
        finally:
            reporter.stop()
            self._close_embedders(embedders)

        final = stats.snapshot()
        logger.info("Final: %s", final)
        return IngestionReport(stats=final, fetch=fetch_summary, error=fetch_error)

    def _create_embedders(self, on_retry: RetryCallback) -> list[Embedder]:
        embedders: list[Embedder] = []
        try:
            for _ in range(self.worker_count):
                embedders.append(self._embedder_factory(on_retry))
        except Exception:
            self._close_embedders(embedders)
            raise
        return embedders

    @staticmethod
    def _close_embedders(embedders: list[Embedder]) -> None:
        for embedder in embedders:
            try:
                embedder.close()
            except Exception:
                logger.warning("Failed to close embedder", exc_info=True)
