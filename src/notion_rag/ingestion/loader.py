"""Notion producer — stream every page as chunk documents.

Pages are listed one search page at a time (cursor-driven), each page's
block tree is rendered to text, short pages are skipped, and the rest
are chunked and pushed onto a :class:`BoundedQueue`.  The push blocks
when the queue is full.  The queue is always closed when the stream
ends, successfully or not.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterator

from notion_rag.config import settings
from notion_rag.errors import FetchError, QueueClosedError
from notion_rag.ingestion.blocks import Block, render_block
from notion_rag.ingestion.channel import BoundedQueue
from notion_rag.ingestion.chunker import chunk_document
from notion_rag.ingestion.notion_client import NotionClient, PageSummary
from notion_rag.retrieval.models import ChunkDocument

logger = logging.getLogger(__name__)

PART_SEPARATOR = "\n\n"


@dataclass
class FetchSummary:
    """What the producer did during one stream."""

    pages_seen: int = 0
    pages_skipped: int = 0
    pages_failed: int = 0
    chunks_emitted: int = 0
    blocks_ignored: int = 0


class NotionLoader:
    """Producer half of the ingestion pipeline.

    Parameters
    ----------
    client:
        Notion API client.
    chunk_size:
        Maximum chunk length in characters.
    min_content_length:
        Pages whose rendered text is shorter than this are skipped.
    request_delay:
        Pause after every Notion call, in seconds.
    max_depth:
        Deepest block nesting level that is rendered.
    sleep:
        Wait function, injectable for tests.
    """

    def __init__(
        self,
        client: NotionClient,
        *,
        chunk_size: int = settings.chunk_size,
        min_content_length: int = settings.min_page_length,
        request_delay: float = settings.notion_request_delay,
        max_depth: int = settings.max_block_depth,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self.chunk_size = chunk_size
        self.min_content_length = min_content_length
        self.request_delay = request_delay
        self.max_depth = max_depth
        self._sleep = sleep
        self._summary = FetchSummary()

    # -- public API -----------------------------------------------------------

    def stream_documents(self, sink: BoundedQueue[ChunkDocument]) -> FetchSummary:
        """Push every chunk of every page onto *sink*, then close it.

        A page whose content cannot be fetched is logged and skipped.

        Raises
        ------
        FetchError
            Listing pages failed, or *sink* was closed by someone else.
        """
        self._summary = FetchSummary()
        try:
            for page in self.iter_pages():
                self._summary.pages_seen += 1
                for doc in self._page_documents(page):
                    sink.put(doc)
                    self._summary.chunks_emitted += 1
        except QueueClosedError as exc:
            raise FetchError("document sink closed before the stream finished") from exc
        finally:
            sink.close()

        logger.info(
            "Producer finished: %d pages (%d skipped, %d failed), %d chunks",
            self._summary.pages_seen,
            self._summary.pages_skipped,
            self._summary.pages_failed,
            self._summary.chunks_emitted,
        )
        return self._summary

    def iter_pages(self) -> Iterator[PageSummary]:
        """Yield pages lazily, fetching the next listing only when needed.

        Raises
        ------
        FetchError
            A listing request failed.
        """
        cursor: str | None = None
        while True:
            try:
                listing = self._client.list_pages(cursor)
            except Exception as exc:
                raise FetchError(f"failed to list Notion pages: {exc}") from exc
            self._throttle()
            logger.info("Listed %d page(s)%s", len(listing.items), " (more pending)" if listing.has_more else "")
            yield from listing.items
            if not listing.has_more or not listing.next_cursor:
                return
            cursor = listing.next_cursor

    def fetch_page_content(self, page_id: str) -> str:
        """Render the full block tree of *page_id* to text."""
        parts: list[str] = []
        self._collect_blocks(page_id, parts, depth=0)
        content = PART_SEPARATOR.join(parts)
        if not content.strip():
            logger.warning("Page %s has no text content", page_id)
        return content

    # -- internals ------------------------------------------------------------

    def _page_documents(self, page: PageSummary) -> list[ChunkDocument]:
        try:
            content = self.fetch_page_content(page.id)
        except Exception as exc:
            self._summary.pages_failed += 1
            logger.warning("Failed to fetch page %s (%s): %s", page.id, page.title, exc)
            return []

        length = len(content)
        if length < self.min_content_length:
            self._summary.pages_skipped += 1
            logger.info("Skipping %s (%s): content too short (%d chars)", page.id, page.title, length)
            return []

        docs = chunk_document(page.id, page.title, content, page.metadata(), max_size=self.chunk_size)
        logger.info("Page %s (%s): %d chars, %d chunk(s)", page.id, page.title, length, len(docs))
        return docs

    def _collect_blocks(self, block_id: str, parts: list[str], depth: int) -> None:
        if depth > self.max_depth:
            return
        for raw in self._iter_children(block_id):
            block = Block.from_api(raw)
            rendered = render_block(block)
            if rendered.ignored:
                self._summary.blocks_ignored += 1
            elif rendered.text:
                parts.append(rendered.text)
            if block.descends:
                self._collect_blocks(block.id, parts, depth + 1)

    def _iter_children(self, block_id: str) -> Iterator[dict]:
        cursor: str | None = None
        while True:
            listing = self._client.list_block_children(block_id, cursor)
            self._throttle()
            yield from listing.items
            if not listing.has_more or not listing.next_cursor:
                return
            cursor = listing.next_cursor

    def _throttle(self) -> None:
        if self.request_delay > 0:
            self._sleep(self.request_delay)
