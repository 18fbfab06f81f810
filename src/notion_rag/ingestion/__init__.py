"""
Ingestion — stream Notion pages into the vector store.

A single producer (:class:`NotionLoader`) fetches and chunks pages onto a
bounded queue; a pool of :class:`EmbeddingWorker` threads embeds and
stores them.  :class:`IngestionPipeline` runs both and reports stats.
"""

from notion_rag.ingestion.channel import BoundedQueue
from notion_rag.ingestion.chunker import chunk_document, chunk_text
from notion_rag.ingestion.loader import FetchSummary, NotionLoader
from notion_rag.ingestion.notion_client import NotionClient
from notion_rag.ingestion.pipeline import IngestionPipeline, IngestionReport
from notion_rag.ingestion.stats import Outcome, PipelineStats, StatsSnapshot
from notion_rag.ingestion.worker import EmbeddingWorker

__all__ = [
    "BoundedQueue",
    "EmbeddingWorker",
    "FetchSummary",
    "IngestionPipeline",
    "IngestionReport",
    "NotionClient",
    "NotionLoader",
    "Outcome",
    "PipelineStats",
    "StatsSnapshot",
    "chunk_document",
    "chunk_text",
]
