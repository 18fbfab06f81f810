"""
Remote — clients for the embedding and generation services.

Every call leaving the process goes through :class:`RateLimitedCaller`
so that rate-limit and quota errors are retried with a fixed delay while
any other failure surfaces immediately.
"""

from notion_rag.remote.embedder import Embedder, EmbeddingIntent, GeminiEmbedder
from notion_rag.remote.llm import Generator, get_llm
from notion_rag.remote.retry import RateLimitedCaller, RetryEvent, is_transient_error

__all__ = [
    "Embedder",
    "EmbeddingIntent",
    "GeminiEmbedder",
    "Generator",
    "RateLimitedCaller",
    "RetryEvent",
    "get_llm",
    "is_transient_error",
]
