"""Embedding clients.

Each :class:`GeminiEmbedder` owns its own LangChain client and passes the
embedding intent per call, so instances can be used from separate worker
threads without sharing any task-type state.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum

from langchain_google_genai import GoogleGenerativeAIEmbeddings

from notion_rag.config import settings
from notion_rag.errors import RemoteCallError
from notion_rag.remote.retry import RateLimitedCaller

logger = logging.getLogger(__name__)


class EmbeddingIntent(str, Enum):
    """What the vector will be used for; maps onto Gemini task types."""

    QUERY = "RETRIEVAL_QUERY"
    DOCUMENT = "RETRIEVAL_DOCUMENT"


class Embedder(ABC):
    """Text → fixed-dimension vector."""

    @abstractmethod
    def embed(self, text: str, intent: EmbeddingIntent) -> list[float]:
        """Return the embedding of *text* for the given *intent*."""
        ...

    def close(self) -> None:
        """Release client resources.  No-op by default."""


class GeminiEmbedder(Embedder):
    """Gemini embedding client wrapped in a :class:`RateLimitedCaller`.

    Parameters
    ----------
    api_key:
        Google Gemini API key.
    model:
        Embedding model id.
    output_dimensionality:
        Requested vector size; must match the vector store.
    caller:
        Retry wrapper.  A fresh one built from settings when *None*.
    """

    def __init__(
        self,
        api_key: str = settings.gemini_api_key,
        *,
        model: str = settings.embedding_model,
        output_dimensionality: int = settings.embedding_dimension,
        caller: RateLimitedCaller | None = None,
    ) -> None:
        self._client = GoogleGenerativeAIEmbeddings(model=model, google_api_key=api_key)
        self._output_dimensionality = output_dimensionality
        self._caller = caller or RateLimitedCaller(name="embedding")

    def embed(self, text: str, intent: EmbeddingIntent) -> list[float]:
        vector = self._caller.call(
            lambda: self._client.embed_query(
                text,
                task_type=intent.value,
                output_dimensionality=self._output_dimensionality,
            )
        )
        if not vector:
            raise RemoteCallError("embedding response was empty")
        return [float(v) for v in vector]
