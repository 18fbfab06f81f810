"""Abstract base class for vector-store backends.

Adding a new backend only requires subclassing :class:`VectorStoreBase`
and implementing the abstract methods.  Validation of vectors lives here
so every backend rejects bad input before touching storage.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Any, Sequence

from notion_rag.errors import InvalidVectorError
from notion_rag.retrieval.models import ChunkDocument


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / index / namespace.
    dimension:
        Expected vector size.  When *None* the first stored vector fixes it.
    """

    def __init__(self, collection_name: str, *, dimension: int | None = None) -> None:
        self.collection_name = collection_name
        self._dimension = dimension
        self._dimension_lock = threading.Lock()

    @property
    def dimension(self) -> int | None:
        return self._dimension

    # -- public API -----------------------------------------------------------

    def add(self, document: ChunkDocument) -> None:
        """Validate and persist *document*.

        Raises
        ------
        InvalidVectorError
            The document has no vector or its size does not match.
        """
        if not document.vector:
            raise InvalidVectorError(f"document {document.id} has no embedding vector")
        self._check_dimension(document.vector)
        self._upsert(
            document.id,
            document.vector,
            document.store_metadata(),
            document.content,
        )

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def _upsert(
        self,
        doc_id: str,
        vector: list[float],
        metadata: dict[str, str],
        content: str,
    ) -> None:
        """Insert or overwrite one record."""
        ...

    @abstractmethod
    def similarity_search(self, query_embedding: Sequence[float], *, k: int = 10) -> list[dict[str, Any]]:
        """Return up to *k* nearest neighbours of *query_embedding*.

        Each result dict **must** contain:

        * ``"id"`` – chunk identifier
        * ``"content"`` – the chunk text
        * ``"score"`` – cosine similarity (higher = more similar)
        * ``"metadata"`` – stored metadata dict
        """
        ...

    @abstractmethod
    def count(self) -> int:
        """Number of stored records."""
        ...

    @abstractmethod
    def get_by_id(self, doc_id: str) -> ChunkDocument:
        """Return the stored document; raise ``DocumentNotFoundError`` if absent."""
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...

    # -- optional overrides ---------------------------------------------------

    def delete(self, ids: list[str]) -> None:
        """Delete documents by their IDs.  Optional — raises by default."""
        raise NotImplementedError(f"{type(self).__name__} does not support delete")

    # -- internals ------------------------------------------------------------

    def _check_dimension(self, vector: Sequence[float]) -> None:
        with self._dimension_lock:
            if self._dimension is None:
                self._dimension = len(vector)
                return
        if len(vector) != self._dimension:
            raise InvalidVectorError(
                f"vector has dimension {len(vector)}, store expects {self._dimension}"
            )
