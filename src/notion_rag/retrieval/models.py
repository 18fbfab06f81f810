"""Domain models for stored chunks and search results."""

from __future__ import annotations

from typing import Sequence

from pydantic import BaseModel, ConfigDict, Field

TITLE_SEPARATOR = "\n\n"


class ChunkDocument(BaseModel):
    """One chunk of a Notion page, the unit that is embedded and stored.

    Created by the loader without a vector, given its vector exactly once
    by an embedding worker (:meth:`with_vector`), then handed to the store.
    Instances are frozen; attaching a vector returns a copy.

    Attributes
    ----------
    id:
        ``<parent_id>-chunk-<index>``; unique within a run.  Re-ingesting
        the same id overwrites the stored record.
    title:
        Title of the parent page.
    content:
        The chunk text (never empty).
    vector:
        Embedding, ``None`` until embedded.
    metadata:
        Flat string metadata (``page_id``, ``url``, ``created``, …).
    parent_id:
        Id of the page the chunk was cut from.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    title: str = ""
    content: str = Field(min_length=1)
    vector: list[float] | None = None
    metadata: dict[str, str] = Field(default_factory=dict)
    parent_id: str = ""

    def with_vector(self, vector: Sequence[float]) -> ChunkDocument:
        return self.model_copy(update={"vector": [float(v) for v in vector]})

    def without_vector(self) -> ChunkDocument:
        return self.model_copy(update={"vector": None})

    def embedding_text(self, separator: str = TITLE_SEPARATOR) -> str:
        """Text sent to the embedder: title and body, so titles are searchable."""
        if self.title:
            return f"{self.title}{separator}{self.content}"
        return self.content

    def store_metadata(self) -> dict[str, str]:
        """Metadata persisted next to the vector; always has title and parent_id."""
        return {**self.metadata, "title": self.title, "parent_id": self.parent_id}

    @classmethod
    def from_store(cls, doc_id: str, content: str, metadata: dict[str, str] | None) -> ChunkDocument:
        """Rebuild a (vector-less) document from a stored record."""
        meta = dict(metadata or {})
        return cls(
            id=doc_id,
            title=meta.get("title", ""),
            content=content,
            metadata=meta,
            parent_id=meta.get("parent_id", ""),
        )


class SearchResult(BaseModel):
    """A retrieved chunk together with its cosine similarity to the query."""

    document: ChunkDocument
    similarity: float = Field(ge=0.0, le=1.0)

    def __str__(self) -> str:  # noqa: D105
        title = self.document.title or "Untitled"
        return f"[{title} · {self.similarity:.3f}] {self.document.content[:120]}…"
