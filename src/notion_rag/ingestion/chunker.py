"""Fixed-size text chunking."""

from __future__ import annotations

from notion_rag.config import settings
from notion_rag.retrieval.models import ChunkDocument


def chunk_text(text: str, max_size: int = settings.chunk_size) -> list[str]:
    """Split *text* into consecutive pieces of at most *max_size* characters.

    Sizes count code points, not bytes.  Joining the pieces gives back
    *text* exactly, and every piece except the last is exactly
    *max_size* long.  Text that already fits (including the empty
    string) is returned as a single piece.
    """
    if max_size <= 0:
        raise ValueError(f"max_size must be positive, got {max_size}")
    if len(text) <= max_size:
        return [text]
    return [text[start : start + max_size] for start in range(0, len(text), max_size)]


def chunk_document(
    parent_id: str,
    title: str,
    content: str,
    metadata: dict[str, str] | None = None,
    *,
    max_size: int = settings.chunk_size,
) -> list[ChunkDocument]:
    """Cut one page into :class:`ChunkDocument` objects, in chunk order.

    Every chunk shares *metadata* and *parent_id*; ids are
    ``<parent_id>-chunk-<index>``.
    """
    meta = dict(metadata or {})
    return [
        ChunkDocument(
            id=f"{parent_id}-chunk-{index}",
            title=title,
            content=piece,
            metadata=meta,
            parent_id=parent_id,
        )
        for index, piece in enumerate(chunk_text(content, max_size))
    ]
