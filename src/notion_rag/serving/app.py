"""FastAPI application exposing the knowledge base as a REST API."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, FastAPI
from pydantic import BaseModel, Field

from notion_rag.agent.searcher import RAGSearcher
from notion_rag.retrieval.base import VectorStoreBase
from notion_rag.retrieval.models import SearchResult

app = FastAPI(
    title="Notion RAG API",
    version="0.1.0",
    description="Semantic search and question answering over a Notion workspace.",
)


@lru_cache(maxsize=1)
def get_store() -> VectorStoreBase:
    """Open the configured vector store on first use."""
    from notion_rag.cli import build_store

    return build_store()


@lru_cache(maxsize=1)
def get_searcher() -> RAGSearcher:
    """Build the searcher from settings on first use."""
    from notion_rag.cli import build_searcher

    return build_searcher(get_store())


# ── Request / Response schemas ────────────────────────────────────────
class SearchRequest(BaseModel):
    """Semantic search over stored chunks."""

    query: str = Field(min_length=1)
    k: int | None = Field(default=None, ge=1)


class SearchHit(BaseModel):
    id: str
    title: str
    content: str
    similarity: float
    metadata: dict[str, str] = {}

    @classmethod
    def from_result(cls, result: SearchResult) -> SearchHit:
        doc = result.document
        return cls(
            id=doc.id,
            title=doc.title,
            content=doc.content,
            similarity=result.similarity,
            metadata=doc.metadata,
        )


class SearchResponse(BaseModel):
    results: list[SearchHit] = []


class QueryRequest(BaseModel):
    """Incoming question from the user."""

    query: str = Field(min_length=1)


class QueryResponse(BaseModel):
    """Answer returned by the searcher."""

    answer: str
    sources: list[SearchHit] = []


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/health")
def health(store: VectorStoreBase = Depends(get_store)) -> dict[str, str]:
    """Liveness probe; ``degraded`` when the vector store is unreachable."""
    return {"status": "ok" if store.health_check() else "degraded"}


@app.post("/search", response_model=SearchResponse)
def search(request: SearchRequest, searcher: RAGSearcher = Depends(get_searcher)) -> SearchResponse:
    """Return ranked chunks above the relevance threshold."""
    results = searcher.retriever.search(request.query, k=request.k)
    return SearchResponse(results=[SearchHit.from_result(r) for r in results])


@app.post("/query", response_model=QueryResponse)
def query(request: QueryRequest, searcher: RAGSearcher = Depends(get_searcher)) -> QueryResponse:
    """Answer a question from the knowledge base."""
    answer = searcher.answer(request.query)
    return QueryResponse(answer=answer.text, sources=[SearchHit.from_result(r) for r in answer.sources])
