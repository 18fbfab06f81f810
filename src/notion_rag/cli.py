"""Command-line entry point.

    python -m notion_rag --reload --workers 8   # ingest, then ask questions
    python -m notion_rag --search "onboarding"  # ranked chunks only
    python -m notion_rag --show <chunk-id>
    python -m notion_rag --list
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, TextIO

from notion_rag.agent.searcher import RAGSearcher
from notion_rag.config import settings
from notion_rag.errors import NotionRAGError
from notion_rag.ingestion.loader import NotionLoader
from notion_rag.ingestion.notion_client import NotionClient
from notion_rag.ingestion.pipeline import IngestionPipeline, IngestionReport
from notion_rag.remote.embedder import GeminiEmbedder
from notion_rag.remote.llm import Generator
from notion_rag.retrieval.base import VectorStoreBase
from notion_rag.retrieval.retriever import SemanticRetriever

logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"exit", "q", "quit"}
PREVIEW_CHARS = 500


def build_store() -> VectorStoreBase:
    from notion_rag.retrieval.chroma_store import ChromaVectorStore

    return ChromaVectorStore()


def build_searcher(store: VectorStoreBase | None = None) -> RAGSearcher:
    settings.require("gemini_api_key")
    retriever = SemanticRetriever(store or build_store(), GeminiEmbedder())
    return RAGSearcher(retriever, Generator())


def run_ingestion(store: VectorStoreBase, workers: int) -> IngestionReport:
    settings.require("notion_api_key", "gemini_api_key")
    client = NotionClient()
    try:
        pipeline = IngestionPipeline(NotionLoader(client), store, worker_count=workers)
        return pipeline.run()
    finally:
        client.close()


def print_results(retriever: SemanticRetriever, query: str, out: TextIO = sys.stdout) -> None:
    results = retriever.search(query)
    if not results:
        print("No results above the relevance threshold.", file=out)
        return
    print(f"{len(results)} result(s) for {query!r}\n", file=out)
    for i, result in enumerate(results, start=1):
        doc = result.document
        content = doc.content
        if len(content) > PREVIEW_CHARS:
            content = content[:PREVIEW_CHARS] + "..."
        print(f"── {i}. {doc.title or 'Untitled'}  (similarity {result.similarity:.3f})", file=out)
        print(f"id: {doc.id}", file=out)
        if doc.metadata.get("url"):
            print(f"url: {doc.metadata['url']}", file=out)
        print(content, file=out)
        print(file=out)


def print_document(store: VectorStoreBase, doc_id: str, out: TextIO = sys.stdout) -> None:
    doc = store.get_by_id(doc_id)
    print(f"id: {doc.id}", file=out)
    for label, value in (
        ("title", doc.title),
        ("parent", doc.parent_id),
        ("url", doc.metadata.get("url")),
        ("created", doc.metadata.get("created")),
        ("last edit", doc.metadata.get("last_edit")),
    ):
        if value:
            print(f"{label}: {value}", file=out)
    print(f"\ncontent ({len(doc.content)} chars):\n---\n{doc.content}\n---", file=out)


def repl(
    searcher: RAGSearcher,
    *,
    read: Callable[[str], str] = input,
    out: TextIO = sys.stdout,
) -> None:
    """Ask questions until EOF or an exit command."""
    print("Notion RAG — ask a question ('exit' or 'q' to quit)\n", file=out)
    while True:
        try:
            question = read("> ").strip()
        except (EOFError, KeyboardInterrupt):
            break
        if not question:
            continue
        if question.lower() in EXIT_COMMANDS:
            break
        try:
            answer = searcher.answer(question)
        except NotionRAGError as exc:
            print(f"error: {exc}\n", file=out)
            continue
        print(f"\n{answer.text}\n", file=out)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="notion-rag", description="Semantic search over a Notion workspace")
    parser.add_argument("--reload", action="store_true", help="Fetch Notion pages and rebuild the index")
    parser.add_argument(
        "--workers",
        type=int,
        default=settings.workers,
        help=f"Embedding worker count (default: {settings.workers})",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--list", action="store_true", help="Show how many chunks are stored")
    mode.add_argument("--show", metavar="ID", help="Print one stored chunk")
    mode.add_argument("--search", metavar="TEXT", help="Print ranked chunks for TEXT")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.workers < 1:
        logger.error("--workers must be >= 1")
        return 2

    try:
        store = build_store()
        count = store.count()

        if args.list:
            print(f"{count} chunk(s) stored in collection {store.collection_name!r}")
            return 0
        if args.show:
            print_document(store, args.show)
            return 0
        if args.search:
            settings.require("gemini_api_key")
            print_results(SemanticRetriever(store, GeminiEmbedder()), args.search)
            return 0

        if args.reload:
            report = run_ingestion(store, args.workers)
            report.raise_for_error()
            print(f"Stored {store.count()} chunk(s). {report.stats}")
        elif count == 0:
            logger.error("The index is empty; run with --reload to ingest Notion pages first.")
            return 1

        repl(build_searcher(store))
    except NotionRAGError as exc:
        logger.error("%s", exc)
        return 1
    return 0
