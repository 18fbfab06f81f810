"""Question answering over the Notion knowledge base.

Flow: embed the question (query intent) → over-fetch neighbours →
relevance filter → numbered context → LLM answer.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from notion_rag.agent.prompts import build_answer_prompt, build_context
from notion_rag.config import settings
from notion_rag.remote.llm import Generator
from notion_rag.retrieval.models import SearchResult
from notion_rag.retrieval.retriever import SemanticRetriever

logger = logging.getLogger(__name__)

NO_RELEVANT_DOCUMENTS = "No sufficiently relevant documents were found for this question."


class Answer(BaseModel):
    """Generated answer plus the chunks it was grounded on."""

    text: str
    sources: list[SearchResult] = Field(default_factory=list)


class RAGSearcher:
    """Retrieve relevant chunks and generate an answer from them.

    Parameters
    ----------
    retriever:
        Retriever with an embedder attached.
    generator:
        Text generator.
    top_k:
        Candidates requested from the store before threshold filtering.
    """

    def __init__(
        self,
        retriever: SemanticRetriever,
        generator: Generator,
        *,
        top_k: int = settings.search_top_k,
    ) -> None:
        self.retriever = retriever
        self._generator = generator
        self.top_k = top_k

    def answer(self, question: str) -> Answer:
        results = self.retriever.search(question, k=self.top_k)
        if not results:
            logger.info("No results above threshold for %r", question)
            return Answer(text=NO_RELEVANT_DOCUMENTS)

        prompt = build_answer_prompt(build_context(results), question)
        text = self._generator.generate(prompt)
        return Answer(text=text, sources=results)
