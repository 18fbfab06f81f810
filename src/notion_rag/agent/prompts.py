"""Prompt templates for answer synthesis.

Keeping prompts in one place makes them easy to audit and tweak without
touching retrieval code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from notion_rag.retrieval.models import SearchResult

CONTEXT_SEPARATOR = "\n\n---\n\n"

ANSWER_TEMPLATE = """\
You are my personal Notion assistant. Answer the question using only the
[Context] below. If the context does not contain the answer, say that you
don't know instead of making something up.

[Context]
{context}

[Question]
{question}

Answer:"""


def build_context(results: list[SearchResult]) -> str:
    """Number the retrieved chunks and join them into one context block."""
    parts = [
        f"[Document {i}: {r.document.title or 'Untitled'}]\n{r.document.content}"
        for i, r in enumerate(results, start=1)
    ]
    return CONTEXT_SEPARATOR.join(parts)


def build_answer_prompt(context: str, question: str) -> str:
    return ANSWER_TEMPLATE.format(context=context, question=question)
