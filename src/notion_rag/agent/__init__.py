"""
Agent — answer synthesis on top of retrieval.

Public API
----------
- :class:`RAGSearcher` — question → :class:`Answer`.
- :func:`build_context` / :func:`build_answer_prompt` — prompt helpers.
"""

from notion_rag.agent.prompts import build_answer_prompt, build_context
from notion_rag.agent.searcher import Answer, RAGSearcher

__all__ = [
    "Answer",
    "RAGSearcher",
    "build_answer_prompt",
    "build_context",
]
