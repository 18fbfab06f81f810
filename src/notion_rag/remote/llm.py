"""LLM initialisation — single place to swap providers.

Supports two modes:

1. **Gemini** (default) — set ``GEMINI_API_KEY``.
2. **OpenAI-compatible** — set ``LLM_PROVIDER=openai`` plus
   ``OPENAI_API_KEY``, or point ``LLM_BASE_URL`` at any server exposing
   ``/v1/chat/completions`` (vLLM, Ollama, …).
"""

from __future__ import annotations

import logging
from typing import Any

from langchain_core.language_models import BaseChatModel

from notion_rag.config import settings
from notion_rag.errors import ConfigError
from notion_rag.remote.retry import RateLimitedCaller

logger = logging.getLogger(__name__)

NO_ANSWER = "Unable to generate an answer."


def get_llm(temperature: float = 0.0) -> BaseChatModel:
    """Return the configured chat model."""
    provider = settings.llm_provider.lower()

    if provider == "gemini":
        from langchain_google_genai import ChatGoogleGenerativeAI

        return ChatGoogleGenerativeAI(
            model=settings.llm_model_name,
            temperature=temperature,
            google_api_key=settings.gemini_api_key,
        )

    if provider == "openai":
        from langchain_openai import ChatOpenAI

        kwargs: dict[str, Any] = {
            "model": settings.llm_model_name,
            "temperature": temperature,
        }
        if settings.llm_base_url:
            logger.info("Using OpenAI-compatible endpoint: %s", settings.llm_base_url)
            kwargs["base_url"] = settings.llm_base_url
            # Self-hosted servers don't need a real key; LangChain requires a non-empty value.
            kwargs["api_key"] = settings.openai_api_key or "EMPTY"
        else:
            kwargs["api_key"] = settings.openai_api_key
        return ChatOpenAI(**kwargs)

    raise ConfigError(f"Unsupported llm_provider={settings.llm_provider!r}. Choose from: gemini, openai.")


def _message_text(content: Any) -> str:
    """Flatten a chat message's content (str or list of parts) to text."""
    if isinstance(content, str):
        return content
    parts: list[str] = []
    for part in content or []:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type") == "text":
            parts.append(part.get("text", ""))
    return "\n".join(p for p in parts if p)


class Generator:
    """Prompt → text, through the rate-limited caller."""

    def __init__(
        self,
        llm: BaseChatModel | None = None,
        *,
        caller: RateLimitedCaller | None = None,
    ) -> None:
        self._llm = llm if llm is not None else get_llm()
        self._caller = caller or RateLimitedCaller(name="generation")

    def generate(self, prompt: str) -> str:
        response = self._caller.call(lambda: self._llm.invoke(prompt))
        text = _message_text(response.content).strip()
        return text or NO_ANSWER
