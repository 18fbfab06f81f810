"""Shared configuration loaded from environment / ``.env``."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

from notion_rag.errors import ConfigError


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Notion
    notion_api_key: str = Field(default="", description="Notion integration token")
    notion_api_url: str = "https://api.notion.com/v1"
    notion_version: str = "2022-06-28"
    notion_page_size: int = Field(default=100, ge=1, le=100)
    notion_request_delay: float = Field(
        default=0.35,
        ge=0.0,
        description="Pause (seconds) after every Notion call to stay under the API rate limit",
    )
    max_block_depth: int = Field(default=20, ge=0)
    request_timeout: float = 60.0

    # Gemini / LLM
    gemini_api_key: str = Field(default="", description="Google Gemini API key")
    embedding_model: str = "models/gemini-embedding-001"
    embedding_dimension: int = Field(default=768, ge=1)
    llm_provider: str = Field(default="gemini", description="'gemini' or 'openai'")
    llm_model_name: str = "gemini-2.5-flash"
    llm_base_url: str = Field(
        default="",
        description=(
            "Base URL of an OpenAI-compatible endpoint. Only used when "
            "llm_provider is 'openai'."
        ),
    )
    openai_api_key: str = ""

    # Vector store
    db_path: str = "./my-knowledge.db"
    chroma_host: str = Field(default="", description="Remote Chroma host; empty means local persistent DB")
    chroma_port: int = 8000
    chroma_collection: str = "notion_docs"

    # Ingestion
    workers: int = Field(default=5, ge=1, description="Number of embedding workers")
    chunk_size: int = Field(default=1000, ge=1)
    min_page_length: int = 10
    min_embed_length: int = 50
    progress_interval: float = Field(default=2.0, gt=0.0)

    # Remote call retries
    max_retries: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=30.0, ge=0.0)

    # Retrieval
    relevance_threshold: float = Field(default=0.70, ge=0.0, le=1.0)
    search_top_k: int = Field(default=10, ge=1)

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    def require(self, *names: str) -> None:
        """Raise :class:`ConfigError` if any of *names* is empty."""
        missing = [name for name in names if not getattr(self, name)]
        if missing:
            env_names = ", ".join(name.upper() for name in missing)
            raise ConfigError(f"Missing required settings: {env_names}")


# Singleton — import `settings` wherever needed.
settings = Settings()
