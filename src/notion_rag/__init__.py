"""notion-rag — concurrent Notion ingestion and semantic search with Gemini."""

__version__ = "0.1.0"
