"""Exception hierarchy shared by every layer of the package."""

from __future__ import annotations


class NotionRAGError(Exception):
    """Base class for all errors raised by ``notion_rag``."""


class ConfigError(NotionRAGError):
    """Required configuration is missing or invalid."""


class RemoteCallError(NotionRAGError):
    """A remote service call failed and will not be retried."""


class MaxRetriesExceededError(RemoteCallError):
    """A transient failure persisted through every retry attempt."""

    def __init__(self, message: str, *, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class NotionAPIError(NotionRAGError):
    """The Notion API returned an error or could not be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FetchError(NotionRAGError):
    """The document stream could not be enumerated and was aborted."""


class InvalidVectorError(NotionRAGError, ValueError):
    """A vector is missing, empty, or has the wrong dimensionality."""


class DocumentNotFoundError(NotionRAGError, KeyError):
    """No stored document matches the requested id."""

    def __str__(self) -> str:  # KeyError quotes its argument otherwise
        return str(self.args[0]) if self.args else ""


class QueueClosedError(NotionRAGError):
    """The queue is closed (and, for readers, fully drained)."""
