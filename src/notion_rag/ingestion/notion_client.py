"""Minimal Notion REST client — page search and block children."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import requests

from notion_rag.config import settings
from notion_rag.errors import NotionAPIError

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"


@dataclass(frozen=True)
class PageSummary:
    """The parts of a Notion page object the loader needs."""

    id: str
    title: str
    url: str
    created_time: str = ""
    last_edited_time: str = ""

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> PageSummary:
        page_id = data["id"]
        return cls(
            id=page_id,
            title=extract_page_title(data.get("properties", {})),
            url=data.get("url") or f"https://www.notion.so/{page_id.replace('-', '')}",
            created_time=data.get("created_time", ""),
            last_edited_time=data.get("last_edited_time", ""),
        )

    def metadata(self) -> dict[str, str]:
        return {
            "page_id": self.id,
            "title": self.title,
            "url": self.url,
            "created": self.created_time,
            "last_edit": self.last_edited_time,
        }


@dataclass(frozen=True)
class PageListing:
    """One page of search results."""

    items: list[PageSummary] = field(default_factory=list)
    next_cursor: str | None = None
    has_more: bool = False


@dataclass(frozen=True)
class BlockListing:
    """One page of a block's children (raw block objects)."""

    items: list[dict[str, Any]] = field(default_factory=list)
    next_cursor: str | None = None
    has_more: bool = False


def extract_rich_text(rich_text: list[dict[str, Any]] | None) -> str:
    """Concatenate the ``plain_text`` of every rich-text span."""
    return "".join(span.get("plain_text", "") for span in rich_text or [])


def extract_page_title(properties: dict[str, Any]) -> str:
    """Title from ``title`` or ``Name``, else any title-typed property."""
    candidates = [properties.get("title"), properties.get("Name")]
    candidates.extend(p for p in properties.values() if isinstance(p, dict) and p.get("type") == "title")
    for prop in candidates:
        if isinstance(prop, dict) and prop.get("type") == "title":
            title = extract_rich_text(prop.get("title"))
            if title:
                return title
    return UNTITLED


class NotionClient:
    """Thin wrapper over the two Notion endpoints ingestion uses.

    Parameters
    ----------
    api_key:
        Notion integration token.
    base_url:
        API root, e.g. ``https://api.notion.com/v1``.
    timeout:
        Per-request timeout in seconds.
    session:
        Optional pre-configured ``requests.Session``.
    """

    def __init__(
        self,
        api_key: str = settings.notion_api_key,
        *,
        base_url: str = settings.notion_api_url,
        notion_version: str = settings.notion_version,
        page_size: int = settings.notion_page_size,
        timeout: float = settings.request_timeout,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self.page_size = page_size
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Notion-Version": notion_version,
                "Content-Type": "application/json",
            }
        )

    def list_pages(self, cursor: str | None = None) -> PageListing:
        """Return one page of pages visible to the integration."""
        body: dict[str, Any] = {
            "filter": {"property": "object", "value": "page"},
            "page_size": self.page_size,
        }
        if cursor:
            body["start_cursor"] = cursor
        data = self._request("POST", "/search", json=body)
        items = [PageSummary.from_api(obj) for obj in data.get("results", []) if obj.get("object") == "page"]
        return PageListing(items=items, next_cursor=data.get("next_cursor"), has_more=bool(data.get("has_more")))

    def list_block_children(self, block_id: str, cursor: str | None = None) -> BlockListing:
        """Return one page of the direct children of *block_id*."""
        params: dict[str, Any] = {"page_size": self.page_size}
        if cursor:
            params["start_cursor"] = cursor
        data = self._request("GET", f"/blocks/{block_id}/children", params=params)
        return BlockListing(
            items=list(data.get("results", [])),
            next_cursor=data.get("next_cursor"),
            has_more=bool(data.get("has_more")),
        )

    def close(self) -> None:
        self._session.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        try:
            resp = self._session.request(method, url, timeout=self._timeout, **kwargs)
            resp.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise NotionAPIError(f"{method} {path} failed ({status}): {exc}", status_code=status) from exc
        except requests.RequestException as exc:
            raise NotionAPIError(f"{method} {path} failed: {exc}") from exc
        try:
            return resp.json()
        except ValueError as exc:
            raise NotionAPIError(f"{method} {path} returned invalid JSON", status_code=resp.status_code) from exc
