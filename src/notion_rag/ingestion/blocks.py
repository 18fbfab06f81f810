"""Rendering of Notion blocks to plain text.

Blocks are parsed into a closed set of :class:`BlockKind` variants and
rendered through a dispatch table that covers every variant.  Types the
table does not know become :attr:`BlockKind.UNSUPPORTED` and render as an
explicit *ignored* outcome, so callers can count what was dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from notion_rag.ingestion.notion_client import extract_rich_text

logger = logging.getLogger(__name__)


class BlockKind(str, Enum):
    PARAGRAPH = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    TO_DO = "to_do"
    CODE = "code"
    QUOTE = "quote"
    CALLOUT = "callout"
    TOGGLE = "toggle"
    CHILD_PAGE = "child_page"
    CHILD_DATABASE = "child_database"
    DIVIDER = "divider"
    TABLE = "table"
    TABLE_ROW = "table_row"
    LINK_TO_PAGE = "link_to_page"
    BOOKMARK = "bookmark"
    IMAGE = "image"
    VIDEO = "video"
    FILE = "file"
    UNSUPPORTED = "unsupported"

    @classmethod
    def parse(cls, raw_type: str) -> BlockKind:
        try:
            return cls(raw_type)
        except ValueError:
            return cls.UNSUPPORTED


# Kinds that point at other pages; their children are never fetched.
LINK_KINDS = frozenset({BlockKind.CHILD_PAGE, BlockKind.CHILD_DATABASE})


@dataclass(frozen=True)
class Block:
    """A parsed Notion block."""

    id: str
    kind: BlockKind
    raw_type: str
    payload: dict[str, Any] = field(default_factory=dict)
    has_children: bool = False

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Block:
        raw_type = data.get("type", "")
        return cls(
            id=data.get("id", ""),
            kind=BlockKind.parse(raw_type),
            raw_type=raw_type,
            payload=data.get(raw_type) or {},
            has_children=bool(data.get("has_children")),
        )

    @property
    def descends(self) -> bool:
        """Whether the renderer should recurse into this block's children."""
        return self.has_children and self.kind not in LINK_KINDS


@dataclass(frozen=True)
class RenderedBlock:
    text: str = ""
    ignored: bool = False


def _rich(block: Block, key: str = "rich_text") -> str:
    return extract_rich_text(block.payload.get(key))


def _captioned(label: str) -> Callable[[Block], str]:
    def render(block: Block) -> str:
        caption = _rich(block, "caption")
        return f"[{label}: {caption}]" if caption else f"[{label}]"

    return render


def _to_do(block: Block) -> str:
    mark = "x" if block.payload.get("checked") else " "
    return f"- [{mark}] {_rich(block)}"


def _code(block: Block) -> str:
    language = block.payload.get("language", "")
    return f"```{language}\n{_rich(block)}\n```"


def _table_row(block: Block) -> str:
    cells = [extract_rich_text(cell) for cell in block.payload.get("cells", [])]
    cells = [c for c in cells if c]
    return "| " + " | ".join(cells) + " |" if cells else ""


def _bookmark(block: Block) -> str:
    url = block.payload.get("url", "")
    caption = _rich(block, "caption")
    return f"[Bookmark: {caption}]({url})" if caption else f"[Bookmark: {url}]"


def _link_to_page(block: Block) -> str:
    target = block.payload.get("page_id") or block.payload.get("database_id") or ""
    return f"[Page link: {target}]"


_RENDERERS: dict[BlockKind, Callable[[Block], str]] = {
    BlockKind.PARAGRAPH: _rich,
    BlockKind.HEADING_1: lambda b: "# " + _rich(b),
    BlockKind.HEADING_2: lambda b: "## " + _rich(b),
    BlockKind.HEADING_3: lambda b: "### " + _rich(b),
    BlockKind.BULLETED_LIST_ITEM: lambda b: "- " + _rich(b),
    BlockKind.NUMBERED_LIST_ITEM: lambda b: "1. " + _rich(b),
    BlockKind.TO_DO: _to_do,
    BlockKind.CODE: _code,
    BlockKind.QUOTE: lambda b: "> " + _rich(b),
    BlockKind.CALLOUT: _rich,
    BlockKind.TOGGLE: _rich,
    BlockKind.CHILD_PAGE: lambda b: f"[Page link: {b.payload.get('title', '')}]",
    BlockKind.CHILD_DATABASE: lambda b: f"[Database link: {b.payload.get('title', '')}]",
    BlockKind.DIVIDER: lambda b: "",
    BlockKind.TABLE: lambda b: "",  # rows arrive as children
    BlockKind.TABLE_ROW: _table_row,
    BlockKind.LINK_TO_PAGE: _link_to_page,
    BlockKind.BOOKMARK: _bookmark,
    BlockKind.IMAGE: _captioned("Image"),
    BlockKind.VIDEO: _captioned("Video"),
    BlockKind.FILE: _captioned("File"),
}

_missing = set(BlockKind) - set(_RENDERERS) - {BlockKind.UNSUPPORTED}
if _missing:
    raise RuntimeError(f"no renderer for {sorted(k.value for k in _missing)}")


def render_block(block: Block) -> RenderedBlock:
    """Render *block* to text; unsupported types come back ``ignored``."""
    renderer = _RENDERERS.get(block.kind)
    if renderer is None:
        logger.debug("Ignoring unsupported block type %r (%s)", block.raw_type, block.id)
        return RenderedBlock(ignored=True)
    return RenderedBlock(text=renderer(block))
