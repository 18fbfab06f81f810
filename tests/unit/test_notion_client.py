"""Unit tests for the Notion REST client."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from notion_rag.errors import NotionAPIError
from notion_rag.ingestion.notion_client import NotionClient, PageSummary, extract_page_title


def _response(payload: dict, status: int = 200) -> MagicMock:
    resp = MagicMock(status_code=status)
    resp.json.return_value = payload
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error", response=resp)
    else:
        resp.raise_for_status.return_value = None
    return resp


@pytest.fixture()
def session() -> MagicMock:
    s = MagicMock(spec=requests.Session)
    s.headers = {}
    return s


def _page_obj(page_id: str, title: str) -> dict:
    return {
        "object": "page",
        "id": page_id,
        "url": f"https://www.notion.so/{page_id}",
        "created_time": "2024-01-01T00:00:00.000Z",
        "last_edited_time": "2024-01-02T00:00:00.000Z",
        "properties": {"title": {"type": "title", "title": [{"plain_text": title}]}},
    }


class TestNotionClient:
    def test_auth_headers(self, session: MagicMock) -> None:
        NotionClient("secret", session=session, notion_version="2022-06-28")
        assert session.headers["Authorization"] == "Bearer secret"
        assert session.headers["Notion-Version"] == "2022-06-28"

    def test_list_pages(self, session: MagicMock) -> None:
        session.request.return_value = _response(
            {
                "results": [_page_obj("p1", "Roadmap"), {"object": "database", "id": "db"}],
                "next_cursor": "abc",
                "has_more": True,
            }
        )
        client = NotionClient("k", base_url="https://api.notion.com/v1/", session=session, page_size=50)
        listing = client.list_pages("start")

        assert [p.id for p in listing.items] == ["p1"]
        assert listing.items[0].title == "Roadmap"
        assert listing.next_cursor == "abc"
        assert listing.has_more is True
        method, url = session.request.call_args.args
        assert (method, url) == ("POST", "https://api.notion.com/v1/search")
        body = session.request.call_args.kwargs["json"]
        assert body["filter"] == {"property": "object", "value": "page"}
        assert body["start_cursor"] == "start"
        assert body["page_size"] == 50

    def test_list_block_children(self, session: MagicMock) -> None:
        session.request.return_value = _response({"results": [{"id": "b1"}], "has_more": False, "next_cursor": None})
        listing = NotionClient("k", session=session).list_block_children("page-id")
        assert listing.items == [{"id": "b1"}]
        assert listing.has_more is False
        method, url = session.request.call_args.args
        assert method == "GET"
        assert url.endswith("/blocks/page-id/children")
        assert "start_cursor" not in session.request.call_args.kwargs["params"]

    def test_http_error_wrapped(self, session: MagicMock) -> None:
        session.request.return_value = _response({}, status=429)
        with pytest.raises(NotionAPIError) as exc_info:
            NotionClient("k", session=session).list_pages()
        assert exc_info.value.status_code == 429

    def test_transport_error_wrapped(self, session: MagicMock) -> None:
        session.request.side_effect = requests.ConnectionError("dns failure")
        with pytest.raises(NotionAPIError, match="dns failure"):
            NotionClient("k", session=session).list_block_children("x")


class TestPageSummary:
    def test_url_fallback(self) -> None:
        page = PageSummary.from_api({"id": "ab-cd-ef", "properties": {}})
        assert page.url == "https://www.notion.so/abcdef"
        assert page.title == "Untitled"

    def test_metadata_keys(self) -> None:
        meta = PageSummary.from_api(_page_obj("p1", "Notes")).metadata()
        assert meta == {
            "page_id": "p1",
            "title": "Notes",
            "url": "https://www.notion.so/p1",
            "created": "2024-01-01T00:00:00.000Z",
            "last_edit": "2024-01-02T00:00:00.000Z",
        }

    @pytest.mark.parametrize(
        ("properties", "expected"),
        [
            ({"Name": {"type": "title", "title": [{"plain_text": "From Name"}]}}, "From Name"),
            ({"Task": {"type": "title", "title": [{"plain_text": "Custom"}]}}, "Custom"),
            ({"Status": {"type": "select", "select": {}}}, "Untitled"),
        ],
    )
    def test_title_lookup(self, properties: dict, expected: str) -> None:
        assert extract_page_title(properties) == expected
