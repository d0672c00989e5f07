"""Tests for the REST API backend."""

import pytest
import requests

from wikibridge.errors import ApiError, InvalidArgumentError
from wikibridge.models import FileWithThumbnail, WikiFile

from conftest import REST_FILE, REST_PAGE, REST_ROOT, connect_wiki

DIFF = {
    "from": {"id": 42, "slot_role": "main", "sections": [{"level": 2, "heading": "History", "offset": 0}]},
    "to": {"id": 43, "slot_role": "main", "sections": [{"level": 2, "heading": "History", "offset": 0}]},
    "diff": [
        {"type": 0, "lineNumber": 1, "text": "Unchanged line", "offset": {"from": 0, "to": 0}},
        {
            "type": 3,
            "lineNumber": 2,
            "text": "A changed line",
            "offset": {"from": 15, "to": 15},
            "highlightRanges": [{"start": 2, "length": 7, "type": 0}],
        },
        {
            "type": 4,
            "text": "Moved paragraph",
            "offset": {"from": 30, "to": None},
            "moveInfo": {"id": "movedpara_1_0_lhs", "linkId": "movedpara_3_0_rhs", "linkDirection": 0},
        },
    ],
}


class TestCompare:
    """Tests for structured revision diffs."""

    @pytest.mark.asyncio
    async def test_diff_passed_through(self, rest_server, rest_wiki):
        rest_server.add(DIFF, path="revision/42/compare/43")

        diff = await rest_wiki.compare(42, 43)

        assert diff.from_.id == 42
        assert diff.to.id == 43
        assert diff.to.sections[0].heading == "History"
        assert diff.diff[1].highlight_ranges[0].length == 7
        assert diff.diff[2].move_info.link_id == "movedpara_3_0_rhs"
        assert diff.diff[2].line_number is None
        assert diff.to_dict()["from"] == DIFF["from"]
        assert diff.to_dict()["diff"][1]["highlightRanges"] == [{"start": 2, "length": 7, "type": 0}]

    @pytest.mark.asyncio
    async def test_non_text_revisions_rejected_by_server(self, rest_server, rest_wiki):
        rest_server.add(
            {"httpCode": 400, "httpReason": "Bad Request", "errorKey": "rest-compare-wrong-content",
             "messageTranslations": {"en": "Wrong content model"}},
            path="revision/1/compare/2",
            status=400,
        )

        with pytest.raises(ApiError) as excinfo:
            await rest_wiki.compare(1, 2)
        assert excinfo.value.code == "rest-compare-wrong-content"


class TestSearch:
    """Tests for search and title completion."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, 101])
    async def test_limit_checked_before_any_request(self, rest_wiki, limit):
        with pytest.raises(InvalidArgumentError, match="between 1 and 100"):
            await rest_wiki.search("jupiter", limit=limit)
        with pytest.raises(InvalidArgumentError):
            await rest_wiki.complete("jupiter", limit=limit)

        # Not even the protocol probe
        assert rest_wiki.transport.session.request.call_count == 0

    @pytest.mark.asyncio
    async def test_search(self, rest_server, rest_wiki):
        rest_server.add(
            {"pages": [{
                "id": 11,
                "key": "Jupiter",
                "title": "Jupiter",
                "excerpt": "<span class=\"searchmatch\">Jupiter</span> is the fifth planet",
                "matched_title": None,
                "description": "fifth planet from the Sun",
                "thumbnail": {"mimetype": "image/jpeg", "size": None, "width": 200, "height": 200,
                              "duration": None, "url": "//upload.example.org/thumb/Jupiter.jpg"},
            }]},
            path="search/page",
            q="jupiter",
            limit=100,
        )

        results = await rest_wiki.search("jupiter", limit=100)

        assert results[0].key == "Jupiter"
        assert results[0].description == "fifth planet from the Sun"
        assert results[0].thumbnail.width == 200

    @pytest.mark.asyncio
    async def test_complete(self, rest_server, rest_wiki):
        rest_server.add(
            {"pages": [{"id": 11, "key": "Jupiter", "title": "Jupiter", "excerpt": "Jupiter",
                        "matched_title": None, "description": None, "thumbnail": None}]},
            path="search/title",
            q="Jup",
        )

        results = await rest_wiki.complete("Jup", limit=5)

        assert [result.title for result in results] == ["Jupiter"]
        assert rest_server.calls[0]["params"] == {"q": "Jup", "limit": "5"}


class TestPages:
    """Tests for page routes."""

    @pytest.mark.asyncio
    async def test_html(self, rest_server, rest_wiki):
        rest_server.add("<!DOCTYPE html><html><body><p>Hello</p></body></html>", path="page/A_B/html")

        html = await rest_wiki.page("A B").html()

        assert "<p>Hello</p>" in html

    @pytest.mark.asyncio
    async def test_html_error_raises_api_error(self, rest_server, rest_wiki):
        rest_server.add(
            {"httpCode": 404, "httpReason": "Not Found", "errorKey": "rest-nonexistent-title",
             "messageTranslations": {"en": "The specified page (Nope) does not exist"}},
            path="page/Nope/html",
            status=404,
        )

        with pytest.raises(ApiError, match="does not exist"):
            await rest_wiki.page("Nope").html()

    @pytest.mark.asyncio
    async def test_html_error_without_json_raises_http_error(self, rest_server, rest_wiki):
        rest_server.add("Bad gateway", path="page/A_B/html", status=502)

        with pytest.raises(requests.RequestException):
            await rest_wiki.page("A B").html()

    @pytest.mark.asyncio
    async def test_files(self, rest_server, rest_wiki):
        media = {key: value for key, value in REST_FILE.items() if key != "thumbnail"}
        rest_server.add({"files": [media]}, path="page/A_B/links/media")

        files = await rest_wiki.page("A B").files()

        assert len(files) == 1
        assert isinstance(files[0], WikiFile)
        assert not isinstance(files[0], FileWithThumbnail)
        assert files[0].original.size == 52000


class TestEditing:
    """Tests for page creation and updates."""

    @pytest.mark.asyncio
    async def test_create(self, rest_server):
        wiki = connect_wiki(rest_server, token="oauth-token")
        rest_server.add(REST_PAGE, path="page")

        page = await wiki.page("A B").create("Hello", "First version", content_model="wikitext")

        call = rest_server.calls[0]
        assert call["method"] == "POST"
        assert call["url"] == REST_ROOT + "page"
        assert call["json"] == {"title": "A B", "source": "Hello", "comment": "First version", "content_model": "wikitext"}
        assert call["headers"]["Content-Type"] == "application/json"
        assert call["headers"]["Authorization"] == "Bearer oauth-token"
        assert page.id == 7
        assert page.wiki is wiki

    @pytest.mark.asyncio
    async def test_update_with_latest_id(self, rest_server, rest_wiki):
        rest_server.add(REST_PAGE, path="page/A_B")

        await rest_wiki.page("A B").update("Hello", None, latest_id=5, token="csrf+\\")

        call = rest_server.calls[0]
        assert call["method"] == "PUT"
        assert call["json"] == {"source": "Hello", "comment": None, "latest": {"id": 5}, "token": "csrf+\\"}
        assert "Authorization" not in call["headers"]

    @pytest.mark.asyncio
    async def test_update_without_latest_id_creates(self, rest_server, rest_wiki):
        rest_server.add(REST_PAGE, path="page/A_B")

        await rest_wiki.page("A B").update("Hello", "c")

        assert "latest" not in rest_server.calls[0]["json"]

    @pytest.mark.asyncio
    async def test_edit_conflict(self, rest_server, rest_wiki):
        rest_server.add(
            {"httpCode": 409, "httpReason": "Conflict", "errorKey": "rest-update-mismatch",
             "messageTranslations": {"en": "Edit conflict"}},
            path="page/A_B",
            status=409,
        )

        with pytest.raises(ApiError) as excinfo:
            await rest_wiki.page("A B").update("Hello", "c", latest_id=3)
        assert excinfo.value.code == "rest-update-mismatch"
