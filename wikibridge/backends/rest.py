"""MediaWiki REST API backend (rest.php/v1)."""

from typing import Any, AsyncIterator, Optional
from urllib.parse import urljoin

import requests

from wikibridge.backends.base import WikiBackend
from wikibridge.errors import check_response
from wikibridge.models import (
    CompleteResult,
    Diff,
    FileWithThumbnail,
    HistoryBatch,
    HistoryCount,
    Page,
    PageLanguage,
    Revision,
    RevisionWithPage,
    SearchResult,
    WikiFile,
)
from wikibridge.title_utils import quote_title


class ModernBackend(WikiBackend):
    """Talks to the REST API directly; responses already have the right shape."""

    async def request(
        self,
        path: str = "",
        method: str = "GET",
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
        json: Any = None,
        url: Optional[str] = None,
    ) -> Any:
        """
        Make a REST request and return the checked JSON body.

        Args:
            path: Route relative to the API root (e.g., "page/Main_Page")
            method: HTTP method
            params: Query parameters
            headers: Extra headers
            json: Request body
            url: Absolute URL, used as is instead of path (for cursor URLs)
        """
        body = await self.transport.request_json(
            method,
            url or urljoin(self.api_url, path),
            params=params,
            headers=headers,
            json=json,
        )
        return check_response(body)

    async def get_page(self, title: str) -> Page:
        return Page.model_validate(await self.request(f"page/{quote_title(title)}"))

    async def get_page_html(self, title: str) -> str:
        response = await self.transport.send(
            "GET", urljoin(self.api_url, f"page/{quote_title(title)}/html")
        )
        if not response.ok:
            # MediaWiki error bodies are JSON even on HTML routes; proxies may send HTML
            try:
                body = response.json()
            except requests.JSONDecodeError:
                response.raise_for_status()
            check_response(body)
            response.raise_for_status()
        return response.text

    async def get_languages(self, title: str) -> list[PageLanguage]:
        data = await self.request(f"page/{quote_title(title)}/links/language")
        return [PageLanguage.model_validate(item) for item in data]

    async def get_files(self, title: str) -> list[WikiFile]:
        data = await self.request(f"page/{quote_title(title)}/links/media")
        return [WikiFile.model_validate(item) for item in data.get("files", [])]

    async def get_file(self, title: str) -> FileWithThumbnail:
        return FileWithThumbnail.model_validate(await self.request(f"file/{quote_title(title)}"))

    async def get_revision(self, revision_id: int) -> RevisionWithPage:
        return RevisionWithPage.model_validate(await self.request(f"revision/{revision_id}/bare"))

    async def history_batches(
        self,
        title: str,
        filter: Optional[str] = None,
        older_than: Optional[int] = None,
        newer_than: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> AsyncIterator[list[Revision]]:
        data = await self.request(
            f"page/{quote_title(title)}/history",
            params={"filter": filter, "older_than": older_than},
        )
        while True:
            batch = HistoryBatch.model_validate(data)
            yield batch.revisions
            if batch.older is None:
                break
            data = await self.request(url=batch.older)

    async def history_count(
        self,
        title: str,
        kind: str,
        start: Optional[int] = None,
        stop: Optional[int] = None,
    ) -> HistoryCount:
        data = await self.request(
            f"page/{quote_title(title)}/history/counts/{kind}",
            params={"from": start, "to": stop},
        )
        return HistoryCount.model_validate(data)

    async def search(self, query: str, limit: int) -> list[SearchResult]:
        data = await self.request("search/page", params={"q": query, "limit": limit})
        return [SearchResult.model_validate(item) for item in data.get("pages", [])]

    async def complete(self, query: str, limit: int) -> list[CompleteResult]:
        data = await self.request("search/title", params={"q": query, "limit": limit})
        return [CompleteResult.model_validate(item) for item in data.get("pages", [])]

    async def compare(self, from_id: int, to_id: int) -> Diff:
        return Diff.model_validate(await self.request(f"revision/{from_id}/compare/{to_id}"))

    async def create_page(
        self,
        title: str,
        source: str,
        comment: Optional[str],
        content_model: Optional[str] = None,
        token: Optional[str] = None,
    ) -> Page:
        body = {"title": title, "source": source, "comment": comment}
        if content_model is not None:
            body["content_model"] = content_model
        if token is not None:
            body["token"] = token

        data = await self.request(
            "page",
            method="POST",
            headers={"Content-Type": "application/json", **self.auth_headers()},
            json=body,
        )
        return Page.model_validate(data)

    async def update_page(
        self,
        title: str,
        source: str,
        comment: Optional[str],
        latest_id: Optional[int] = None,
        content_model: Optional[str] = None,
        token: Optional[str] = None,
    ) -> Page:
        body = {"source": source, "comment": comment}
        if latest_id is not None:
            body["latest"] = {"id": latest_id}
        if content_model is not None:
            body["content_model"] = content_model
        if token is not None:
            body["token"] = token

        data = await self.request(
            f"page/{quote_title(title)}",
            method="PUT",
            headers={"Content-Type": "application/json", **self.auth_headers()},
            json=body,
        )
        return Page.model_validate(data)
