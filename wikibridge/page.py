"""
Wiki pages.

    page = wiki.page("Jupiter")
    print(await page.id)          # one request, shared by later reads
    print(await page.source)

    resolved = await page         # ResolvedPage with plain attributes
    print(resolved.latest.timestamp)
"""

from typing import TYPE_CHECKING, Any, Awaitable, Optional

from pydantic import PrivateAttr

from wikibridge.handles import Handle
from wikibridge.history import History
from wikibridge.models import LatestRevision, License, Page, PageLanguage, WikiFile

if TYPE_CHECKING:
    from wikibridge.wiki import Wiki


class PageBase:
    """Page operations that only need the title.

    Subclasses provide `wiki` and `title`.
    """

    async def languages(self) -> list[PageLanguage]:
        """The same page in other languages."""
        backend = await self.wiki.connect()
        return await backend.get_languages(self.title)

    async def files(self) -> list[WikiFile]:
        """Files used on the page, without thumbnails."""
        backend = await self.wiki.connect()
        return await backend.get_files(self.title)

    def history(self, filter: Optional[str] = None) -> History:
        """The page history, newest first."""
        return History(self.wiki, self.title, filter=filter)

    async def create(
        self,
        source: str,
        comment: Optional[str],
        content_model: Optional[str] = None,
        token: Optional[str] = None,
    ) -> "ResolvedPage":
        """
        Create a page with this title.

        Args:
            source: Page content in the format given by content_model
            comment: Reason for creating the page; None lets the server fill it in
            content_model: Content model of the page (server default: wikitext)
            token: CSRF token, needed only without an OAuth token on the Wiki

        Returns:
            The new page
        """
        backend = await self.wiki.connect()
        page = await backend.create_page(
            self.title, source, comment, content_model=content_model, token=token
        )
        return ResolvedPage.bind(self.wiki, page)

    async def update(
        self,
        source: str,
        comment: Optional[str],
        latest_id: Optional[int] = None,
        content_model: Optional[str] = None,
        token: Optional[str] = None,
    ) -> "ResolvedPage":
        """
        Update the page, or create it when latest_id is omitted.

        If latest_id is not the page's latest revision, the server merges
        the edits when it can and reports an edit conflict otherwise.

        Args:
            source: New page content
            comment: Edit summary; None lets the server fill it in
            latest_id: Revision the new source is based on
            content_model: Content model of the page
            token: CSRF token, needed only without an OAuth token on the Wiki

        Returns:
            The updated page
        """
        backend = await self.wiki.connect()
        page = await backend.update_page(
            self.title,
            source,
            comment,
            latest_id=latest_id,
            content_model=content_model,
            token=token,
        )
        return ResolvedPage.bind(self.wiki, page)


class ResolvedPage(Page, PageBase):
    """A fetched page. Its fields are plain values; its methods still make requests."""

    _wiki: Any = PrivateAttr(default=None)

    @classmethod
    def bind(cls, wiki: "Wiki", page: Page) -> "ResolvedPage":
        resolved = cls.model_validate(page.model_dump())
        resolved._wiki = wiki
        return resolved

    @property
    def wiki(self) -> "Wiki":
        return self._wiki


class PageHandle(Handle[ResolvedPage], PageBase):
    """A page that has not been fetched yet."""

    def __init__(self, wiki: "Wiki", title: str):
        super().__init__(wiki)
        self.title = title

    def __repr__(self) -> str:
        return f"PageHandle({self.title!r})"

    async def fetch(self) -> ResolvedPage:
        backend = await self.wiki.connect()
        return ResolvedPage.bind(self.wiki, await backend.get_page(self.title))

    async def html(self) -> str:
        """Rendered HTML of the latest revision (a separate request)."""
        backend = await self.wiki.connect()
        return await backend.get_page_html(self.title)

    @property
    def id(self) -> Awaitable[int]:
        return self._field("id")

    @property
    def key(self) -> Awaitable[str]:
        return self._field("key")

    @property
    def latest(self) -> Awaitable[LatestRevision]:
        return self._field("latest")

    @property
    def content_model(self) -> Awaitable[str]:
        return self._field("content_model")

    @property
    def license(self) -> Awaitable[License]:
        return self._field("license")

    @property
    def source(self) -> Awaitable[Optional[str]]:
        return self._field("source")
