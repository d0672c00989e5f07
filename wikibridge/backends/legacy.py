"""
MediaWiki Action API backend (api.php).

Rebuilds REST API objects out of action=query and action=parse responses.
Some REST fields have no direct Action API counterpart:

- Revision delta needs the parent revision's size, one extra request per
  revision (none when there is no parent).
- History filters other than "reverted" cannot be applied by the server, so
  batches are filtered here. "bot" is a user group, not a revision property;
  the page's bot contributors are listed once per iteration and matched by
  user id.
- File details combine imageinfo and pageimages, and URLs are reduced to the
  protocol-relative form the REST API uses.
"""

import asyncio
from typing import Any, AsyncIterator, Optional

from wikibridge.backends.base import WikiBackend
from wikibridge.errors import ApiError, UnsupportedOperationError, check_response
from wikibridge.models import (
    CompleteResult,
    Diff,
    FileRevision,
    FileUploader,
    FileWithThumbnail,
    Format,
    HistoryCount,
    LatestRevision,
    License,
    Page,
    PageLanguage,
    Revision,
    RevisionPage,
    RevisionWithPage,
    SearchResult,
    User,
    WikiFile,
)
from wikibridge.title_utils import ensure_file_prefix, strip_file_prefix, strip_scheme, title_to_key

# Added to every request
RESPONSE_FORMAT = {"format": "json", "formatversion": 2, "errorformat": "plaintext"}

REVISION_PROPS = ["ids", "timestamp", "flags", "size", "comment", "user", "userid"]
HISTORY_PROPS = REVISION_PROPS + ["tags"]
ROLLBACK_TAG = "mw-rollback"

# Server cap on rvlimit for requests without content
MAX_BATCH_SIZE = 500

# Asks pageimages for the largest rendition available
THUMBNAIL_SIZE = 1000000


def history_batch_size(filter: Optional[str], older_than: Optional[int], limit: Optional[int]):
    """Pick rvlimit for a history query.

    Client-side filtering means the server cannot know how many rows are
    needed; otherwise ask for just enough, plus the excluded start revision.
    """
    if filter is not None or limit is None:
        return "max"
    if older_than is not None:
        limit += 1
    return min(limit, MAX_BATCH_SIZE)


def matches_filter(revision: dict, filter: Optional[str], bots: set[int]) -> bool:
    """Check a raw Action API revision against a REST history filter."""
    if filter is None:
        return True
    if filter == "anonymous":
        return revision.get("anon", False)
    if filter == "bot":
        return revision.get("userid") in bots
    if filter == "minor":
        return revision.get("minor", False)
    if filter == "reverted":
        return ROLLBACK_TAG in revision.get("tags", [])
    raise ValueError(f"Unknown history filter: {filter}")


def convert_file(page: dict, thumbnails: bool = True) -> WikiFile:
    """
    Build a REST file object from an imageinfo + pageimages page.

    Args:
        page: Page entry of an action=query response
        thumbnails: Whether to include the thumbnail rendition

    Returns:
        FileWithThumbnail, or WikiFile when thumbnails is False
    """
    info = page["imageinfo"][0]
    original_image = page.get("original") or {}
    source = original_image.get("source")

    # 0 means unknown for dimensions
    original = Format(
        mediatype=info["mediatype"],
        size=info.get("size"),
        width=info.get("width") or None,
        height=info.get("height") or None,
        duration=info.get("duration"),
        url=strip_scheme(source if source is not None else info["url"]),
    )

    canonical = info.get("canonicaltitle")
    fields = {
        "title": strip_file_prefix(canonical if canonical is not None else page["title"]),
        "file_description_url": strip_scheme(info["descriptionurl"]),
        "latest": FileRevision(
            timestamp=info["timestamp"],
            user=FileUploader(id=info.get("userid") or None, name=info.get("user", "")),
        ),
        # No Action API equivalent of the preferred preview format
        "preferred": original,
        "original": original,
    }
    if not thumbnails:
        return WikiFile(**fields)

    thumbnail = original
    if "thumbnail" in page:
        update = {"url": strip_scheme(page["thumbnail"]["source"])}
        if original.width is not None:
            update["width"] = page["thumbnail"]["width"]
            update["height"] = page["thumbnail"]["height"]
        thumbnail = original.model_copy(update=update)

    return FileWithThumbnail(**fields, thumbnail=thumbnail)


class LegacyBackend(WikiBackend):
    """Emulates the REST API on top of the Action API."""

    polyfilled = True

    async def request(
        self,
        params: dict,
        method: str = "GET",
        headers: Optional[dict] = None,
    ) -> Any:
        """
        Make an Action API request and return the checked JSON body.

        GET parameters go in the query string; for other methods they are
        sent as a form body.
        """
        if method == "GET":
            body = await self.transport.request_json(
                method, self.api_url, params={**params, **RESPONSE_FORMAT}, headers=headers
            )
        else:
            body = await self.transport.request_json(
                method, self.api_url, params=RESPONSE_FORMAT, data=params, headers=headers
            )
        return check_response(body)

    def first_page(self, data: dict, allow_missing: bool = False) -> dict:
        """Return the single page of a query response, raising if it does not exist."""
        query = data.get("query", {})
        if query.get("badrevids"):
            revision_id = next(iter(query["badrevids"]))
            raise ApiError(f"There is no revision with ID {revision_id}.", code="nosuchrevid", payload=data)

        pages = query.get("pages") or []
        if not pages or pages[0].get("invalid") or (pages[0].get("missing") and not allow_missing):
            raise ApiError("The page you specified doesn't exist.", code="missingtitle", payload=data)
        return pages[0]

    # Revisions

    async def parent_size(self, parent_id: int) -> Optional[int]:
        """Size of a revision, or None when it is unavailable."""
        data = await self.request({
            "action": "query",
            "revids": parent_id,
            "prop": "revisions",
            "rvprop": "size",
        })
        if data.get("query", {}).get("badrevids"):
            return None
        return self.first_page(data)["revisions"][0].get("size")

    async def convert_revision(self, revision: dict, page: Optional[dict] = None) -> Revision:
        """
        Build a REST revision from an Action API one.

        Args:
            revision: Revision entry with REVISION_PROPS
            page: Its page entry, to produce a RevisionWithPage

        Returns:
            Revision or RevisionWithPage, with delta filled in
        """
        delta = None
        if revision.get("parentid", 0) != 0:
            parent_size = await self.parent_size(revision["parentid"])
            if parent_size is not None:
                delta = revision["size"] - parent_size

        fields = {
            "id": revision["revid"],
            "user": User(name=revision.get("user", ""), id=revision.get("userid") or None),
            "timestamp": revision["timestamp"],
            "comment": revision.get("comment"),
            "size": revision["size"],
            "delta": delta,
            "minor": revision.get("minor", False),
        }
        if page is None:
            return Revision(**fields)
        return RevisionWithPage(**fields, page=RevisionPage(id=page["pageid"], title=page["title"]))

    async def get_revision(self, revision_id: int) -> RevisionWithPage:
        data = await self.request({
            "action": "query",
            "revids": revision_id,
            "prop": "revisions",
            "rvprop": REVISION_PROPS,
        })
        page = self.first_page(data)
        return await self.convert_revision(page["revisions"][0], page)

    # Pages

    async def get_page(self, title: str) -> Page:
        data = await self.request({
            "action": "query",
            "titles": title,
            "prop": ["revisions", "info"],
            "rvprop": ["ids", "timestamp", "content"],
            "rvslots": "main",
            "rvlimit": 1,
            "meta": "siteinfo",
            "siprop": "rightsinfo",
        })
        page = self.first_page(data)
        revision = page["revisions"][0]
        main_slot = revision.get("slots", {}).get("main", {})
        # Site-wide license; the Action API has no per-page one
        rights = data["query"].get("rightsinfo", {})

        return Page(
            id=page["pageid"],
            key=title_to_key(page["title"]),
            title=page["title"],
            latest=LatestRevision(id=revision["revid"], timestamp=revision["timestamp"]),
            content_model=page["contentmodel"],
            license=License(url=rights.get("url", ""), title=rights.get("text", "")),
            source=main_slot.get("content", revision.get("content")),
        )

    async def get_page_html(self, title: str) -> str:
        data = await self.request({"action": "parse", "page": title, "prop": "text"})
        return data["parse"]["text"]

    async def get_languages(self, title: str) -> list[PageLanguage]:
        data = await self.request({"action": "parse", "page": title, "prop": "langlinks"})
        return [
            PageLanguage(
                code=link["lang"],
                name=link.get("autonym") or link.get("langname") or link["lang"],
                key=title_to_key(link["title"]),
                title=link["title"],
            )
            for link in data["parse"].get("langlinks", [])
        ]

    async def get_files(self, title: str) -> list[WikiFile]:
        params = {
            "action": "query",
            "titles": title,
            "prop": "images",
            "imlimit": "max",
        }
        data = await self.request(params)
        images = []
        while True:
            images.extend(self.first_page(data).get("images", []))
            continuation = data.get("continue", {}).get("imcontinue")
            if continuation is None:
                break
            data = await self.request({**params, "imcontinue": continuation})

        self.logger.debug(f"{title} uses {len(images)} files")
        return list(await asyncio.gather(
            *(self.fetch_file(image["title"], thumbnails=False) for image in images)
        ))

    async def fetch_file(self, title: str, thumbnails: bool = True) -> WikiFile:
        data = await self.request({
            "action": "query",
            "titles": ensure_file_prefix(title),
            "prop": ["imageinfo", "pageimages"],
            "iiprop": ["canonicaltitle", "timestamp", "user", "userid", "size", "url", "mediatype"],
            "piprop": ["thumbnail", "name", "original"],
            "pithumbsize": THUMBNAIL_SIZE,
        })
        # Files from a shared repository have no local page
        page = self.first_page(data, allow_missing=True)
        if not page.get("imageinfo"):
            raise ApiError("The file you specified doesn't exist.", code="missingtitle", payload=data)
        return convert_file(page, thumbnails=thumbnails)

    async def get_file(self, title: str) -> FileWithThumbnail:
        return await self.fetch_file(title)

    # History

    async def bot_contributors(self, title: str) -> set[int]:
        """User ids of the page's contributors in the bot group."""
        data = await self.request({
            "action": "query",
            "titles": title,
            "prop": "contributors",
            "pcgroup": "bot",
            "pclimit": "max",
        })
        contributors = self.first_page(data).get("contributors", [])
        if "pccontinue" in data.get("continue", {}):
            self.logger.warning(
                f"{title} has more bot contributors than one listing returns; "
                f"bot filtering only knows the first {len(contributors)}"
            )
        return {contributor["userid"] for contributor in contributors}

    async def history_batches(
        self,
        title: str,
        filter: Optional[str] = None,
        older_than: Optional[int] = None,
        newer_than: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> AsyncIterator[list[Revision]]:
        params = {
            "action": "query",
            "titles": title,
            "prop": "revisions",
            "rvprop": HISTORY_PROPS,
            "rvlimit": history_batch_size(filter, older_than, limit),
            "rvstartid": older_than,
            "rvendid": newer_than,
            "rvtag": ROLLBACK_TAG if filter == "reverted" else None,
        }

        if filter == "bot":
            bots, data = await asyncio.gather(self.bot_contributors(title), self.request(params))
        else:
            bots, data = set(), await self.request(params)

        while True:
            revisions = [
                revision
                for revision in self.first_page(data).get("revisions", [])
                # rvstartid is inclusive, older_than is not
                if revision["revid"] != older_than and matches_filter(revision, filter, bots)
            ]
            self.logger.debug(f"History batch for {title}: {len(revisions)} revisions")
            yield list(await asyncio.gather(*(self.convert_revision(r) for r in revisions)))

            continuation = data.get("continue", {}).get("rvcontinue")
            if continuation is None:
                break
            data = await self.request({**params, "rvcontinue": continuation})

    async def history_count(
        self,
        title: str,
        kind: str,
        start: Optional[int] = None,
        stop: Optional[int] = None,
    ) -> HistoryCount:
        raise UnsupportedOperationError("History counts require the REST API")

    # Search

    async def search(self, query: str, limit: int) -> list[SearchResult]:
        data = await self.request({
            "action": "query",
            "list": "search",
            "srsearch": query,
            "srlimit": limit,
            "srprop": "snippet",
        })
        return [
            SearchResult(
                id=result["pageid"],
                key=title_to_key(result["title"]),
                title=result["title"],
                excerpt=result.get("snippet"),
            )
            for result in data["query"].get("search", [])
        ]

    async def complete(self, query: str, limit: int) -> list[CompleteResult]:
        data = await self.request({
            "action": "query",
            "list": "prefixsearch",
            "pssearch": query,
            "pslimit": limit,
        })
        return [
            CompleteResult(
                id=result["pageid"],
                key=title_to_key(result["title"]),
                title=result["title"],
                excerpt=result["title"],
            )
            for result in data["query"].get("prefixsearch", [])
        ]

    async def compare(self, from_id: int, to_id: int) -> Diff:
        raise UnsupportedOperationError("Structured revision diffs require the REST API")

    # Editing

    async def edit(self, title: str, params: dict) -> Page:
        """Run action=edit and return the resulting page."""
        data = await self.request(
            {"action": "edit", "title": title, **params},
            method="POST",
            headers=self.auth_headers() or None,
        )
        result = data.get("edit", {})
        if result.get("result") != "Success":
            outcome = result.get("result", "no result")
            raise ApiError(f"Edit of {title} failed: {outcome}", code=outcome, payload=data)
        return await self.get_page(result.get("title", title))

    async def create_page(
        self,
        title: str,
        source: str,
        comment: Optional[str],
        content_model: Optional[str] = None,
        token: Optional[str] = None,
    ) -> Page:
        return await self.edit(title, {
            "text": source,
            "summary": comment,
            "contentmodel": content_model,
            "createonly": True,
            "token": token,
        })

    async def update_page(
        self,
        title: str,
        source: str,
        comment: Optional[str],
        latest_id: Optional[int] = None,
        content_model: Optional[str] = None,
        token: Optional[str] = None,
    ) -> Page:
        return await self.edit(title, {
            "text": source,
            "summary": comment,
            "baserevid": latest_id,
            "contentmodel": content_model,
            "token": token,
        })
