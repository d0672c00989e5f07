"""
Page history.

A History describes a query rather than holding results: every iteration
makes its own requests. The derived views (older_than, newer_than, filter,
limit) only build new descriptors.

    history = wiki.page("Jupiter").history()
    async for revision in history.filter("minor").limit(10):
        print(revision.id, revision.delta)

    revisions = await history.limit(3)   # list of the three newest
"""

from contextlib import aclosing
from typing import TYPE_CHECKING, Any, AsyncIterator, Generator, Optional

from wikibridge.backends.base import HISTORY_COUNT_TYPES, HISTORY_FILTERS
from wikibridge.errors import InvalidArgumentError
from wikibridge.models import HistoryCount, Revision

if TYPE_CHECKING:
    from wikibridge.wiki import Wiki


class History:
    """Revisions of one page, newest first."""

    def __init__(
        self,
        wiki: "Wiki",
        title: str,
        filter: Optional[str] = None,
        older_than: Optional[int] = None,
        newer_than: Optional[int] = None,
        limit: Optional[int] = None,
    ):
        """
        Args:
            wiki: Wiki the page belongs to
            title: Page title
            filter: One of "reverted", "anonymous", "bot", "minor"
            older_than: Only revisions older than this id (exclusive)
            newer_than: Stop at this revision id or any older one (not yielded)
            limit: Maximum number of revisions to yield
        """
        if filter is not None and filter not in HISTORY_FILTERS:
            raise InvalidArgumentError(
                f"Invalid history filter {filter!r}. Use one of: {', '.join(HISTORY_FILTERS)}."
            )
        if limit is not None and limit < 1:
            raise InvalidArgumentError("History limit must be a positive number.")

        self.wiki = wiki
        self.title = title
        self._filter = filter
        self._older_than = older_than
        self._newer_than = newer_than
        self._limit = limit

    @property
    def options(self) -> dict:
        return {
            "filter": self._filter,
            "older_than": self._older_than,
            "newer_than": self._newer_than,
            "limit": self._limit,
        }

    def __repr__(self) -> str:
        options = ", ".join(f"{key}={value!r}" for key, value in self.options.items() if value is not None)
        return f"History({self.title!r}{', ' + options if options else ''})"

    def _replace(self, **changes) -> "History":
        return History(self.wiki, self.title, **{**self.options, **changes})

    def older_than(self, revision_id: int) -> "History":
        return self._replace(older_than=revision_id)

    def newer_than(self, revision_id: int) -> "History":
        return self._replace(newer_than=revision_id)

    def filter(self, kind: str) -> "History":
        return self._replace(filter=kind)

    def limit(self, count: int) -> "History":
        return self._replace(limit=count)

    def __aiter__(self) -> AsyncIterator[Revision]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[Revision]:
        backend = await self.wiki.connect()
        batches = backend.history_batches(
            self.title,
            filter=self._filter,
            older_than=self._older_than,
            newer_than=self._newer_than,
            limit=self._limit,
        )

        count = 0
        async with aclosing(batches):
            async for batch in batches:
                for revision in batch:
                    # Revision ids grow over time; the bound itself may be filtered out
                    if self._newer_than is not None and revision.id <= self._newer_than:
                        return
                    yield revision
                    count += 1
                    if self._limit is not None and count >= self._limit:
                        return

    async def to_list(self) -> list[Revision]:
        return [revision async for revision in self]

    def __await__(self) -> Generator[Any, None, list[Revision]]:
        return self.to_list().__await__()

    async def slice(self, start: int, stop: int) -> list[Revision]:
        """
        Revisions from start (included) back to stop (excluded).

        The start revision is fetched directly, so it is included even if
        the filter would exclude it.
        """
        first = await self.wiki.revision(start).fetch()
        revisions = [Revision.model_validate(first.model_dump(exclude={"page"}))]

        async for revision in self.older_than(start):
            if revision.id <= stop:
                break
            revisions.append(revision)

        return revisions

    async def count(
        self,
        kind: str,
        start: Optional[int] = None,
        stop: Optional[int] = None,
    ) -> HistoryCount:
        """
        Count revisions of a kind, optionally between two revision ids.

        Only available on wikis with the REST API.
        """
        if kind not in HISTORY_COUNT_TYPES:
            raise InvalidArgumentError(
                f"Invalid count type {kind!r}. Use one of: {', '.join(HISTORY_COUNT_TYPES)}."
            )
        backend = await self.wiki.connect()
        return await backend.history_count(self.title, kind, start=start, stop=stop)
