"""Backend abstraction for wiki protocols."""

import logging
from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

from wikibridge.models import (
    CompleteResult,
    Diff,
    FileWithThumbnail,
    HistoryCount,
    Page,
    PageLanguage,
    Revision,
    RevisionWithPage,
    SearchResult,
    WikiFile,
)
from wikibridge.transport import Transport

HISTORY_FILTERS = ("reverted", "anonymous", "bot", "minor")
HISTORY_COUNT_TYPES = ("anonymous", "bot", "editors", "edits", "minor", "reverted")


class WikiBackend(ABC):
    """Abstract base class for a wiki protocol.

    Every method returns REST-shaped models, whatever the wire format.
    """

    polyfilled = False

    def __init__(
        self,
        transport: Transport,
        api_url: str,
        token: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.transport = transport
        self.api_url = api_url
        self.token = token
        self.logger = logger or logging.getLogger("wikibridge")

    def auth_headers(self) -> dict:
        """Authorization header for write requests, if a token is configured."""
        if self.token is None:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    @abstractmethod
    async def get_page(self, title: str) -> Page:
        """Get a page with its source."""
        ...

    @abstractmethod
    async def get_page_html(self, title: str) -> str:
        """Get the rendered HTML of a page."""
        ...

    @abstractmethod
    async def get_languages(self, title: str) -> list[PageLanguage]:
        """Get interlanguage links of a page."""
        ...

    @abstractmethod
    async def get_files(self, title: str) -> list[WikiFile]:
        """Get the files used on a page."""
        ...

    @abstractmethod
    async def get_file(self, title: str) -> FileWithThumbnail:
        """Get a file with its thumbnail."""
        ...

    @abstractmethod
    async def get_revision(self, revision_id: int) -> RevisionWithPage:
        """Get a single revision and the page it belongs to."""
        ...

    @abstractmethod
    def history_batches(
        self,
        title: str,
        filter: Optional[str] = None,
        older_than: Optional[int] = None,
        newer_than: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> AsyncIterator[list[Revision]]:
        """Yield batches of revisions, newest first.

        Batches hold only revisions matching filter and strictly older than
        older_than. Stopping at newer_than and at limit is left to the caller;
        both are hints for request sizing here.
        """
        ...

    @abstractmethod
    async def history_count(
        self,
        title: str,
        kind: str,
        start: Optional[int] = None,
        stop: Optional[int] = None,
    ) -> HistoryCount:
        """Count revisions of a kind between two revision ids."""
        ...

    @abstractmethod
    async def search(self, query: str, limit: int) -> list[SearchResult]:
        """Full-text search of titles and content."""
        ...

    @abstractmethod
    async def complete(self, query: str, limit: int) -> list[CompleteResult]:
        """Title prefix search."""
        ...

    @abstractmethod
    async def compare(self, from_id: int, to_id: int) -> Diff:
        """Diff two revisions."""
        ...

    @abstractmethod
    async def create_page(
        self,
        title: str,
        source: str,
        comment: Optional[str],
        content_model: Optional[str] = None,
        token: Optional[str] = None,
    ) -> Page:
        """Create a page. Fails if it already exists."""
        ...

    @abstractmethod
    async def update_page(
        self,
        title: str,
        source: str,
        comment: Optional[str],
        latest_id: Optional[int] = None,
        content_model: Optional[str] = None,
        token: Optional[str] = None,
    ) -> Page:
        """Update a page, or create it when latest_id is omitted."""
        ...
