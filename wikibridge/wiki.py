#!/usr/bin/env python3
"""
Wiki client for wikibridge.

One object model for MediaWiki wikis, whether they expose the REST API or
only the Action API. The protocol is detected on first use.

Usage:
    from wikibridge import Wiki

    async with Wiki("https://en.wikipedia.org/w/") as wiki:
        page = wiki.page("Jupiter")
        print(await page.key)
        async for revision in page.history().limit(5):
            print(revision.id, revision.delta)
"""

import asyncio
import logging
from typing import Any, Optional
from urllib.parse import urlsplit

from wikibridge.backends import WikiBackend
from wikibridge.errors import InvalidArgumentError
from wikibridge.file import FileHandle
from wikibridge.history import History
from wikibridge.models import CompleteResult, Diff, SearchResult
from wikibridge.page import PageHandle
from wikibridge.revision import RevisionHandle
from wikibridge.selector import select_backend
from wikibridge.transport import Transport


def check_search_limit(limit: int) -> None:
    if not 1 <= limit <= 100:
        raise InvalidArgumentError(
            "Invalid limit requested. Set limit parameter to between 1 and 100."
        )


class Wiki:
    """A MediaWiki wiki reachable over the REST API or the Action API."""

    def __init__(
        self,
        url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        user_agent: Optional[str] = None,
        max_concurrency: int = 8,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Create a client. No request is made until the first operation.

        Args:
            url: Script path or API URL (e.g., https://en.wikipedia.org/w/,
                 https://en.wikipedia.org/w/rest.php/v1/ or .../w/api.php)
            token: OAuth bearer token used for edits
            timeout: Request timeout in seconds
            user_agent: Custom user agent string
            max_concurrency: Maximum number of requests in flight at once
            logger: Logger instance (creates one if not provided)
        """
        self.url = url
        self.token = token
        self.logger = logger or logging.getLogger(f"wikibridge.{urlsplit(url).netloc or 'wiki'}")
        self.transport = Transport(
            timeout=timeout,
            user_agent=user_agent,
            max_concurrency=max_concurrency,
            logger=self.logger,
        )
        self.backend: Optional[WikiBackend] = None
        self._connecting: Optional[asyncio.Task] = None

    @classmethod
    def from_config(cls, config: dict, logger: Optional[logging.Logger] = None) -> "Wiki":
        """Create a client from a load_config() dict."""
        wiki = config.get("wiki", {})
        client = config.get("client", {})
        if not wiki.get("api_url"):
            raise InvalidArgumentError("Configuration has no wiki.api_url")

        return cls(
            wiki["api_url"],
            token=wiki.get("token"),
            timeout=client.get("timeout_seconds", 30.0),
            user_agent=client.get("user_agent"),
            max_concurrency=client.get("max_concurrency", 8),
            logger=logger,
        )

    def __repr__(self) -> str:
        return f"Wiki({self.url!r})"

    async def __aenter__(self) -> "Wiki":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP session."""
        self.transport.close()

    async def connect(self) -> WikiBackend:
        """
        Detect the protocol, once.

        Every operation goes through here. Concurrent first calls share one
        detection; a failed detection is raised again on every later call.

        Raises:
            InvalidEndpointError: Neither API answered
        """
        if self.backend is not None:
            return self.backend
        if self._connecting is None:
            self._connecting = asyncio.get_running_loop().create_task(
                select_backend(self.transport, self.url, token=self.token, logger=self.logger)
            )
        self.backend = await asyncio.shield(self._connecting)
        return self.backend

    @property
    def polyfilled(self) -> Optional[bool]:
        """True when the Action API stands in for the REST API; None before connect()."""
        return None if self.backend is None else self.backend.polyfilled

    @property
    def api_url(self) -> Optional[str]:
        """Endpoint in use; None before connect()."""
        return None if self.backend is None else self.backend.api_url

    def page(self, title: str) -> PageHandle:
        """
        Return a lazy page.

        Read fields with `await page.id`, or get everything with `await page`.
        """
        return PageHandle(self, title)

    def revision(self, revision_id: int) -> RevisionHandle:
        """Return a lazy revision."""
        return RevisionHandle(self, revision_id)

    def file(self, title: str) -> FileHandle:
        """Return a lazy file, with or without the "File:" prefix."""
        return FileHandle(self, title)

    def history(self, title: str, filter: Optional[str] = None) -> History:
        """Return the history of a page, newest first."""
        return History(self, title, filter=filter)

    async def search(self, query: str, limit: int = 50) -> list[SearchResult]:
        """
        Search page titles and contents.

        Args:
            query: Search terms
            limit: Maximum number of results, between 1 and 100
        """
        check_search_limit(limit)
        backend = await self.connect()
        return await backend.search(query, limit)

    async def complete(self, query: str, limit: int = 50) -> list[CompleteResult]:
        """
        Find pages whose title starts with the search terms.

        Args:
            query: Search terms
            limit: Maximum number of results, between 1 and 100
        """
        check_search_limit(limit)
        backend = await self.connect()
        return await backend.complete(query, limit)

    async def compare(self, from_id: int, to_id: int) -> Diff:
        """
        Line-by-line comparison of two revisions of a text page.

        Args:
            from_id: Base revision
            to_id: Revision compared to the base
        """
        backend = await self.connect()
        return await backend.compare(from_id, to_id)
