"""Lazy references to wiki objects."""

import asyncio
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Awaitable, Generator, Generic, Optional, TypeVar

if TYPE_CHECKING:
    from wikibridge.wiki import Wiki

T = TypeVar("T")


class Handle(ABC, Generic[T]):
    """A reference to a wiki object that is fetched on first use.

    Creating a handle makes no request. Reading one of its field
    properties, or awaiting the handle, starts a single fetch that all
    later reads share; each field property returns an awaitable of that
    field. fetch() bypasses the shared result and always makes a new
    request. Field properties must be read while an event loop is running.
    """

    def __init__(self, wiki: "Wiki"):
        self.wiki = wiki
        self._task: Optional[asyncio.Task] = None

    @abstractmethod
    async def fetch(self) -> T:
        """Fetch the object and return a fresh snapshot."""
        ...

    def resolve(self) -> asyncio.Task:
        """Start the shared fetch if it has not started yet."""
        if self._task is None:
            self._task = asyncio.get_running_loop().create_task(self.fetch())
        return self._task

    def _field(self, name: str) -> Awaitable[Any]:
        task = self.resolve()

        async def read():
            # Shielded so one cancelled reader does not cancel the others
            return getattr(await asyncio.shield(task), name)

        return read()

    def __await__(self) -> Generator[Any, None, T]:
        return asyncio.shield(self.resolve()).__await__()
