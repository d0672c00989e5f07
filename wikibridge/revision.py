"""Wiki revisions."""

from typing import TYPE_CHECKING, Any, Awaitable, Optional

from pydantic import PrivateAttr

from wikibridge.handles import Handle
from wikibridge.models import Diff, RevisionPage, RevisionWithPage, User

if TYPE_CHECKING:
    from wikibridge.wiki import Wiki


class RevisionBase:
    """Subclasses provide `wiki` and `id`."""

    async def compare(self, to: int) -> Diff:
        """Diff this revision against another; same as wiki.compare(self.id, to)."""
        return await self.wiki.compare(self.id, to)


class ResolvedRevision(RevisionWithPage, RevisionBase):
    """A fetched revision with plain attribute values."""

    _wiki: Any = PrivateAttr(default=None)

    @classmethod
    def bind(cls, wiki: "Wiki", revision: RevisionWithPage) -> "ResolvedRevision":
        resolved = cls.model_validate(revision.model_dump())
        resolved._wiki = wiki
        return resolved

    @property
    def wiki(self) -> "Wiki":
        return self._wiki


class RevisionHandle(Handle[ResolvedRevision], RevisionBase):
    """A revision that has not been fetched yet.

        revision = wiki.revision(42)
        print(await revision.delta)
        diff = await revision.compare(43)
    """

    def __init__(self, wiki: "Wiki", id: int):
        super().__init__(wiki)
        self.id = id

    def __repr__(self) -> str:
        return f"RevisionHandle({self.id})"

    async def fetch(self) -> ResolvedRevision:
        backend = await self.wiki.connect()
        return ResolvedRevision.bind(self.wiki, await backend.get_revision(self.id))

    @property
    def user(self) -> Awaitable[User]:
        return self._field("user")

    @property
    def timestamp(self) -> Awaitable[str]:
        return self._field("timestamp")

    @property
    def comment(self) -> Awaitable[Optional[str]]:
        return self._field("comment")

    @property
    def size(self) -> Awaitable[int]:
        return self._field("size")

    @property
    def delta(self) -> Awaitable[Optional[int]]:
        return self._field("delta")

    @property
    def minor(self) -> Awaitable[bool]:
        return self._field("minor")

    @property
    def page(self) -> Awaitable[RevisionPage]:
        return self._field("page")
