"""Wiki files."""

from typing import TYPE_CHECKING, Awaitable

from wikibridge.handles import Handle
from wikibridge.models import FileRevision, FileWithThumbnail, Format

if TYPE_CHECKING:
    from wikibridge.wiki import Wiki


class FileHandle(Handle[FileWithThumbnail]):
    """A file that has not been fetched yet.

    Every field of the file is available as an awaitable property,
    including `title`, which is the resolved title without "File:".

        file = wiki.file("Example.jpg")
        print(await file.original)
    """

    def __init__(self, wiki: "Wiki", name: str):
        super().__init__(wiki)
        self.name = name

    def __repr__(self) -> str:
        return f"FileHandle({self.name!r})"

    async def fetch(self) -> FileWithThumbnail:
        backend = await self.wiki.connect()
        return await backend.get_file(self.name)

    @property
    def title(self) -> Awaitable[str]:
        return self._field("title")

    @property
    def file_description_url(self) -> Awaitable[str]:
        return self._field("file_description_url")

    @property
    def latest(self) -> Awaitable[FileRevision]:
        return self._field("latest")

    @property
    def preferred(self) -> Awaitable[Format]:
        return self._field("preferred")

    @property
    def original(self) -> Awaitable[Format]:
        return self._field("original")

    @property
    def thumbnail(self) -> Awaitable[Format]:
        return self._field("thumbnail")
