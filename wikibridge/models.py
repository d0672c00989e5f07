"""Data models for wikibridge.

These follow the object shapes of the MediaWiki REST API. Both backends
produce them, so callers never see which protocol answered.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class WikiModel(BaseModel):
    """Immutable snapshot of a wiki object."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    def to_dict(self) -> dict:
        """Return the object as plain JSON-compatible data."""
        return self.model_dump(mode="json", by_alias=True)


class LatestRevision(WikiModel):
    id: int
    timestamp: str


class License(WikiModel):
    url: str
    title: str


class Page(WikiModel):
    """The latest revision of a wiki page."""

    id: int
    key: str
    title: str
    latest: LatestRevision
    content_model: str
    license: License
    source: Optional[str] = None
    html: Optional[str] = None


class PageLanguage(WikiModel):
    """A page in another language linked from this one."""

    code: str
    name: str
    key: str
    title: str


class User(WikiModel):
    name: str
    id: Optional[int] = None


class RevisionPage(WikiModel):
    id: int
    title: str


class Revision(WikiModel):
    """A change to a wiki page."""

    id: int
    user: User
    timestamp: str
    comment: Optional[str] = None
    size: int
    delta: Optional[int] = None
    minor: bool = False


class RevisionWithPage(Revision):
    page: RevisionPage


class HistoryBatch(WikiModel):
    """One page of REST history results with its cursor URLs."""

    revisions: list[Revision] = Field(default_factory=list)
    latest: Optional[str] = None
    older: Optional[str] = None
    newer: Optional[str] = None


class HistoryCount(WikiModel):
    count: int
    limit: bool = False


class Format(WikiModel):
    """One rendition of a file."""

    mediatype: str
    size: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[float] = None
    url: str


class FileUploader(WikiModel):
    name: str
    id: Optional[int] = None


class FileRevision(WikiModel):
    timestamp: str
    user: FileUploader


class WikiFile(WikiModel):
    """A file page and its downloadable renditions."""

    title: str
    file_description_url: str
    latest: FileRevision
    preferred: Format
    original: Format


class FileWithThumbnail(WikiFile):
    thumbnail: Format


class SearchThumbnail(WikiModel):
    mimetype: str
    size: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    duration: Optional[float] = None
    url: str


class SearchResult(WikiModel):
    """A page matching a search."""

    id: int
    key: str
    title: str
    excerpt: Optional[str] = None
    matched_title: Optional[str] = None
    description: Optional[str] = None
    thumbnail: Optional[SearchThumbnail] = None


class CompleteResult(SearchResult):
    """A page whose title starts with the search terms."""


class Section(WikiModel):
    level: int
    heading: str
    offset: int


class RevisionInfo(WikiModel):
    id: int
    slot_role: str
    sections: list[Section] = Field(default_factory=list)


class HighlightRange(WikiModel):
    start: int
    length: int
    type: int


class MoveInfo(WikiModel):
    id: str
    link_id: str = Field(alias="linkId")
    link_direction: int = Field(alias="linkDirection")


class LineOffset(WikiModel):
    from_: Optional[int] = Field(default=None, alias="from")
    to: Optional[int] = None


class Line(WikiModel):
    """One line of a visual diff."""

    type: int
    text: str
    line_number: Optional[int] = Field(default=None, alias="lineNumber")
    offset: Optional[LineOffset] = None
    highlight_ranges: list[HighlightRange] = Field(default_factory=list, alias="highlightRanges")
    move_info: Optional[MoveInfo] = Field(default=None, alias="moveInfo")


class Diff(WikiModel):
    """Line-by-line comparison of two revisions."""

    from_: RevisionInfo = Field(alias="from")
    to: RevisionInfo
    diff: list[Line] = Field(default_factory=list)
