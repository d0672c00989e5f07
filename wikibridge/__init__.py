"""
MediaWiki client with one object model for the REST API and the Action API.

Provides:
- Wiki: client entry point; detects which API the wiki offers
- PageHandle/RevisionHandle/FileHandle: lazy, awaitable wiki objects
- History: filterable, sliceable async iterator over page history
- setup_logging: Logging configuration for console and file output
- load_config: JSON configuration for scripts
"""

from wikibridge.config import load_config
from wikibridge.errors import (
    ApiError,
    InvalidArgumentError,
    InvalidEndpointError,
    UnsupportedOperationError,
    WikiError,
)
from wikibridge.file import FileHandle
from wikibridge.history import History
from wikibridge.logging_config import get_log_dir, setup_logging
from wikibridge.page import PageHandle, ResolvedPage
from wikibridge.revision import ResolvedRevision, RevisionHandle
from wikibridge.title_utils import title_to_key
from wikibridge.wiki import Wiki

__version__ = "1.0.0"

__all__ = [
    "Wiki",
    "PageHandle",
    "ResolvedPage",
    "RevisionHandle",
    "ResolvedRevision",
    "FileHandle",
    "History",
    "WikiError",
    "ApiError",
    "InvalidEndpointError",
    "InvalidArgumentError",
    "UnsupportedOperationError",
    "setup_logging",
    "get_log_dir",
    "load_config",
    "title_to_key",
]
