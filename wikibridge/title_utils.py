#!/usr/bin/env python3
"""
Title and URL utilities for wikibridge.

Converts between the display forms the Action API returns and the forms
the REST API uses.
"""

from urllib.parse import quote


FILE_PREFIX = "File:"


def title_to_key(title: str) -> str:
    """
    Convert a page title to its URL-friendly key.

    Args:
        title: Page title (e.g., "Main Page")

    Returns:
        Key with every space replaced by an underscore (e.g., "Main_Page")
    """
    return title.replace(" ", "_")


def quote_title(title: str) -> str:
    """Quote a title for use as a single REST path segment."""
    return quote(title_to_key(title), safe="")


def strip_file_prefix(title: str) -> str:
    """
    Remove the namespace from a file title.

    Args:
        title: File title (e.g., "File:Example.jpg")

    Returns:
        Everything after the first "File:" (e.g., "Example.jpg"), or the
        title unchanged when it has no such prefix
    """
    _, sep, rest = title.partition(FILE_PREFIX)
    return rest if sep else title


def ensure_file_prefix(title: str) -> str:
    """Prepend "File:" to a bare file name."""
    return title if title.startswith(FILE_PREFIX) else FILE_PREFIX + title


def strip_scheme(url: str) -> str:
    """
    Convert an absolute URL to the protocol-relative form.

    Args:
        url: Absolute URL (e.g., "https://upload.example.org/a/ab/Example.jpg")

    Returns:
        Everything after the scheme's colon (e.g., "//upload.example.org/a/ab/Example.jpg"),
        or the URL unchanged when it has no "://"
    """
    _, sep, rest = url.partition("://")
    return "//" + rest if sep else url
