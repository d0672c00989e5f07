"""Pytest configuration and shared fixtures."""

import json
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest
import requests

# Add project root to path for all tests
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from wikibridge import Wiki

WIKI_URL = "https://wiki.example.org/w/"
REST_ROOT = "https://wiki.example.org/w/rest.php/v1/"
ACTION_URL = "https://wiki.example.org/w/api.php"

REST_PAGE = {
    "id": 7,
    "key": "A_B",
    "title": "A B",
    "latest": {"id": 5, "timestamp": "2024-01-05T00:00:00Z"},
    "content_model": "wikitext",
    "license": {"url": "https://creativecommons.org/licenses/by-sa/4.0/", "title": "CC BY-SA 4.0"},
    "source": "Hello",
}

REST_FILE = {
    "title": "Example.jpg",
    "file_description_url": "//wiki.example.org/wiki/File:Example.jpg",
    "latest": {"timestamp": "2023-05-01T12:00:00Z", "user": {"id": 9, "name": "Uploader"}},
    "preferred": {"mediatype": "BITMAP", "size": None, "width": 800, "height": 600, "duration": None,
                  "url": "//upload.example.org/a/ab/Example.jpg"},
    "original": {"mediatype": "BITMAP", "size": 52000, "width": 800, "height": 600, "duration": None,
                 "url": "//upload.example.org/a/ab/Example.jpg"},
    "thumbnail": {"mediatype": "BITMAP", "size": None, "width": 320, "height": 240, "duration": None,
                  "url": "//upload.example.org/thumb/a/ab/Example.jpg/320px-Example.jpg"},
}


def make_response(payload, status=200):
    """Build a mock requests.Response carrying a JSON (or text) payload."""
    response = Mock()
    response.status_code = status
    response.ok = status < 400
    if isinstance(payload, str):
        response.text = payload
        response.json.side_effect = requests.JSONDecodeError("Expecting value", payload, 0)
    else:
        response.text = json.dumps(payload)
        response.json.return_value = payload

    def raise_for_status():
        if status >= 400:
            raise requests.HTTPError(f"{status} Error")

    response.raise_for_status = Mock(side_effect=raise_for_status)
    return response


class FakeWikiServer:
    """
    Stand-in for requests.Session.request.

    Answers the protocol probes according to `protocol` ("rest", "action",
    or None for an unreachable host) and everything else from routes
    registered with add(). A route matches when its path (if any) ends the
    URL and its params are a subset of the request's query and form
    fields; the most specific match wins. Probe requests are not recorded
    in `calls`.
    """

    def __init__(self, protocol="rest"):
        self.protocol = protocol
        self.routes = []
        self.calls = []

    def add(self, payload, path=None, status=200, **params):
        """Register a response. payload may be an exception to raise instead."""
        expected = {key: str(value) for key, value in params.items()}
        self.routes.append((path, expected, payload, status))

    def count(self, path=None, **params):
        """Number of recorded calls matching path and params."""
        expected = {key: str(value) for key, value in params.items()}
        return sum(
            1 for call in self.calls
            if (path is None or call["url"].endswith(path))
            and all(call["params"].get(key) == value for key, value in expected.items())
        )

    def _probe(self, url, params):
        if url == REST_ROOT + "search/title" and params == {"q": "Main Page", "limit": "1"}:
            if self.protocol is None:
                raise requests.ConnectionError("Connection refused")
            if self.protocol == "rest":
                return make_response({"pages": []})
            return make_response({"httpCode": 404, "httpReason": "Not Found"}, status=404)

        if url == ACTION_URL and params.get("meta") == "siteinfo" and params.get("siprop") == "general":
            if self.protocol is None:
                raise requests.ConnectionError("Connection refused")
            return make_response({"batchcomplete": True, "query": {"general": {"sitename": "Example Wiki"}}})

        return None

    def __call__(self, method, url, params=None, headers=None, data=None, json=None, timeout=None):
        merged = {**(params or {}), **(data or {})}

        probe = self._probe(url, params or {})
        if probe is not None:
            return probe

        self.calls.append({
            "method": method,
            "url": url,
            "params": merged,
            "headers": headers or {},
            "json": json,
        })

        best = None
        for path, expected, payload, status in self.routes:
            if path is not None and not url.endswith(path):
                continue
            if any(merged.get(key) != value for key, value in expected.items()):
                continue
            if best is None or len(expected) > len(best[0]):
                best = (expected, payload, status)

        if best is None:
            raise AssertionError(f"Unexpected request: {method} {url} {merged}")

        _, payload, status = best
        if isinstance(payload, Exception):
            raise payload
        return make_response(payload, status)


def connect_wiki(server, **kwargs):
    """Create a Wiki whose session is answered by server."""
    wiki = Wiki(WIKI_URL, **kwargs)
    wiki.transport.session.request = Mock(side_effect=server)
    return wiki


def legacy_revision(revid, parentid, size, user="Alice", userid=1, **extra):
    """An Action API revision entry (formatversion=2)."""
    revision = {
        "revid": revid,
        "parentid": parentid,
        "minor": False,
        "user": user,
        "userid": userid,
        "timestamp": f"2024-01-{revid:02d}T00:00:00Z",
        "size": size,
        "comment": f"Edit {revid}",
        "tags": [],
    }
    revision.update(extra)
    return revision


def legacy_query(page, **query):
    """An action=query response holding a single page."""
    return {"batchcomplete": True, "query": {"pages": [page], **query}}


def add_parent_sizes(server, sizes):
    """Register size-only lookups for parent revisions ({revid: size})."""
    for revid, size in sizes.items():
        server.add(
            legacy_query({"pageid": 7, "ns": 0, "title": "A B", "revisions": [{"revid": revid, "size": size}]}),
            revids=revid,
            rvprop="size",
        )


@pytest.fixture
def rest_server():
    return FakeWikiServer("rest")


@pytest.fixture
def legacy_server():
    return FakeWikiServer("action")


@pytest.fixture
def rest_wiki(rest_server):
    return connect_wiki(rest_server)


@pytest.fixture
def legacy_wiki(legacy_server):
    return connect_wiki(legacy_server)


@pytest.fixture
def temp_log_dir(tmp_path):
    """Provide a temporary directory for log files."""
    log_dir = tmp_path / "logs"
    log_dir.mkdir()
    return log_dir
