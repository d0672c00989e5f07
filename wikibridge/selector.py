"""
Protocol detection for wikibridge.

A wiki is reachable through the REST API (rest.php/v1/) or only through
the Action API (api.php). select_backend() asks the REST API first and
falls back to the Action API when that fails.
"""

import logging
from typing import Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

import requests

from wikibridge.backends import LegacyBackend, ModernBackend, WikiBackend
from wikibridge.errors import InvalidEndpointError
from wikibridge.transport import Transport

REST_PATH = "rest.php/v1/"
ACTION_PATH = "api.php"

# Cheap REST route that exists on every wiki with the REST API enabled
HEALTH_PATH = "search/title"
HEALTH_PARAMS = {"q": "Main Page", "limit": 1}

SITEINFO_PARAMS = {
    "action": "query",
    "meta": "siteinfo",
    "siprop": "general",
    "format": "json",
    "formatversion": 2,
}


def endpoint_urls(url: str) -> tuple[str, str]:
    """
    Derive both API endpoints from any wiki API URL.

    Args:
        url: Script path (e.g., "https://en.wikipedia.org/w/") or either
             endpoint ("…/w/api.php", "…/w/rest.php/v1/")

    Returns:
        (REST API root ending in "rest.php/v1/", Action API URL ending in "api.php")
    """
    parts = urlsplit(url)
    path = parts.path.rstrip("/")
    for suffix in ("rest.php/v1", "rest.php", ACTION_PATH):
        if path.endswith("/" + suffix):
            path = path[: -len(suffix)]
            break
    else:
        path += "/"

    root = urlunsplit((parts.scheme, parts.netloc, path, "", ""))
    return root + REST_PATH, root + ACTION_PATH


async def probe_rest(transport: Transport, rest_url: str, logger: logging.Logger) -> bool:
    """Check whether the REST API answers with JSON."""
    try:
        response = await transport.send("GET", urljoin(rest_url, HEALTH_PATH), params=HEALTH_PARAMS)
        if not response.ok:
            logger.info(f"REST API probe at {rest_url} returned HTTP {response.status_code}")
            return False
        return isinstance(response.json(), dict)
    except requests.RequestException as e:
        logger.warning(f"REST API probe at {rest_url} failed: {e}")
        return False


async def select_backend(
    transport: Transport,
    url: str,
    token: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
) -> WikiBackend:
    """
    Pick the backend for the wiki at url.

    Args:
        transport: Transport shared with the returned backend
        url: Any URL accepted by endpoint_urls()
        token: OAuth bearer token for write requests
        logger: Logger handed to the backend

    Returns:
        ModernBackend if the REST API answers, otherwise LegacyBackend

    Raises:
        InvalidEndpointError: Neither API answered
    """
    logger = logger or logging.getLogger("wikibridge")
    rest_url, action_url = endpoint_urls(url)

    if await probe_rest(transport, rest_url, logger):
        logger.info(f"Using REST API at {rest_url}")
        return ModernBackend(transport, rest_url, token=token, logger=logger)

    try:
        data = await transport.request_json("GET", action_url, params=SITEINFO_PARAMS)
    except requests.RequestException as e:
        raise InvalidEndpointError(f"No wiki API found at {url}: {e}") from e

    if not isinstance(data, dict) or "query" not in data:
        raise InvalidEndpointError(f"No wiki API found at {url}")

    logger.info(f"REST API unavailable; emulating it with the Action API at {action_url}")
    return LegacyBackend(transport, action_url, token=token, logger=logger)
