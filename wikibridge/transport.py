#!/usr/bin/env python3
"""
HTTP transport for wikibridge.

A thin asyncio wrapper around a requests.Session. Each call is a single
HTTP request; there are no retries. Blocking session calls run in worker
threads, at most max_concurrency at a time.

Usage:
    transport = Transport(user_agent="MyTool/1.0 (me@example.org)")
    data = await transport.request_json("GET", "https://en.wikipedia.org/w/api.php",
                                        params={"action": "query", "format": "json"})
"""

import asyncio
import logging
from typing import Any, Mapping, Optional

import requests

DEFAULT_USER_AGENT = "wikibridge/1.0 (https://pypi.org/project/wikibridge/)"


def encode_params(params: Optional[Mapping[str, Any]]) -> dict[str, str]:
    """
    Flatten parameter values into query-string form.

    None and False are dropped, True becomes "1", lists and tuples are
    pipe-joined, everything else is converted with str().
    """
    encoded = {}
    for key, value in (params or {}).items():
        if value is None or value is False:
            continue
        if value is True:
            encoded[key] = "1"
        elif isinstance(value, (list, tuple)):
            encoded[key] = "|".join(str(item) for item in value)
        else:
            encoded[key] = str(value)
    return encoded


class Transport:
    """Asyncio front end for a shared requests.Session."""

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: Optional[str] = None,
        max_concurrency: int = 8,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the transport.

        Args:
            timeout: Request timeout in seconds
            user_agent: Custom user agent string
            max_concurrency: Maximum number of requests in flight at once
            logger: Logger instance (creates one if not provided)
        """
        self.timeout = timeout
        self.max_concurrency = max_concurrency
        self.logger = logger or logging.getLogger("wikibridge.transport")
        self._slots = asyncio.Semaphore(max_concurrency)

        self.session = requests.Session()
        self.session.headers.update({
            "User-Agent": user_agent or DEFAULT_USER_AGENT,
            "Accept": "application/json",
        })

    async def send(
        self,
        method: str,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        headers: Optional[dict] = None,
        data: Optional[Mapping[str, Any]] = None,
        json: Any = None,
    ) -> requests.Response:
        """
        Send one request and return the raw response.

        Args:
            method: HTTP method
            url: Absolute URL
            params: Query parameters, flattened with encode_params()
            headers: Extra headers for this request
            data: Form fields, flattened with encode_params()
            json: JSON-serializable request body

        Raises:
            requests.RequestException: The request could not be completed
        """
        query = encode_params(params)
        form = encode_params(data) if data is not None else None
        self.logger.debug(f"{method} {url} {query}")

        async with self._slots:
            return await asyncio.to_thread(
                self.session.request,
                method,
                url,
                params=query,
                headers=headers,
                data=form,
                json=json,
                timeout=self.timeout,
            )

    async def request_json(self, method: str, url: str, **kwargs) -> Any:
        """Send a request and decode the JSON body, whatever the status code."""
        response = await self.send(method, url, **kwargs)
        return response.json()

    def close(self) -> None:
        """Close the underlying session."""
        self.session.close()
