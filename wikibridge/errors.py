"""
Exceptions and response classification for wikibridge.

Both wiki protocols report failures inside an otherwise normal JSON body.
check_response() recognizes the three envelopes by their shape and raises
a single ApiError for all of them:

- REST API:                 {"httpCode": 404, "messageTranslations": {...}}
- Action API:               {"errors": [{"code": ..., "text": ...}]}
- Action API (deprecated):  {"error": {"code": ..., "info": ...}}

The shape is checked, not the protocol in use, since either endpoint can
surface either family.
"""

from typing import Any, Optional


class WikiError(Exception):
    """Base class for wikibridge errors."""


class ApiError(WikiError):
    """An error envelope returned by the wiki."""

    def __init__(self, message: str, code: Optional[str] = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.payload = payload


class InvalidEndpointError(WikiError):
    """Neither the REST API nor the Action API answered at the given URL."""


class InvalidArgumentError(WikiError, ValueError):
    """A caller-supplied argument was rejected before any request was made."""


class UnsupportedOperationError(WikiError, NotImplementedError):
    """The operation has no equivalent on the protocol the wiki speaks."""


def check_response(body: Any) -> Any:
    """
    Raise ApiError if body is an error envelope, otherwise return it unchanged.

    Args:
        body: Decoded JSON response of any type

    Returns:
        The same body

    Raises:
        ApiError: body matches one of the recognized error shapes
    """
    if not isinstance(body, dict):
        return body

    if "httpCode" in body:
        translations = body.get("messageTranslations") or {}
        message = translations.get("en")
        if message is None:
            message = body.get("message")
        if message is None:
            message = str(body["httpCode"])
        code = body.get("errorKey") or str(body["httpCode"])
        raise ApiError(message, code=code, payload=body)

    errors = body.get("errors")
    if isinstance(errors, list) and errors:
        first = errors[0]
        raise ApiError(first.get("text", ""), code=first.get("code"), payload=body)

    error = body.get("error")
    if isinstance(error, dict):
        raise ApiError(error.get("info", ""), code=error.get("code"), payload=body)

    return body
