"""Tests for error envelope classification."""

import pytest

from wikibridge.errors import (
    ApiError,
    InvalidArgumentError,
    UnsupportedOperationError,
    WikiError,
    check_response,
)


class TestCheckResponse:
    """Tests for check_response function."""

    def test_success_payload_returned_unchanged(self):
        """Bodies without an error shape should pass through as-is."""
        body = {"query": {"pages": []}}
        assert check_response(body) is body

    def test_non_dict_payloads_pass_through(self):
        """Lists and scalars are never error envelopes."""
        assert check_response([{"code": "de"}]) == [{"code": "de"}]
        assert check_response("text") == "text"
        assert check_response(None) is None

    def test_deprecated_action_error_uses_info(self):
        """{error: {...}} should raise with error.info as the message."""
        body = {"error": {"code": "missingtitle", "info": "The page you specified doesn't exist.", "docref": "See api.php"}}
        with pytest.raises(ApiError) as excinfo:
            check_response(body)
        assert str(excinfo.value) == "The page you specified doesn't exist."
        assert excinfo.value.code == "missingtitle"
        assert excinfo.value.payload is body

    def test_action_error_uses_first_text(self):
        """{errors: [...]} should raise with the first entry's text."""
        body = {
            "errors": [
                {"code": "badtoken", "text": "Invalid CSRF token.", "module": "edit"},
                {"code": "other", "text": "Second problem.", "module": "main"},
            ],
            "docref": "See api.php",
            "servedby": "mw1",
        }
        with pytest.raises(ApiError) as excinfo:
            check_response(body)
        assert excinfo.value.message == "Invalid CSRF token."
        assert excinfo.value.code == "badtoken"

    def test_rest_error_prefers_english_translation(self):
        """REST errors should use messageTranslations['en'] first."""
        body = {
            "httpCode": 404,
            "httpReason": "Not Found",
            "messageTranslations": {"en": "The specified page does not exist"},
            "message": "fallback",
            "errorKey": "rest-nonexistent-title",
        }
        with pytest.raises(ApiError) as excinfo:
            check_response(body)
        assert excinfo.value.message == "The specified page does not exist"
        assert excinfo.value.code == "rest-nonexistent-title"

    def test_rest_error_falls_back_to_message(self):
        """Without translations, REST errors should use message."""
        body = {"httpCode": 400, "httpReason": "Bad Request", "message": "Invalid title"}
        with pytest.raises(ApiError, match="Invalid title"):
            check_response(body)

    def test_rest_error_falls_back_to_http_code(self):
        """Without any message, REST errors should use the status code."""
        with pytest.raises(ApiError) as excinfo:
            check_response({"httpCode": 500, "httpReason": "Internal Server Error"})
        assert excinfo.value.message == "500"
        assert excinfo.value.code == "500"

    def test_shape_not_protocol_decides(self):
        """A REST-shaped error should be caught even mixed with other keys."""
        with pytest.raises(ApiError):
            check_response({"httpCode": 403, "query": {}})

    def test_empty_errors_list_is_not_an_error(self):
        """An empty errors list should not be treated as a failure."""
        body = {"errors": [], "query": {}}
        assert check_response(body) is body


class TestErrorHierarchy:
    """Tests for exception classes."""

    def test_all_errors_are_wiki_errors(self):
        assert issubclass(ApiError, WikiError)
        assert issubclass(InvalidArgumentError, WikiError)
        assert issubclass(UnsupportedOperationError, WikiError)

    def test_invalid_argument_is_value_error(self):
        """Callers catching ValueError should see argument errors."""
        assert issubclass(InvalidArgumentError, ValueError)
