"""Tests for token endpoint response validation."""

import json
from datetime import UTC, datetime

import pytest

from jwtbearer.core.errors import (
    MalformedResponse,
    MissingField,
    TokenEndpointError,
    TokenResponseError,
)
from jwtbearer.oauth.token_response import parse_token_response

FULL_RESPONSE = {
    "access_token": "00Dxx0000001gPL!AR8AQJXg5oj8jXSgxJfA0lBog",
    "scope": "web openid api id",
    "instance_url": "https://yourInstance.salesforce.com",
    "id": "https://login.salesforce.com/id/00Dxx0000001gPLEAY/005xx000001SwiUAAS",
    "token_type": "Bearer",
    "issued_at": "1700000000000",
    "signature": "d/SxeYBxH0GSVko0HMgcUxuZy0PA2cDDz1u7g7JtDHw=",
}


class TestParseTokenResponse:
    """Tests for successful parsing."""

    def test_minimal_response(self) -> None:
        result = parse_token_response('{"access_token":"X","instance_url":"https://y"}')
        assert result.access_token == "X"
        assert result.instance_url == "https://y"
        assert result.id is None
        assert result.token_type is None
        assert result.issued_at is None
        assert result.signature is None
        assert result.expires_in is None

    def test_full_response(self) -> None:
        result = parse_token_response(json.dumps(FULL_RESPONSE))
        assert result.access_token == FULL_RESPONSE["access_token"]
        assert result.id == FULL_RESPONSE["id"]
        assert result.token_type == "Bearer"
        assert result.signature == FULL_RESPONSE["signature"]
        assert result.scope == "web openid api id"

    def test_bytes_body(self) -> None:
        result = parse_token_response(json.dumps(FULL_RESPONSE).encode())
        assert result.instance_url == FULL_RESPONSE["instance_url"]

    def test_field_names_case_insensitive(self) -> None:
        body = '{"Access_Token":"X","INSTANCE_URL":"https://y","Token_Type":"Bearer"}'
        result = parse_token_response(body)
        assert result.access_token == "X"
        assert result.instance_url == "https://y"
        assert result.token_type == "Bearer"

    def test_first_spelling_wins(self) -> None:
        body = '{"access_token":"first","ACCESS_TOKEN":"second","instance_url":"u"}'
        assert parse_token_response(body).access_token == "first"

    def test_unknown_fields_ignored(self) -> None:
        body = '{"access_token":"X","instance_url":"https://y","sfdc_community_id":"1"}'
        result = parse_token_response(body)
        assert not hasattr(result, "sfdc_community_id")

    def test_expires_in(self) -> None:
        body = '{"access_token":"X","instance_url":"https://y","expires_in":7200}'
        assert parse_token_response(body).expires_in == 7200

    def test_numeric_issued_at_coerced(self) -> None:
        body = '{"access_token":"X","instance_url":"y","issued_at":1700000000000}'
        assert parse_token_response(body).issued_at == "1700000000000"

    def test_issued_at_datetime(self) -> None:
        result = parse_token_response(json.dumps(FULL_RESPONSE))
        expected = datetime(2023, 11, 14, 22, 13, 20, tzinfo=UTC)
        assert result.issued_at_datetime == expected

    @pytest.mark.parametrize(
        "issued_at", ["\u00b2", "99999999999999999999", "soon", ""]
    )
    def test_unusable_issued_at_gives_none(self, issued_at: str) -> None:
        body = json.dumps(
            {"access_token": "X", "instance_url": "https://y", "issued_at": issued_at}
        )
        assert parse_token_response(body).issued_at_datetime is None

    def test_result_is_immutable(self) -> None:
        result = parse_token_response('{"access_token":"X","instance_url":"https://y"}')
        with pytest.raises(ValueError):
            result.access_token = "Y"


class TestMissingFields:
    """Tests for required field enforcement."""

    def test_missing_access_token(self) -> None:
        with pytest.raises(MissingField) as exc_info:
            parse_token_response('{"instance_url":"https://y"}')
        assert exc_info.value.name == "access_token"

    def test_empty_access_token(self) -> None:
        with pytest.raises(MissingField) as exc_info:
            parse_token_response('{"access_token":"","instance_url":"https://y"}')
        assert exc_info.value.name == "access_token"

    def test_missing_instance_url(self) -> None:
        with pytest.raises(MissingField) as exc_info:
            parse_token_response('{"access_token":"X"}')
        assert exc_info.value.name == "instance_url"

    def test_null_instance_url(self) -> None:
        with pytest.raises(MissingField) as exc_info:
            parse_token_response('{"access_token":"X","instance_url":null}')
        assert exc_info.value.name == "instance_url"

    def test_access_token_checked_first(self) -> None:
        with pytest.raises(MissingField) as exc_info:
            parse_token_response("{}")
        assert exc_info.value.name == "access_token"

    def test_error_document(self) -> None:
        body = json.dumps(
            {
                "error": "invalid_grant",
                "error_description": "user hasn't approved this consumer",
            }
        )
        with pytest.raises(TokenEndpointError) as exc_info:
            parse_token_response(body)
        assert exc_info.value.error == "invalid_grant"
        assert exc_info.value.description == "user hasn't approved this consumer"
        assert exc_info.value.name == "access_token"
        assert isinstance(exc_info.value, MissingField)


class TestMalformedResponse:
    """Tests for bodies that are not a usable JSON object."""

    @pytest.mark.parametrize(
        "body",
        [
            "not json",
            '"not json"',
            "[1, 2, 3]",
            "null",
            "",
            "   ",
            '{"access_token": "X",',
        ],
    )
    def test_rejected(self, body: str) -> None:
        with pytest.raises(MalformedResponse):
            parse_token_response(body)

    def test_wrong_field_type(self) -> None:
        body = '{"access_token":"X","instance_url":"https://y","expires_in":"soon"}'
        with pytest.raises(MalformedResponse):
            parse_token_response(body)

    def test_invalid_utf8(self) -> None:
        with pytest.raises(MalformedResponse):
            parse_token_response(b'{"access_token":"\xff"}')

    def test_errors_share_base_class(self) -> None:
        with pytest.raises(TokenResponseError):
            parse_token_response("not json")
