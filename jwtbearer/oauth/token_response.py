"""Token endpoint response parsing and validation."""

import json
import logging
from typing import Any

from pydantic import ValidationError

from jwtbearer.core.errors import MalformedResponse, MissingField, TokenEndpointError
from jwtbearer.oauth.types import TokenResponse

log = logging.getLogger(__name__)

REQUIRED_FIELDS = ("access_token", "instance_url")


def _fold_keys(document: dict[str, Any]) -> dict[str, Any]:
    """Lower-case field names; the first spelling of a name wins."""
    folded: dict[str, Any] = {}
    for key, value in document.items():
        folded.setdefault(key.lower(), value)
    return folded


def _check_required(fields: dict[str, Any]) -> None:
    for name in REQUIRED_FIELDS:
        if fields.get(name) not in (None, ""):
            continue
        error = fields.get("error")
        if name == "access_token" and error:
            description = fields.get("error_description")
            log.warning("Token endpoint returned error %r: %s", error, description)
            raise TokenEndpointError(str(error), description and str(description))
        raise MissingField(name)


def parse_token_response(body: str | bytes) -> TokenResponse:
    """Parse a token endpoint JSON body into a TokenResponse.

    Field names match case-insensitively and unknown fields are ignored.
    """
    if not body or not body.strip():
        raise MalformedResponse("token response body is empty")
    try:
        document = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedResponse(f"token response is not valid JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise MalformedResponse(
            f"token response must be a JSON object, got {type(document).__name__}"
        )

    fields = _fold_keys(document)
    _check_required(fields)
    try:
        return TokenResponse.model_validate(fields)
    except ValidationError as exc:
        raise MalformedResponse(f"token response has invalid fields: {exc}") from exc
