"""JWT-bearer grant request assembly."""

from datetime import datetime

from jwtbearer.core.settings import TOKEN_PATH_DEFAULT, AssertionSettings
from jwtbearer.crypto.jwt_assertion import generate_assertion
from jwtbearer.oauth.types import TokenRequest


def token_endpoint_url(login_url: str, token_path: str = TOKEN_PATH_DEFAULT) -> str:
    """Join the login URL and the token endpoint path."""
    return f"{login_url.rstrip('/')}/{token_path.lstrip('/')}"


def build_token_request(
    settings: AssertionSettings, *, now: datetime | None = None
) -> TokenRequest:
    """Sign an assertion from settings and describe the token POST."""
    assertion = generate_assertion(
        settings.client_id,
        settings.username,
        settings.login_url,
        settings.resolve_private_key(),
        now=now,
    )
    return TokenRequest(
        url=token_endpoint_url(settings.login_url, settings.token_path),
        assertion=assertion,
    )
