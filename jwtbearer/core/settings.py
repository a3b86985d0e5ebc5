"""Assertion settings loaded from environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from jwtbearer.core.errors import InvalidArgument

LOGIN_URL_DEFAULT = "https://login.salesforce.com"
TOKEN_PATH_DEFAULT = "/services/oauth2/token"


class AssertionSettings(BaseSettings):
    """Identity and key settings for the JWT-bearer grant."""

    model_config = SettingsConfigDict(env_prefix="JWT_BEARER_")

    client_id: str = ""
    username: str = ""
    login_url: str = LOGIN_URL_DEFAULT
    private_key: str = ""
    private_key_file: str = ""
    token_path: str = TOKEN_PATH_DEFAULT

    def resolve_private_key(self) -> str:
        """Return the PEM text, inline value first, then the key file."""
        if self.private_key:
            return self.private_key
        if self.private_key_file:
            return Path(self.private_key_file).read_text(encoding="utf-8")
        raise InvalidArgument(
            "private_key", "neither JWT_BEARER_PRIVATE_KEY nor a key file is set"
        )
