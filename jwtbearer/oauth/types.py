"""Type definitions for the JWT-bearer token exchange."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict

JWT_BEARER_GRANT_TYPE = "urn:ietf:params:oauth:grant-type:jwt-bearer"


class TokenResponse(BaseModel):
    """Validated token endpoint response."""

    model_config = ConfigDict(frozen=True, extra="ignore", coerce_numbers_to_str=True)

    access_token: str
    instance_url: str
    id: str | None = None
    token_type: str | None = None
    issued_at: str | None = None
    signature: str | None = None
    scope: str | None = None
    expires_in: int | None = None

    @property
    def issued_at_datetime(self) -> datetime | None:
        """``issued_at`` as a UTC datetime (the value is epoch milliseconds)."""
        value = self.issued_at
        if not value or not (value.isascii() and value.isdigit()):
            return None
        try:
            return datetime.fromtimestamp(int(value) / 1000, UTC)
        except (OverflowError, ValueError, OSError):
            return None


class TokenRequest(BaseModel):
    """Form POST that exchanges an assertion for an access token."""

    model_config = ConfigDict(frozen=True)

    url: str
    assertion: str
    grant_type: str = JWT_BEARER_GRANT_TYPE

    def form(self) -> dict[str, str]:
        """Fields for an application/x-www-form-urlencoded body."""
        return {"grant_type": self.grant_type, "assertion": self.assertion}
