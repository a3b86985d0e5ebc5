"""Exception types raised by PEM decoding, key parsing, signing and token validation."""


class JWTBearerError(Exception):
    """Base class for every failure raised by jwtbearer."""


class PemError(JWTBearerError):
    """PEM armor could not be turned into DER bytes."""


class MalformedPem(PemError):
    """No BEGIN/END marker pair was found."""


class InvalidBase64(PemError):
    """The armored body is not valid base64."""


class KeyParseError(JWTBearerError):
    """DER walking or RSA key extraction failed."""

    def __init__(
        self, message: str, *, offset: int | None = None, field: str | None = None
    ) -> None:
        self.offset = offset
        self.field = field
        details = []
        if field is not None:
            details.append(f"field={field}")
        if offset is not None:
            details.append(f"offset={offset}")
        if details:
            message = f"{message} ({', '.join(details)})"
        super().__init__(message)


class TruncatedInput(KeyParseError):
    """The buffer ended before a tag, length or value was complete."""


class UnexpectedTag(KeyParseError):
    """A DER element carried a different tag than the one required."""

    def __init__(
        self,
        expected: str,
        actual: str,
        *,
        offset: int | None = None,
        field: str | None = None,
    ) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"expected {expected}, found {actual}", offset=offset, field=field
        )


class InvalidKeyStructure(KeyParseError):
    """The DER tree does not have the RSAPrivateKey shape."""


class UnsupportedKeyVersion(KeyParseError):
    """RSAPrivateKey version is not 0 (two-prime)."""

    def __init__(self, version: int, *, offset: int | None = None) -> None:
        self.version = version
        super().__init__(
            f"unsupported RSAPrivateKey version {version}",
            offset=offset,
            field="version",
        )


class InvalidArgument(JWTBearerError):
    """A caller-supplied identity or URL value is unusable."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        super().__init__(f"{name}: {reason}")


class SigningFailure(JWTBearerError):
    """The RSA primitive rejected the extracted key material."""


class TokenResponseError(JWTBearerError):
    """The token endpoint response body failed validation."""


class MalformedResponse(TokenResponseError):
    """The body is not a JSON object of the expected shape."""


class MissingField(TokenResponseError):
    """A required field is absent or empty."""

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        super().__init__(message or f"token response is missing required '{name}'")


class TokenEndpointError(MissingField):
    """The token endpoint answered with an OAuth error document."""

    def __init__(self, error: str, description: str | None = None) -> None:
        self.error = error
        self.description = description
        message = f"token endpoint returned error '{error}'"
        if description:
            message = f"{message}: {description}"
        super().__init__("access_token", message)
