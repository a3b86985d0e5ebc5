"""RS256 JWT-bearer assertion creation and verification."""

import base64
import logging
from datetime import UTC, datetime

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from pydantic import AnyHttpUrl, BaseModel, TypeAdapter, ValidationError

from jwtbearer.core.errors import InvalidArgument, SigningFailure
from jwtbearer.crypto.rsa_key import load_rsa_private_key
from jwtbearer.crypto.types import (
    DecodedAssertion,
    JwtClaims,
    JwtHeader,
    RsaPrivateKeyMaterial,
)

log = logging.getLogger(__name__)

ASSERTION_TTL_SECONDS = 300
ASSERTION_ALGORITHM = "RS256"

_http_url = TypeAdapter(AnyHttpUrl)


def _b64url(data: bytes) -> str:
    """Encode bytes as base64url without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _segment(model: BaseModel) -> str:
    return _b64url(model.model_dump_json().encode("utf-8"))


def signing_input(header: JwtHeader, claims: JwtClaims) -> bytes:
    """Return the ASCII bytes the RS256 signature is computed over."""
    return f"{_segment(header)}.{_segment(claims)}".encode("ascii")


def _require(name: str, value: str) -> None:
    if not value or not value.strip():
        raise InvalidArgument(name, "must not be empty")


def _require_http_url(name: str, value: str) -> None:
    _require(name, value)
    try:
        _http_url.validate_python(value)
    except ValidationError as exc:
        raise InvalidArgument(name, "must be an absolute http or https URL") from exc


def _rsa_public_numbers(material: RsaPrivateKeyMaterial) -> rsa.RSAPublicNumbers:
    return rsa.RSAPublicNumbers(
        e=material.to_int("public_exponent"),
        n=material.to_int("modulus"),
    )


def public_key_from_material(material: RsaPrivateKeyMaterial) -> rsa.RSAPublicKey:
    """Build the (e, n) public key matching the extracted private key."""
    try:
        return _rsa_public_numbers(material).public_key()
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise SigningFailure(f"RSA public numbers rejected: {exc}") from exc


def _private_key(material: RsaPrivateKeyMaterial) -> rsa.RSAPrivateKey:
    """Build a CRT private key from all eight extracted numbers."""
    numbers = rsa.RSAPrivateNumbers(
        p=material.to_int("prime1"),
        q=material.to_int("prime2"),
        d=material.to_int("private_exponent"),
        dmp1=material.to_int("exponent1"),
        dmq1=material.to_int("exponent2"),
        iqmp=material.to_int("coefficient"),
        public_numbers=_rsa_public_numbers(material),
    )
    try:
        return numbers.private_key()
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise SigningFailure(f"RSA key material rejected: {exc}") from exc


class AssertionBuilder:
    """Creates RS256-signed assertions for the OAuth2 JWT-bearer grant."""

    def __init__(self, key_material: RsaPrivateKeyMaterial) -> None:
        self._key_material = key_material

    def create_assertion(
        self,
        client_id: str,
        username: str,
        login_url: str,
        *,
        now: datetime | None = None,
    ) -> str:
        """Create a compact ``header.claims.signature`` JWT.

        The assertion expires ASSERTION_TTL_SECONDS after ``now`` (the
        current UTC time when omitted). ``login_url`` is used verbatim as
        the audience.
        """
        _require("client_id", client_id)
        _require("username", username)
        _require_http_url("login_url", login_url)

        issued = now or datetime.now(UTC)
        claims = JwtClaims(
            iss=client_id,
            sub=username,
            aud=login_url,
            exp=int(issued.timestamp()) + ASSERTION_TTL_SECONDS,
        )
        data = signing_input(JwtHeader(alg=ASSERTION_ALGORITHM), claims)

        key = _private_key(self._key_material)
        try:
            signature = key.sign(data, padding.PKCS1v15(), hashes.SHA256())
        except ValueError as exc:
            raise SigningFailure(f"RS256 signing failed: {exc}") from exc

        log.info(
            "Created JWT-bearer assertion iss=%s aud=%s exp=%d",
            client_id,
            login_url,
            claims.exp,
        )
        return f"{data.decode('ascii')}.{_b64url(signature)}"


def generate_assertion(
    client_id: str,
    username: str,
    login_url: str,
    private_key_pem: str,
    *,
    now: datetime | None = None,
) -> str:
    """Load a PEM RSA private key and create a signed assertion in one call."""
    material = load_rsa_private_key(private_key_pem)
    return AssertionBuilder(material).create_assertion(
        client_id, username, login_url, now=now
    )


def verify_assertion(
    token: str, material: RsaPrivateKeyMaterial, audience: str
) -> DecodedAssertion:
    """Verify an assertion against the public half of ``material``.

    PyJWT errors (bad signature, expired, wrong audience) propagate.
    """
    raw = jwt.decode(
        token,
        public_key_from_material(material),
        algorithms=[ASSERTION_ALGORITHM],
        audience=audience,
        options={"require": ["iss", "sub", "aud", "exp"]},
    )
    return DecodedAssertion.model_validate(raw)
