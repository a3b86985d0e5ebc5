"""PKCS#1 RSAPrivateKey extraction, with PKCS#8 PrivateKeyInfo unwrapping.

RSAPrivateKey ::= SEQUENCE {
    version           INTEGER,  -- 0 for two-prime keys
    modulus           INTEGER,  -- n
    publicExponent    INTEGER,  -- e
    privateExponent   INTEGER,  -- d
    prime1            INTEGER,  -- p
    prime2            INTEGER,  -- q
    exponent1         INTEGER,  -- d mod (p-1)
    exponent2         INTEGER,  -- d mod (q-1)
    coefficient       INTEGER   -- (inverse of q) mod p
}

PrivateKeyInfo ::= SEQUENCE {
    version              INTEGER,  -- 0, or 1 for OneAsymmetricKey
    privateKeyAlgorithm  AlgorithmIdentifier,
    privateKey           OCTET STRING  -- DER of RSAPrivateKey
}
"""

import logging
from collections.abc import Callable
from enum import StrEnum

from jwtbearer.core.errors import (
    InvalidKeyStructure,
    KeyParseError,
    UnsupportedKeyVersion,
)
from jwtbearer.crypto.der import DerKind, DerReader
from jwtbearer.crypto.pem import decode_pem
from jwtbearer.crypto.types import RsaField, RsaPrivateKeyMaterial

log = logging.getLogger(__name__)

RSA_KEY_VERSION = 0
PKCS8_VERSIONS = (0, 1)
RSA_KEY_FIELDS: tuple[RsaField, ...] = (
    "modulus",
    "public_exponent",
    "private_exponent",
    "prime1",
    "prime2",
    "exponent1",
    "exponent2",
    "coefficient",
)


class KeyShape(StrEnum):
    """Outer structure of a DER private key."""

    PKCS1 = "pkcs1"
    PKCS8 = "pkcs8"


def _open_sequence(reader: DerReader, field: str) -> DerReader:
    start = reader.position
    try:
        return reader.enter(DerKind.SEQUENCE)
    except KeyParseError as exc:
        raise InvalidKeyStructure(
            f"expected a SEQUENCE ({type(exc).__name__})", offset=start, field=field
        ) from exc


def _read_integer(reader: DerReader, field: str) -> bytes:
    start = reader.position
    try:
        return reader.read_integer()
    except KeyParseError as exc:
        raise InvalidKeyStructure(
            f"cannot read INTEGER ({type(exc).__name__})", offset=start, field=field
        ) from exc


def _shape_of(version: bytes, body: DerReader) -> KeyShape:
    """PKCS#8 starts with version 0 (or 1, RFC 5958) and an AlgorithmIdentifier.

    A PKCS#1 version is always followed by the modulus INTEGER, never a
    SEQUENCE, so the two shapes cannot be confused.
    """
    if int.from_bytes(version, "big") not in PKCS8_VERSIONS:
        return KeyShape.PKCS1
    start = body.position
    try:
        following = body.peek_tag()
    except KeyParseError as exc:
        raise InvalidKeyStructure(
            f"unreadable element after version ({type(exc).__name__})",
            offset=start,
            field="modulus",
        ) from exc
    if following is not None and following.kind is DerKind.SEQUENCE:
        return KeyShape.PKCS8
    return KeyShape.PKCS1


def _from_pkcs1(
    body: DerReader, version: bytes, version_offset: int
) -> RsaPrivateKeyMaterial:
    number = int.from_bytes(version, "big")
    if number != RSA_KEY_VERSION:
        raise UnsupportedKeyVersion(number, offset=version_offset)
    values = {field: _read_integer(body, field) for field in RSA_KEY_FIELDS}
    return RsaPrivateKeyMaterial(**values)


def _from_pkcs8(
    body: DerReader, version: bytes, version_offset: int
) -> RsaPrivateKeyMaterial:
    log.debug(
        "Unwrapping PKCS#8 v%d envelope (version at offset %d)",
        int.from_bytes(version, "big"),
        version_offset,
    )
    start = body.position
    try:
        body.read_tag()
        body.skip(body.read_length())
    except KeyParseError as exc:
        raise InvalidKeyStructure(
            f"cannot skip AlgorithmIdentifier ({type(exc).__name__})",
            offset=start,
            field="privateKeyAlgorithm",
        ) from exc

    start = body.position
    try:
        payload = body.enter(DerKind.OCTET_STRING)
    except KeyParseError as exc:
        raise InvalidKeyStructure(
            f"expected an OCTET STRING ({type(exc).__name__})",
            offset=start,
            field="privateKey",
        ) from exc

    inner = _open_sequence(payload, "RSAPrivateKey")
    inner_offset = inner.position
    inner_version = _read_integer(inner, "version")
    return _from_pkcs1(inner, inner_version, inner_offset)


_SHAPE_PARSERS: dict[
    KeyShape, Callable[[DerReader, bytes, int], RsaPrivateKeyMaterial]
] = {
    KeyShape.PKCS1: _from_pkcs1,
    KeyShape.PKCS8: _from_pkcs8,
}


def _read_header(der: bytes) -> tuple[DerReader, bytes, int, KeyShape]:
    body = _open_sequence(DerReader(der), "RSAPrivateKey")
    version_offset = body.position
    version = _read_integer(body, "version")
    return body, version, version_offset, _shape_of(version, body)


def classify_key(der: bytes) -> KeyShape:
    """Tell whether DER bytes hold a bare PKCS#1 key or a PKCS#8 envelope."""
    return _read_header(der)[3]


def extract_rsa_private_key(der: bytes) -> RsaPrivateKeyMaterial:
    """Parse PKCS#1 or PKCS#8 DER into the eight RSA key integers.

    PKCS#8 envelopes of version 0 and 1 (RFC 5958 OneAsymmetricKey) are
    unwrapped; trailing attributes and an attached public key are ignored,
    as are bytes after the last INTEGER. Missing or out-of-order
    fields raise InvalidKeyStructure naming the field being read.
    """
    body, version, version_offset, shape = _read_header(der)
    material = _SHAPE_PARSERS[shape](body, version, version_offset)
    log.debug("Extracted %d-bit RSA key from %s DER", material.modulus_bits, shape)
    return material


def load_rsa_private_key(pem_text: str) -> RsaPrivateKeyMaterial:
    """Decode PEM text and extract the RSA key material."""
    return extract_rsa_private_key(decode_pem(pem_text))
