"""PEM armor stripping and base64 decoding."""

import base64
import logging
import re

from pydantic import BaseModel, ConfigDict

from jwtbearer.core.errors import InvalidBase64, MalformedPem

log = logging.getLogger(__name__)

_ARMOR = re.compile(
    r"-----BEGIN (?P<label>[A-Z0-9 ]+)-----(?P<body>.*?)-----END (?P=label)-----",
    re.DOTALL,
)
_WHITESPACE = re.compile(r"\s+")


class PemBlock(BaseModel):
    """A decoded PEM block."""

    model_config = ConfigDict(frozen=True)

    label: str
    der: bytes


def read_pem_block(text: str) -> PemBlock:
    """Locate the first armored block and base64-decode its body."""
    match = _ARMOR.search(text)
    if match is None:
        raise MalformedPem("no -----BEGIN/-----END marker pair found")
    label = match.group("label")
    body = _WHITESPACE.sub("", match.group("body"))
    if not body:
        raise InvalidBase64(f"{label} block has no base64 content")
    try:
        der = base64.b64decode(body, validate=True)
    except ValueError as exc:
        raise InvalidBase64(f"{label} block is not valid base64: {exc}") from exc
    log.debug("Decoded PEM block %r (%d DER bytes)", label, len(der))
    return PemBlock(label=label, der=der)


def decode_pem(text: str) -> bytes:
    """Strip PEM armor and return the raw DER bytes."""
    return read_pem_block(text).der
