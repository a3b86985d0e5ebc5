"""Type definitions for RSA key material and JWT assertions."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

RsaField = Literal[
    "modulus",
    "public_exponent",
    "private_exponent",
    "prime1",
    "prime2",
    "exponent1",
    "exponent2",
    "coefficient",
]


class RsaPrivateKeyMaterial(BaseModel):
    """The eight RSAPrivateKey integers as unsigned big-endian bytes."""

    model_config = ConfigDict(frozen=True)

    modulus: bytes = Field(min_length=1)
    public_exponent: bytes = Field(min_length=1)
    private_exponent: bytes = Field(min_length=1)
    prime1: bytes = Field(min_length=1)
    prime2: bytes = Field(min_length=1)
    exponent1: bytes = Field(min_length=1)
    exponent2: bytes = Field(min_length=1)
    coefficient: bytes = Field(min_length=1)

    def to_int(self, field: RsaField) -> int:
        """Decode one field as a Python integer."""
        return int.from_bytes(getattr(self, field), byteorder="big")

    @property
    def modulus_bits(self) -> int:
        return self.to_int("modulus").bit_length()


class JwtHeader(BaseModel):
    """JOSE header of an RS256 assertion."""

    model_config = ConfigDict(frozen=True)

    alg: str = "RS256"
    typ: str = "JWT"


class JwtClaims(BaseModel):
    """Claims of a JWT-bearer grant assertion."""

    model_config = ConfigDict(frozen=True)

    iss: str
    sub: str
    aud: str
    exp: int


class DecodedAssertion(BaseModel):
    """Verified assertion claims."""

    model_config = ConfigDict(extra="allow")

    iss: str = ""
    sub: str = ""
    aud: str = ""
    exp: int = 0
