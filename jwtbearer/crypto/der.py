"""Minimal DER tag/length/value cursor for walking RSA private keys.

Only the subset of DER needed for PKCS#1 ``RSAPrivateKey`` and the PKCS#8
``PrivateKeyInfo`` envelope is interpreted; everything else is classified as
``OTHER`` so it can be skipped.
"""

from dataclasses import dataclass
from enum import StrEnum

from jwtbearer.core.errors import InvalidKeyStructure, TruncatedInput, UnexpectedTag

TAG_CLASS_UNIVERSAL = 0
TAG_NUMBER_INTEGER = 2
TAG_NUMBER_OCTET_STRING = 4
TAG_NUMBER_SEQUENCE = 16
HIGH_TAG_NUMBER = 0x1F
LONG_FORM_BIT = 0x80
MAX_LENGTH_OCTETS = 4


class DerKind(StrEnum):
    """Tag classes the key walker distinguishes."""

    SEQUENCE = "SEQUENCE"
    INTEGER = "INTEGER"
    OCTET_STRING = "OCTET STRING"
    OTHER = "OTHER"


_UNIVERSAL_KINDS = {
    (True, TAG_NUMBER_SEQUENCE): DerKind.SEQUENCE,
    (False, TAG_NUMBER_INTEGER): DerKind.INTEGER,
    (False, TAG_NUMBER_OCTET_STRING): DerKind.OCTET_STRING,
}


@dataclass(frozen=True, slots=True)
class DerTag:
    """A decoded identifier octet (or octets)."""

    tag_class: int
    constructed: bool
    number: int
    offset: int

    @property
    def kind(self) -> DerKind:
        if self.tag_class != TAG_CLASS_UNIVERSAL:
            return DerKind.OTHER
        return _UNIVERSAL_KINDS.get((self.constructed, self.number), DerKind.OTHER)

    def describe(self) -> str:
        """Human readable tag name for error messages."""
        if self.kind is not DerKind.OTHER:
            return self.kind.value
        form = "constructed" if self.constructed else "primitive"
        return f"tag class={self.tag_class} number={self.number} ({form})"


@dataclass(frozen=True, slots=True)
class DerNode:
    """One tag/length/value element, positioned within its source buffer."""

    tag: DerTag
    length: int
    content_offset: int
    data: bytes

    @property
    def value(self) -> bytes:
        return self.data[self.content_offset : self.content_offset + self.length]

    def reader(self) -> "DerReader":
        """Cursor over the node content, for walking constructed nodes."""
        return DerReader(
            self.data, self.content_offset, self.content_offset + self.length
        )


class DerReader:
    """Forward-only cursor over ``data[offset:end]``.

    Positions are absolute within ``data`` so child readers report offsets
    relative to the start of the original buffer.
    """

    def __init__(self, data: bytes, offset: int = 0, end: int | None = None) -> None:
        self._data = data
        self._pos = offset
        self._end = len(data) if end is None else end

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return self._end - self._pos

    @property
    def at_end(self) -> bool:
        return self._pos >= self._end

    def _next_byte(self, what: str) -> int:
        if self._pos >= self._end:
            raise TruncatedInput(f"input ended while reading {what}", offset=self._pos)
        value = self._data[self._pos]
        self._pos += 1
        return value

    def read_tag(self) -> DerTag:
        """Read one identifier, including high-tag-number continuation bytes."""
        start = self._pos
        first = self._next_byte("tag")
        number = first & HIGH_TAG_NUMBER
        if number == HIGH_TAG_NUMBER:
            number = 0
            while True:
                octet = self._next_byte("tag")
                number = (number << 7) | (octet & 0x7F)
                if not octet & 0x80:
                    break
        return DerTag(
            tag_class=first >> 6,
            constructed=bool(first & 0x20),
            number=number,
            offset=start,
        )

    def peek_tag(self) -> DerTag | None:
        """Return the next tag without consuming it, or None at the end."""
        if self.at_end:
            return None
        saved = self._pos
        try:
            return self.read_tag()
        finally:
            self._pos = saved

    def read_length(self) -> int:
        """Read a definite DER length in short or long form."""
        start = self._pos
        first = self._next_byte("length")
        if first & LONG_FORM_BIT:
            count = first & 0x7F
            if count == 0:
                raise InvalidKeyStructure(
                    "indefinite length is not allowed in DER", offset=start
                )
            if count > MAX_LENGTH_OCTETS:
                raise InvalidKeyStructure(
                    f"length encoded in {count} octets", offset=start
                )
            if count > self.remaining:
                raise TruncatedInput(
                    f"length needs {count} octets, {self.remaining} left",
                    offset=start,
                )
            length = int.from_bytes(self._data[self._pos : self._pos + count], "big")
            self._pos += count
        else:
            length = first
        if length > self.remaining:
            raise TruncatedInput(
                f"declared length {length} exceeds the {self.remaining} bytes left",
                offset=start,
            )
        return length

    def skip(self, length: int) -> None:
        """Advance past ``length`` bytes without interpreting them."""
        if length > self.remaining:
            raise TruncatedInput(
                f"cannot skip {length} bytes, {self.remaining} left", offset=self._pos
            )
        self._pos += length

    def read_node(self) -> DerNode:
        tag = self.read_tag()
        length = self.read_length()
        node = DerNode(
            tag=tag, length=length, content_offset=self._pos, data=self._data
        )
        self._pos += length
        return node

    def enter(self, kind: DerKind) -> "DerReader":
        """Consume an element of ``kind`` and return a reader over its content."""
        tag = self.read_tag()
        if tag.kind is not kind:
            raise UnexpectedTag(kind.value, tag.describe(), offset=tag.offset)
        length = self.read_length()
        child = DerReader(self._data, self._pos, self._pos + length)
        self._pos += length
        return child

    def read_integer(self) -> bytes:
        """Read an INTEGER and return its unsigned big-endian magnitude.

        DER prefixes a 0x00 octet when the first content bit is set; that
        single pad octet is dropped. Zero is returned as ``b"\\x00"``.
        """
        tag = self.read_tag()
        if tag.kind is not DerKind.INTEGER:
            raise UnexpectedTag(
                DerKind.INTEGER.value, tag.describe(), offset=tag.offset
            )
        length = self.read_length()
        if length == 0:
            raise InvalidKeyStructure("zero-length INTEGER", offset=tag.offset)
        value = self._data[self._pos : self._pos + length]
        self._pos += length
        if len(value) > 1 and value[0] == 0:
            value = value[1:]
        return bytes(value)
