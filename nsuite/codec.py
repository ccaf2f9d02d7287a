"""
Typed codecs — how values are laid out inside a ByteView.

Fixed-layout values use ``struct`` standard sizes in network byte order
(big-endian, no padding).  Text uses the one variable-length layout:

  STRING:  [length: 8B unsigned][UTF-8 payload: length B]

Every codec exposes:

  codec.min_size                 bytes needed before the stored size is known
  codec.encode(value)     → bytes
  codec.stored_size(buf, offset) → int   (total bytes occupied at *offset*)
  codec.decode(buf, offset) → value

``ByteView.in_type`` / ``out_type`` do the bounds checking; codecs assume
they are handed a range that is large enough.  A STRING payload that is not
valid UTF-8 raises ``UnicodeDecodeError`` from ``decode``; callers reading
untrusted data turn that into their own error.
"""

from __future__ import annotations

import struct
from functools import lru_cache

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

BYTE_ORDER: str = "!"                 # network order for every fixed codec
LENGTH_FMT: str = "!Q"                # string length prefix
LENGTH_SIZE: int = struct.calcsize(LENGTH_FMT)  # = 8
TEXT_ENCODING: str = "utf-8"


# ---------------------------------------------------------------------------
# Fixed-layout values
# ---------------------------------------------------------------------------

class FixedCodec:
    """A value with a constant byte size, described by a struct format.

    Single-field formats encode/decode a bare value; multi-field formats
    (``"!B28s"``) take and return a tuple.
    """

    __slots__ = ("name", "_struct", "_fields")

    def __init__(self, fmt: str, name: str | None = None) -> None:
        if fmt[:1] not in "@=<>!":
            fmt = BYTE_ORDER + fmt
        self._struct = struct.Struct(fmt)
        self._fields = len(self._struct.unpack(bytes(self._struct.size)))
        self.name = name or fmt

    def __repr__(self) -> str:
        return f"FixedCodec({self._struct.format!r}, name={self.name!r})"

    @property
    def format(self) -> str:
        return self._struct.format

    @property
    def size(self) -> int:
        return self._struct.size

    @property
    def min_size(self) -> int:
        return self._struct.size

    def encode(self, value) -> bytes:
        if self._fields == 1:
            return self._struct.pack(value)
        return self._struct.pack(*value)

    def stored_size(self, buf, offset: int) -> int:
        return self._struct.size

    def decode(self, buf, offset: int):
        values = self._struct.unpack_from(buf, offset)
        return values[0] if self._fields == 1 else values


BYTE    = FixedCodec("B", "byte")
BOOL    = FixedCodec("?", "bool")
INT8    = FixedCodec("b", "int8")
UINT8   = FixedCodec("B", "uint8")
INT16   = FixedCodec("h", "int16")
UINT16  = FixedCodec("H", "uint16")
INT32   = FixedCodec("i", "int32")
UINT32  = FixedCodec("I", "uint32")
INT64   = FixedCodec("q", "int64")
UINT64  = FixedCodec("Q", "uint64")
FLOAT32 = FixedCodec("f", "float32")
FLOAT64 = FixedCodec("d", "float64")
HASH    = FixedCodec("32s", "hash")   # raw BLAKE3 digest

INT = INT32
SIZE = UINT64


# ---------------------------------------------------------------------------
# Length-prefixed text
# ---------------------------------------------------------------------------

class StringCodec:
    """Self-describing text: 8-byte length, then the encoded payload."""

    name = "string"
    min_size = LENGTH_SIZE

    def __init__(self, encoding: str = TEXT_ENCODING) -> None:
        self.encoding = encoding

    def __repr__(self) -> str:
        return f"StringCodec({self.encoding!r})"

    def encode(self, value: str) -> bytes:
        payload = value.encode(self.encoding)
        return struct.pack(LENGTH_FMT, len(payload)) + payload

    def encoded_size(self, value: str) -> int:
        return LENGTH_SIZE + len(value.encode(self.encoding))

    def stored_size(self, buf, offset: int) -> int:
        (length,) = struct.unpack_from(LENGTH_FMT, buf, offset)
        return LENGTH_SIZE + length

    def decode(self, buf, offset: int) -> str:
        (length,) = struct.unpack_from(LENGTH_FMT, buf, offset)
        start = offset + LENGTH_SIZE
        return bytes(buf[start:start + length]).decode(self.encoding)


STRING = StringCodec()


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------

@lru_cache(maxsize=64)
def _codec_for_format(fmt: str) -> FixedCodec:
    return FixedCodec(fmt)


def resolve(codec):
    """Accept a codec object, a ``struct.Struct`` or a struct format string."""
    if isinstance(codec, str):
        return _codec_for_format(codec)
    if isinstance(codec, struct.Struct):
        return _codec_for_format(codec.format)
    if hasattr(codec, "encode") and hasattr(codec, "decode"):
        return codec
    raise TypeError(f"Not a codec: {codec!r}")
