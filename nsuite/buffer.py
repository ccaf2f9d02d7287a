"""
Buffer — the owning allocation behind ByteViews.

A Buffer holds a ``bytearray`` and hands out ByteViews into it.  The views
alias the buffer's storage, so the buffer must stay alive (and unresized)
for as long as any of its views are in use; ``resize`` raises
``BufferError`` while views are still around.

Usage::

    buf = Buffer(1024)
    view = buf.view()
    view.in_type(STRING, "hello")
    packed = buf.compress()
    assert packed.decompress().to_bytes() == buf.to_bytes()
"""

from __future__ import annotations

from . import compress as _compress
from .errors import NullArgumentError
from .integrity import ZERO_HASH
from .memory import ByteView


class Buffer:
    """Owned, zero-initialised, resizable byte storage."""

    def __init__(self, size: int = 0) -> None:
        if size < 0:
            raise ValueError(f"Negative buffer size: {size}")
        self._data = bytearray(size)

    @classmethod
    def from_bytes(cls, data) -> Buffer:
        buf = cls()
        buf._data = bytearray(data)
        return buf

    def __repr__(self) -> str:
        return f"Buffer(size={len(self._data)})"

    def __len__(self) -> int:
        return len(self._data)

    def size(self) -> int:
        return len(self._data)

    def empty(self) -> bool:
        return not self._data

    def has_data(self) -> bool:
        return bool(self._data)

    def view(self) -> ByteView:
        """A ByteView over the whole allocation (empty view for size 0)."""
        return ByteView(len(self._data), self._data)

    def to_bytes(self) -> bytes:
        return bytes(self._data)

    def hash(self) -> bytes:
        if not self._data:
            return ZERO_HASH
        return self.view().hash()

    def resize(self, size: int) -> None:
        """Grow (zero-filled) or shrink in place, keeping the common prefix."""
        if size < 0:
            raise ValueError(f"Negative buffer size: {size}")
        current = len(self._data)
        if size < current:
            del self._data[size:]
        elif size > current:
            self._data.extend(bytes(size - current))

    def compress(self, level: int = _compress.DEFAULT_LEVEL) -> Buffer:
        """Return a new Buffer holding this one's contents as a zstd frame."""
        if not self._data:
            raise NullArgumentError("Cannot compress an empty buffer")
        return Buffer.from_bytes(_compress.compress(self.view().bytes(), level))

    def decompress(self) -> Buffer:
        """Return a new Buffer holding the decompressed contents of this frame."""
        if not self._data:
            raise NullArgumentError("Cannot decompress an empty buffer")
        return Buffer.from_bytes(_compress.decompress(self.view().bytes()))
