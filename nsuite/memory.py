"""
ByteView — a non-owning, bounds-checked window over someone else's bytes.

A view is the triple ``(storage, offset, length)``:

  storage   the buffer-protocol object the bytes live in (bytearray,
            memoryview, mmap, bytes for read-only use …), or None
  offset    first byte of the window inside *storage*
  length    number of addressable bytes

``storage`` is None exactly when ``length == 0``; that state is *empty*.

Views never own or copy their storage.  Copies (``ByteView(other)``,
``copy.copy``, ``copy.deepcopy``, ``ByteView.alias``) and sub-views made by
``subrange`` all alias the same bytes, so a write through one is visible
through every other.  Copy and "move" are the same thing here: a view has
nothing to hand over, so the source is left untouched.

The allocation must outlive its views.  The owner (``nsuite.buffer.Buffer``
or the caller) is responsible for that; a view keeps the exporter alive
through its memoryview, and a ``bytearray`` cannot be resized while any
view of it exists.

Every check runs before storage is touched, so a failing call never leaves
a partial write behind.  Views are not synchronized; two views that alias
the same storage must not be written from different threads without the
owner's own locking.

Usage::

    storage = bytearray(1234)
    view = ByteView(len(storage), storage)
    half = view.subrange(0, 617)
    half.fill(123)
    view.in_type(STRING, "Hello World", offset=700)
    assert view.out_type(STRING, offset=700) == "Hello World"
"""

from __future__ import annotations

import operator
from typing import Iterator

from . import codec as _codec
from .errors import NullArgumentError, OutOfRangeError
from .integrity import ZERO_HASH, hash_bytes


# ---------------------------------------------------------------------------
# Address
# ---------------------------------------------------------------------------

class Address:
    """Where a view starts: its storage object (by identity) and offset."""

    __slots__ = ("storage", "offset")

    def __init__(self, storage, offset: int) -> None:
        self.storage = storage
        self.offset = offset

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self.storage is other.storage and self.offset == other.offset

    def __hash__(self) -> int:
        return hash((id(self.storage), self.offset))

    def __repr__(self) -> str:
        return f"Address({type(self.storage).__name__}@{id(self.storage):#x}+{self.offset})"


# ---------------------------------------------------------------------------
# ByteView
# ---------------------------------------------------------------------------

class ByteView:
    """Non-owning ``(storage, offset, length)`` view.  See module docstring."""

    __slots__ = ("_storage", "_root", "_offset", "_size")

    def __init__(self, size: int = 0, storage=None, offset: int = 0) -> None:
        if isinstance(size, ByteView):
            # ByteView(other): alias the same range
            other = size
            self._storage, self._root = other._storage, other._root
            self._offset, self._size = other._offset, other._size
            return
        size = operator.index(size)
        offset = operator.index(offset)
        if size < 0 or offset < 0:
            raise OutOfRangeError(f"Negative size/offset ({size}, {offset})")

        if size == 0:
            self._storage = None
            self._root = None
            self._offset = 0
            self._size = 0
            return

        if storage is None:
            raise NullArgumentError(f"No storage given for a {size}-byte view")
        root = memoryview(storage).cast("B")
        if offset + size > root.nbytes:
            raise OutOfRangeError(
                f"View [{offset}, {offset + size}) exceeds storage of {root.nbytes} bytes"
            )
        self._storage = storage
        self._root = root
        self._offset = offset
        self._size = size

    @classmethod
    def _derive(cls, storage, root: memoryview, offset: int, size: int) -> ByteView:
        """Build a view without re-validating; caller has checked the range."""
        view = cls.__new__(cls)
        if size == 0:
            view._storage, view._root, view._offset, view._size = None, None, 0, 0
        else:
            view._storage, view._root, view._offset, view._size = storage, root, offset, size
        return view

    def alias(self) -> ByteView:
        """Return a second view of the same bytes (the copy/move operation)."""
        return self._derive(self._storage, self._root, self._offset, self._size)

    __copy__ = alias

    def __deepcopy__(self, memo) -> ByteView:
        # storage is never duplicated, not even by deepcopy
        return self.alias()

    def __repr__(self) -> str:
        if self.empty():
            return "ByteView(empty)"
        return f"ByteView(size={self._size}, address={self.address()!r})"

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def empty(self) -> bool:
        return self._size == 0

    def has_data(self) -> bool:
        return self._size != 0

    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._size != 0

    @property
    def readonly(self) -> bool:
        return self._root is not None and self._root.readonly

    @property
    def storage(self):
        return self._storage

    def address(self) -> Address | None:
        """Storage identity plus offset; None for an empty view."""
        if self.empty():
            return None
        return Address(self._storage, self._offset)

    def bytes(self) -> memoryview | None:
        """Zero-copy ``memoryview`` (format ``B``) of the range, or None if empty."""
        if self.empty():
            return None
        return self._root[self._offset:self._offset + self._size]

    def char_array(self) -> memoryview | None:
        """The same range as ``bytes()``, reinterpreted as ``c`` (1-byte chars)."""
        mv = self.bytes()
        return mv.cast("c") if mv is not None else None

    def to_bytes(self) -> bytes:
        """Copy the range out into an immutable ``bytes`` object."""
        mv = self.bytes()
        return mv.tobytes() if mv is not None else b""

    # ------------------------------------------------------------------
    # Element access
    # ------------------------------------------------------------------

    def _check_index(self, index) -> int:
        index = operator.index(index)
        if self.empty():
            raise OutOfRangeError(f"Index {index} on an empty view")
        if not 0 <= index < self._size:
            raise OutOfRangeError(f"Index {index} out of range for a {self._size}-byte view")
        return index

    def __getitem__(self, index) -> int:
        index = self._check_index(index)
        return self._root[self._offset + index]

    def __setitem__(self, index, value: int) -> None:
        index = self._check_index(index)
        self._root[self._offset + index] = value

    def __iter__(self) -> Iterator[int]:
        mv = self.bytes()
        return iter(mv) if mv is not None else iter(())

    def fill(self, value: int) -> None:
        """Overwrite every byte in the range with *value* (0-255)."""
        if not 0 <= value <= 0xFF:
            raise ValueError(f"Byte value out of range: {value}")
        if self.has_data():
            self._root[self._offset:self._offset + self._size] = bytes((value,)) * self._size

    def iter_type(self, codec) -> Iterator:
        """Yield the range decoded as consecutive fixed-size elements.

        ``size() // codec.size`` elements are produced; a trailing partial
        element is skipped.
        """
        codec = _codec.resolve(codec)
        if not isinstance(codec, _codec.FixedCodec):
            raise TypeError(f"iter_type needs a fixed-size codec, got {codec!r}")
        if codec.size == 0:
            raise ValueError(f"iter_type needs a codec of at least one byte, got {codec!r}")
        mv = self.bytes()
        if mv is None:
            return
        step = codec.size
        for i in range(self._size // step):
            yield codec.decode(mv, i * step)

    def subrange(self, offset: int, length: int) -> ByteView:
        """Return a view aliasing ``[offset, offset + length)`` of this one.

        An empty source always fails, even for ``subrange(0, 0)``.
        """
        offset = operator.index(offset)
        length = operator.index(length)
        if self.empty():
            raise OutOfRangeError("subrange of an empty view")
        self._check_span(offset, length, "subrange")
        return self._derive(self._storage, self._root, self._offset + offset, length)

    def hash(self) -> bytes:
        """BLAKE3 digest of the range; ``ZERO_HASH`` when empty."""
        if self.empty():
            return ZERO_HASH
        return hash_bytes(self.bytes())

    # ------------------------------------------------------------------
    # Raw I/O
    # ------------------------------------------------------------------

    def in_raw(self, source, num_bytes: int, dest_offset: int = 0) -> None:
        """Copy *num_bytes* from the start of *source* into the view at *dest_offset*."""
        if source is None:
            raise NullArgumentError("in_raw: source is None")
        dest = self._require_data("in_raw")
        src = _as_memoryview(source, "in_raw")
        self._check_span(dest_offset, num_bytes, "in_raw")
        if num_bytes > src.nbytes:
            raise OutOfRangeError(
                f"in_raw: source holds {src.nbytes} bytes, {num_bytes} requested"
            )
        dest[dest_offset:dest_offset + num_bytes] = src[:num_bytes]

    def out_raw(self, dest, num_bytes: int, src_offset: int = 0) -> None:
        """Copy *num_bytes* from the view at *src_offset* into the start of *dest*."""
        if dest is None:
            raise NullArgumentError("out_raw: destination is None")
        src = self._require_data("out_raw")
        dst = _as_memoryview(dest, "out_raw")
        if dst.readonly:
            raise TypeError("out_raw: destination is read-only")
        self._check_span(src_offset, num_bytes, "out_raw")
        if num_bytes > dst.nbytes:
            raise OutOfRangeError(
                f"out_raw: destination holds {dst.nbytes} bytes, {num_bytes} requested"
            )
        dst[:num_bytes] = src[src_offset:src_offset + num_bytes]

    # ------------------------------------------------------------------
    # Typed I/O
    # ------------------------------------------------------------------

    def in_type(self, codec, value, offset: int = 0) -> int:
        """Write *value* at *offset* using *codec*; returns the bytes written."""
        codec = _codec.resolve(codec)
        mv = self._require_data("in_type")
        data = codec.encode(value)
        self._check_span(offset, len(data), "in_type")
        mv[offset:offset + len(data)] = data
        return len(data)

    def out_type(self, codec, offset: int = 0):
        """Read one value of *codec* stored at *offset*."""
        codec = _codec.resolve(codec)
        mv = self._require_data("out_type")
        self._check_span(offset, codec.min_size, "out_type")
        self._check_span(offset, codec.stored_size(mv, offset), "out_type")
        return codec.decode(mv, offset)

    # ------------------------------------------------------------------
    # Private
    # ------------------------------------------------------------------

    def _require_data(self, op: str) -> memoryview:
        mv = self.bytes()
        if mv is None:
            raise NullArgumentError(f"{op}: view is empty")
        return mv

    def _check_span(self, offset: int, length: int, op: str) -> None:
        if offset < 0 or length < 0 or offset + length > self._size:
            raise OutOfRangeError(
                f"{op}: [{offset}, {offset + length}) exceeds view of {self._size} bytes"
            )


def _as_memoryview(obj, op: str) -> memoryview:
    if isinstance(obj, ByteView):
        mv = obj.bytes()
        if mv is None:
            raise NullArgumentError(f"{op}: other view is empty")
        return mv
    return memoryview(obj).cast("B")
