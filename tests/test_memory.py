"""
Tests for ByteView construction, aliasing, access and sub-ranges.
"""
import copy

import pytest

from nsuite import codec
from nsuite.errors import NullArgumentError, OutOfRangeError
from nsuite.integrity import ZERO_HASH
from nsuite.memory import Address, ByteView


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

def test_default_view_is_empty(empty_view):
    """A default view has no data and hashes to the sentinel."""
    assert empty_view.empty() and not empty_view.has_data()
    assert empty_view.size() == 0
    assert len(empty_view) == 0
    assert not empty_view
    assert empty_view.bytes() is None
    assert empty_view.char_array() is None
    assert empty_view.address() is None
    assert empty_view.hash() == ZERO_HASH


def test_construct_over_storage(storage, large_view):
    assert large_view.has_data() and not large_view.empty()
    assert large_view.size() == 1234
    assert large_view.storage is storage
    assert large_view.address() == Address(storage, 0)
    assert large_view.bytes().obj is storage


def test_zero_size_with_storage_is_empty(storage):
    view = ByteView(0, storage)
    assert view.empty()
    assert view.storage is None


def test_construct_without_storage_fails():
    with pytest.raises(NullArgumentError):
        ByteView(16, None)


def test_construct_past_storage_fails(storage):
    with pytest.raises(OutOfRangeError):
        ByteView(1235, storage)
    with pytest.raises(OutOfRangeError):
        ByteView(10, storage, offset=1230)
    with pytest.raises(OutOfRangeError):
        ByteView(-1, storage)


def test_construct_with_offset(storage):
    view = ByteView(4, storage, offset=10)
    view[0] = 9
    assert storage[10] == 9
    assert view.address() == Address(storage, 10)


# ---------------------------------------------------------------------------
# Copy / move aliasing
# ---------------------------------------------------------------------------

def test_copies_alias_storage(storage, large_view):
    """Copies share the original bytes; nothing is duplicated."""
    moved = large_view.alias()
    assert moved.size() == 1234

    moved[0] = 255
    copied = copy.copy(moved)
    assert copied[0] == moved[0] == 255
    assert copied.address() == moved.address() == large_view.address()
    assert copied.bytes().obj is storage


def test_copy_constructor_aliases(storage, large_view):
    """ByteView(other) shares the range of *other*."""
    sub = large_view.subrange(10, 20)
    copied = ByteView(sub)
    assert copied.size() == 20
    assert copied.address() == sub.address() == Address(storage, 10)
    copied[0] = 99
    assert storage[10] == 99
    assert ByteView(ByteView()).empty()


def test_deepcopy_still_aliases(storage, large_view):
    deep = copy.deepcopy(large_view)
    deep[5] = 42
    assert large_view[5] == 42
    assert deep.address() == large_view.address()


def test_alias_leaves_source_intact(large_view):
    other = large_view.alias()
    assert large_view.has_data()
    assert other.size() == large_view.size()


def test_reassignment():
    buffer_b = bytearray(4096)
    range_a = ByteView()
    range_b = ByteView(len(buffer_b), buffer_b)
    range_b[0] = 126
    range_a = range_b
    assert range_a[0] == range_b[0]
    assert range_a.address() == range_b.address()

    buffer_c = bytearray(456)
    range_c = ByteView(len(buffer_c), buffer_c)
    range_c[0] = 64
    range_a = range_c.alias()
    assert range_a[0] == 64


def test_address_compares_by_identity():
    first = bytearray(8)
    second = bytearray(8)
    assert first == second
    assert Address(first, 0) != Address(second, 0)
    assert Address(first, 0) != Address(first, 1)
    assert len({Address(first, 0), Address(first, 0)}) == 1


# ---------------------------------------------------------------------------
# Methods
# ---------------------------------------------------------------------------

def test_hash_of_data_is_not_zero_hash(large_view):
    assert large_view.hash() != ZERO_HASH
    assert len(large_view.hash()) == 32


def test_hash_follows_contents(large_view):
    before = large_view.hash()
    large_view[100] = 1
    assert large_view.hash() != before


def test_char_array_and_bytes_share_memory(storage, large_view):
    chars = large_view.char_array()
    raw = large_view.bytes()
    assert chars is not None and raw is not None
    assert chars.obj is raw.obj is storage
    assert chars.format == "c" and raw.format == "B"

    raw[3] = ord("z")
    assert chars[3] == b"z"


def test_to_bytes_copies(large_view):
    large_view[0] = 7
    snapshot = large_view.to_bytes()
    large_view[0] = 8
    assert snapshot[0] == 7
    assert ByteView().to_bytes() == b""


def test_subrange_iteration_mutates_only_subrange(storage, large_view):
    """1234 zero bytes, first half overwritten through a sub-view."""
    sub = large_view.subrange(0, 617)
    assert not sub.empty() and sub.has_data()

    count = 0
    for index, _ in enumerate(sub):
        sub[index] = 123
        count += 1
    assert count == 617

    assert all(b == 123 for b in storage[:617])
    assert all(b == 0 for b in storage[617:])


def test_iteration_is_restartable(large_view):
    sub = large_view.subrange(10, 5)
    sub.fill(3)
    assert list(sub) == [3] * 5
    assert list(sub) == [3] * 5


def test_fill(storage, large_view):
    large_view.subrange(1, 2).fill(0xAB)
    assert storage[:4] == bytearray(b"\x00\xab\xab\x00")
    with pytest.raises(ValueError):
        large_view.fill(256)


def test_iter_type_counts_whole_elements(large_view):
    sub = large_view.subrange(0, 617)
    values = list(sub.iter_type(codec.SIZE))
    assert len(values) == 617 // codec.SIZE.size
    assert all(v == 0 for v in values)


def test_iter_type_decodes_values():
    storage = bytearray(b"\x00\x01\x00\x02\x00\x03\xff")
    view = ByteView(len(storage), storage)
    assert list(view.iter_type(codec.UINT16)) == [1, 2, 3]
    assert list(view.iter_type("!H")) == [1, 2, 3]
    assert list(ByteView().iter_type(codec.UINT16)) == []


def test_iter_type_rejects_strings(large_view):
    with pytest.raises(TypeError):
        list(large_view.iter_type(codec.STRING))


def test_iter_type_rejects_zero_size_codec(large_view):
    with pytest.raises(ValueError):
        list(large_view.iter_type("0s"))


@pytest.mark.parametrize("offset,length", [(0, 1234), (0, 1), (100, 50), (1233, 1), (600, 0)])
def test_subrange_aliases_parent(storage, large_view, offset, length):
    for i in range(len(storage)):
        storage[i] = i % 251
    sub = large_view.subrange(offset, length)
    assert sub.size() == length
    for i in range(length):
        assert sub[i] == large_view[offset + i]
    if length:
        assert sub.address() == Address(storage, offset)


def test_nested_subrange(storage, large_view):
    inner = large_view.subrange(100, 100).subrange(10, 5)
    inner[0] = 77
    assert storage[110] == 77
    assert inner.address() == Address(storage, 110)


def test_zero_length_subrange_is_empty(large_view):
    sub = large_view.subrange(5, 0)
    assert sub.empty()
    assert sub.hash() == ZERO_HASH


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

def test_index_on_empty_view_fails(empty_view):
    with pytest.raises(OutOfRangeError):
        empty_view[0] = 123
    with pytest.raises(OutOfRangeError):
        empty_view[0]


def test_index_past_end_fails(storage, large_view):
    with pytest.raises(OutOfRangeError):
        large_view[1234]
    with pytest.raises(OutOfRangeError):
        large_view[1234] = 1
    with pytest.raises(OutOfRangeError):
        large_view[-1]
    assert storage == bytearray(1234)


def test_out_of_range_is_an_index_error(empty_view):
    with pytest.raises(IndexError):
        empty_view[0]


@pytest.mark.parametrize("offset,length", [(0, 0), (0, 1), (5, 0)])
def test_subrange_of_empty_view_fails(empty_view, offset, length):
    with pytest.raises(OutOfRangeError):
        empty_view.subrange(offset, length)


def test_subrange_past_end_fails():
    small = bytearray(1)
    view = ByteView(1, small)
    with pytest.raises(OutOfRangeError):
        view.subrange(0, 2)
    with pytest.raises(OutOfRangeError):
        view.subrange(1, 1)
    with pytest.raises(OutOfRangeError):
        view.subrange(-1, 1)


def test_readonly_storage():
    data = b"immutable"
    view = ByteView(len(data), data)
    assert view.readonly
    assert view[0] == ord("i")
    with pytest.raises(TypeError):
        view[0] = 1


def test_views_pin_bytearray_size(storage, large_view):
    with pytest.raises(BufferError):
        storage.extend(b"more")
