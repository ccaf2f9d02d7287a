"""
Pytest configuration and shared fixtures.
"""
import pytest

from nsuite.memory import ByteView


SAMPLE_FILES = {
    "a.txt": b"alpha",
    "empty.dat": b"",
    "sub/b.bin": bytes(range(256)) * 4,
    "sub/deeper/c.txt": b"gamma",
}


def write_tree(root, files):
    """Create *files* ({rel_path: content}) below *root*."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    return root


@pytest.fixture
def storage():
    """1234 zeroed bytes owned by the test."""
    return bytearray(1234)


@pytest.fixture
def large_view(storage):
    """A view over the whole of ``storage``."""
    return ByteView(len(storage), storage)


@pytest.fixture
def empty_view():
    return ByteView()


@pytest.fixture
def sample_tree(tmp_path):
    """A small directory tree with nested folders and an empty file."""
    return write_tree(tmp_path / "src", SAMPLE_FILES)


@pytest.fixture
def make_tree():
    """Return the ``write_tree`` helper for tests that build their own trees."""
    return write_tree


@pytest.fixture
def sample_files():
    """Contents of ``sample_tree`` keyed by relative path."""
    return dict(SAMPLE_FILES)
