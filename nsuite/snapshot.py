"""
Directory snapshots — hashed manifests of a directory tree.

A snapshot records, for every file below a root, its relative path, size,
mtime and BLAKE3 digest.  It serializes into a Buffer through ByteView
typed I/O and is stored on disk as a single zstd frame.

Serialized layout (codecs from nsuite.codec, big-endian):

  [magic: 8s][root: STRING][count: UINT64]
  count × [rel_path: STRING][size: UINT64][mtime: FLOAT64][digest: HASH]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from . import codec
from .buffer import Buffer
from .compress import DEFAULT_LEVEL
from .directory import get_file_paths, read_file
from .errors import SnapshotError
from .memory import ByteView
from .progress import NullProgress, ProgressTracker

log = logging.getLogger("nsuite.snapshot")

SNAPSHOT_MAGIC: bytes = b"NSNAP\x00\x00\x01"
MAGIC = codec.FixedCodec("8s", "magic")

# size + mtime + digest, after the variable-length path
_ENTRY_FIXED_SIZE: int = codec.UINT64.size + codec.FLOAT64.size + codec.HASH.size


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

@dataclass
class SnapshotEntry:
    rel_path: str        # "/"-separated, relative to the snapshot root
    size: int
    mtime: float
    digest: bytes        # 32-byte BLAKE3, ZERO_HASH for empty files

    def encoded_size(self) -> int:
        return codec.STRING.encoded_size(self.rel_path) + _ENTRY_FIXED_SIZE


@dataclass
class Snapshot:
    root: str
    entries: list[SnapshotEntry] = field(default_factory=list)

    def by_path(self) -> dict[str, SnapshotEntry]:
        return {e.rel_path: e for e in self.entries}

    def total_size(self) -> int:
        return sum(e.size for e in self.entries)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_buffer(self) -> Buffer:
        header_size = MAGIC.size + codec.STRING.encoded_size(self.root) + codec.UINT64.size
        buf = Buffer(header_size + sum(e.encoded_size() for e in self.entries))
        view = buf.view()

        offset = view.in_type(MAGIC, SNAPSHOT_MAGIC)
        offset += view.in_type(codec.STRING, self.root, offset)
        offset += view.in_type(codec.UINT64, len(self.entries), offset)
        for entry in self.entries:
            span = entry.encoded_size()
            _write_entry(view.subrange(offset, span), entry)
            offset += span
        return buf

    @classmethod
    def from_buffer(cls, source: Buffer | ByteView) -> Snapshot:
        view = source.view() if isinstance(source, Buffer) else source
        if view.size() < MAGIC.size:
            raise SnapshotError(f"Snapshot data too short ({view.size()} bytes)")
        magic = view.out_type(MAGIC)
        if magic != SNAPSHOT_MAGIC:
            raise SnapshotError(f"Bad snapshot magic: {magic!r}")

        try:
            offset = MAGIC.size
            root = view.out_type(codec.STRING, offset)
            offset += codec.STRING.stored_size(view.bytes(), offset)
            count = view.out_type(codec.UINT64, offset)
            offset += codec.UINT64.size

            entries: list[SnapshotEntry] = []
            for _ in range(count):
                entry, used = _read_entry(view, offset)
                entries.append(entry)
                offset += used
        except UnicodeDecodeError as exc:
            raise SnapshotError(f"Path in snapshot is not valid UTF-8: {exc}") from exc
        if offset != view.size():
            raise SnapshotError(f"{view.size() - offset} trailing byte(s) after snapshot")
        return cls(root=root, entries=entries)


def _write_entry(view: ByteView, entry: SnapshotEntry) -> None:
    offset = view.in_type(codec.STRING, entry.rel_path)
    offset += view.in_type(codec.UINT64, entry.size, offset)
    offset += view.in_type(codec.FLOAT64, entry.mtime, offset)
    view.in_type(codec.HASH, entry.digest, offset)


def _read_entry(view: ByteView, offset: int) -> tuple[SnapshotEntry, int]:
    rel_path = view.out_type(codec.STRING, offset)
    pos = offset + codec.STRING.stored_size(view.bytes(), offset)
    size = view.out_type(codec.UINT64, pos)
    pos += codec.UINT64.size
    mtime = view.out_type(codec.FLOAT64, pos)
    pos += codec.FLOAT64.size
    digest = view.out_type(codec.HASH, pos)
    pos += codec.HASH.size
    return SnapshotEntry(rel_path=rel_path, size=size, mtime=mtime, digest=digest), pos - offset


# ---------------------------------------------------------------------------
# Taking, saving and loading
# ---------------------------------------------------------------------------

def take_snapshot(
    directory: str | Path,
    progress: ProgressTracker | NullProgress | None = None,
) -> Snapshot:
    """Hash every file below *directory*."""
    progress = progress or NullProgress()
    root = Path(directory).resolve()
    snapshot = Snapshot(root=root.as_posix())
    files = get_file_paths(root)
    with progress.phase("hash", files=len(files), total_bytes=sum(f.size for f in files)):
        for file in files:
            with progress.file(file.rel_path, file.size) as fp:
                buf = read_file(file.abs_path)
                snapshot.entries.append(SnapshotEntry(
                    rel_path=file.rel_path,
                    size=buf.size(),
                    mtime=file.mtime,
                    digest=buf.hash(),
                ))
                fp.advance(buf.size())
    log.info("Snapshot of %s: %d file(s), %d bytes",
             snapshot.root, len(snapshot.entries), snapshot.total_size())
    return snapshot


def save_snapshot(snapshot: Snapshot, path: str | Path, level: int = DEFAULT_LEVEL) -> int:
    """Write *snapshot* zstd-compressed to *path*; returns bytes written."""
    packed = snapshot.to_buffer().compress(level)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(packed.to_bytes())
    log.debug("Saved snapshot %s (%d bytes packed)", path, packed.size())
    return packed.size()


def load_snapshot(path: str | Path) -> Snapshot:
    packed = read_file(path)
    if packed.empty():
        raise SnapshotError(f"Snapshot file is empty: {path}")
    return Snapshot.from_buffer(packed.decompress())


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------

@dataclass
class SnapshotDiff:
    added: list[SnapshotEntry] = field(default_factory=list)       # only in new
    removed: list[SnapshotEntry] = field(default_factory=list)     # only in old
    modified: list[SnapshotEntry] = field(default_factory=list)    # new side
    unchanged: list[SnapshotEntry] = field(default_factory=list)

    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.modified)


def compare(old: Snapshot, new: Snapshot) -> SnapshotDiff:
    """Classify files by relative path and digest."""
    old_map = old.by_path()
    new_map = new.by_path()
    diff = SnapshotDiff()
    for path in sorted(new_map):
        entry = new_map[path]
        before = old_map.get(path)
        if before is None:
            diff.added.append(entry)
        elif before.digest != entry.digest or before.size != entry.size:
            diff.modified.append(entry)
        else:
            diff.unchanged.append(entry)
    for path in sorted(old_map.keys() - new_map.keys()):
        diff.removed.append(old_map[path])
    return diff
