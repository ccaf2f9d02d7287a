"""
Directory synchronization — mirror a source tree into a destination.

Both sides are snapshotted, compared, and only added or modified files are
copied.  Each copy is verified against the source digest after it lands;
files present only in the destination are deleted unless ``delete=False``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .directory import is_safe_relative, read_file, write_file
from .errors import SyncError
from .progress import NullProgress, ProgressTracker
from .snapshot import Snapshot, SnapshotDiff, SnapshotEntry, compare, take_snapshot

log = logging.getLogger("nsuite.sync")


@dataclass
class SyncResult:
    diff: SnapshotDiff
    copied: list[str] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    bytes_copied: int = 0
    dry_run: bool = False


def sync_directories(
    src: str | Path,
    dst: str | Path,
    delete: bool = True,
    dry_run: bool = False,
    progress: ProgressTracker | NullProgress | None = None,
) -> SyncResult:
    """Make *dst* hold the same files as *src*.  Raises SyncError on failure."""
    progress = progress or NullProgress()
    src = Path(src).resolve()
    dst = Path(dst).resolve()
    if not src.is_dir():
        raise FileNotFoundError(f"Source directory not found: {src}")
    if dst == src:
        raise SyncError("Source and destination are the same directory")

    source = take_snapshot(src, progress)
    if dst.is_dir():
        target = take_snapshot(dst, progress)
    else:
        target = Snapshot(root=dst.as_posix())

    diff = compare(target, source)
    result = SyncResult(diff=diff, dry_run=dry_run)
    log.info("Sync %s → %s: +%d ~%d -%d (=%d)", src, dst,
             len(diff.added), len(diff.modified), len(diff.removed), len(diff.unchanged))

    to_copy = diff.added + diff.modified
    for entry in to_copy + diff.removed:
        if not is_safe_relative(entry.rel_path):
            raise SyncError(f"Unsafe path: {entry.rel_path}")

    # Removals go first so a file replaced by a directory (or the reverse)
    # is out of the way before the copy lands.
    if delete:
        for entry in diff.removed:
            if not dry_run:
                target_path = dst / entry.rel_path
                target_path.unlink(missing_ok=True)
                _prune_empty_dirs(target_path.parent, dst)
                log.debug("Deleted %s", entry.rel_path)
            result.deleted.append(entry.rel_path)

    if dry_run:
        result.copied.extend(e.rel_path for e in to_copy)
        return result

    with progress.phase("copy", files=len(to_copy), total_bytes=sum(e.size for e in to_copy)):
        for entry in to_copy:
            with progress.file(entry.rel_path, entry.size) as fp:
                _copy_file(src, dst, entry)
                fp.advance(entry.size)
            result.copied.append(entry.rel_path)
            result.bytes_copied += entry.size

    return result


def _check_room(dest: Path, root: Path, rel_path: str) -> None:
    """Raise SyncError if a directory sits at *dest* or a file sits on its way."""
    if dest.is_dir():
        raise SyncError(f"Cannot copy {rel_path}: a directory is in the way")
    parent = dest.parent
    while parent != root and root in parent.parents:
        if parent.is_file():
            raise SyncError(f"Cannot copy {rel_path}: {parent.relative_to(root).as_posix()} is a file")
        parent = parent.parent


def _copy_file(src: Path, dst: Path, entry: SnapshotEntry) -> None:
    buf = read_file(src / entry.rel_path)
    if buf.hash() != entry.digest:
        raise SyncError(f"{entry.rel_path} changed while syncing")

    dest = dst / entry.rel_path
    _check_room(dest, dst, entry.rel_path)
    write_file(dest, buf.view())

    # Restore mtime
    try:
        os.utime(dest, (entry.mtime, entry.mtime))
    except OSError:
        pass

    if read_file(dest).hash() != entry.digest:
        dest.unlink(missing_ok=True)
        raise SyncError(f"Digest mismatch after copying {entry.rel_path}")
    log.debug("Copied %s (%d bytes)", entry.rel_path, entry.size)


def _prune_empty_dirs(directory: Path, root: Path) -> None:
    while directory != root and root in directory.parents:
        try:
            directory.rmdir()
        except OSError:
            return
        directory = directory.parent
