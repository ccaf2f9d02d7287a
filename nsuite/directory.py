"""
Directory tools — file enumeration, well-known folders, path cleanup.

get_file_paths(directory) → list[FileEntry]
    Every file below *directory*, sorted by relative path.

read_file(path) → Buffer / write_file(path, view)
    Whole-file load into an owned Buffer and write-back from a ByteView.

sanitize_path(path) → str
    Collapses runs of ``/`` and ``\\`` into one ``/`` and drops a trailing
    separator.
"""

from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path

from .buffer import Buffer
from .memory import ByteView

READ_CHUNK_BYTES: int = 512 * 1024   # streaming unit for large reads

_SEPARATORS = re.compile(r"[\\/]+")


@dataclass
class FileEntry:
    abs_path: Path       # absolute path on disk
    rel_path: str        # "/"-separated path relative to the scanned root
    size: int            # file size in bytes
    mtime: float         # modification time (unix timestamp)


def _entry(abs_path: Path, rel_path: str) -> FileEntry:
    st = abs_path.stat()
    return FileEntry(
        abs_path=abs_path,
        rel_path=rel_path,
        size=st.st_size,
        mtime=st.st_mtime,
    )


def get_file_paths(directory: str | Path) -> list[FileEntry]:
    """
    Return a FileEntry for each regular file found under *directory*.

    Symlinked directories are not followed.  Raises FileNotFoundError when
    *directory* does not exist or is not a directory.
    """
    root = Path(directory).resolve()
    if not root.is_dir():
        raise FileNotFoundError(f"Directory not found: {root}")

    entries: list[FileEntry] = []
    for dirpath, dirnames, files in os.walk(root):
        dirnames.sort()
        for fname in sorted(files):
            abs_p = Path(dirpath) / fname
            if not abs_p.is_file():
                continue
            rel = abs_p.relative_to(root).as_posix()
            entries.append(_entry(abs_p, rel))
    entries.sort(key=lambda e: e.rel_path)
    return entries


def read_file(path: str | Path) -> Buffer:
    """Load the whole file into a new Buffer (empty Buffer for empty files)."""
    path = Path(path)
    buf = Buffer(path.stat().st_size)
    if buf.empty():
        return buf
    with open(path, "rb") as fh:
        read = _read_into(fh, buf.view())
    if read != buf.size():
        # file shrank between stat() and read()
        buf.resize(read)
    return buf


def _read_into(fh, view: ByteView) -> int:
    offset = 0
    while offset < view.size():
        chunk = view.subrange(offset, min(READ_CHUNK_BYTES, view.size() - offset))
        count = fh.readinto(chunk.bytes())
        if not count:
            break
        offset += count
    return offset


def write_file(path: str | Path, view: ByteView) -> None:
    """Write the bytes of *view* to *path*, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as fh:
        if view.has_data():
            fh.write(view.bytes())


# ---------------------------------------------------------------------------
# Well-known folders
# ---------------------------------------------------------------------------

def get_running_directory() -> Path:
    """Directory holding the running program (frozen executable or script)."""
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    if sys.argv and sys.argv[0]:
        return Path(sys.argv[0]).resolve().parent
    return Path.cwd()


def get_desktop_path() -> Path:
    return Path.home() / "Desktop"


def get_start_menu_path() -> Path:
    """User start-menu folder; the XDG applications folder off Windows."""
    if os.name == "nt":
        appdata = os.environ.get("APPDATA") or str(Path.home() / "AppData" / "Roaming")
        return Path(appdata) / "Microsoft" / "Windows" / "Start Menu"
    data_home = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(data_home) / "applications"


# ---------------------------------------------------------------------------
# Path cleanup
# ---------------------------------------------------------------------------

def sanitize_path(path: str) -> str:
    cleaned = _SEPARATORS.sub("/", path)
    if len(cleaned) > 1 and cleaned.endswith("/"):
        cleaned = cleaned[:-1]
    return cleaned


def is_safe_relative(rel_path: str) -> bool:
    """False for absolute paths and anything climbing out with ``..``."""
    rel = Path(rel_path)
    if rel.is_absolute() or rel_path.startswith(("/", "\\")):
        return False
    if re.match(r"^[A-Za-z]:", rel_path):
        return False
    return ".." not in _SEPARATORS.split(rel_path)
