"""
nSuite  CLI entry point.

Usage:
    python -m nsuite hash <file> [<file>...]
    python -m nsuite snapshot <dir> -o <file> [--level N] [--quiet]
    python -m nsuite diff <snapshot-file|dir> <dir>
    python -m nsuite sync <src> <dst> [--no-delete] [--dry-run] [--quiet]
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .compress import DEFAULT_LEVEL, MAX_LEVEL
from .directory import read_file
from .errors import NsuiteError
from .progress import NullProgress, ProgressTracker
from .snapshot import compare, load_snapshot, save_snapshot, take_snapshot
from .sync import sync_directories

log = logging.getLogger("nsuite")


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        level=level,
    )


# ---------------------------------------------------------------------------
# Sub-commands
# ---------------------------------------------------------------------------

def cmd_hash(args: argparse.Namespace) -> int:
    """Print the BLAKE3 digest of each file."""
    for name in args.files:
        digest = read_file(name).hash()
        print(f"{digest.hex()}  {name}")
    return 0


def cmd_snapshot(args: argparse.Namespace) -> int:
    """Hash a directory tree and store the manifest compressed."""
    progress = _make_progress("snapshot", args.dir, args.quiet)
    try:
        snapshot = take_snapshot(args.dir, progress=progress)
    finally:
        progress.stop()
    written = save_snapshot(snapshot, args.output, level=args.level)
    print(f"[nSuite] {len(snapshot.entries)} file(s) ({_fmt_size(snapshot.total_size())}) "
          f"→ {args.output} ({_fmt_size(written)})")
    return 0


def cmd_diff(args: argparse.Namespace) -> int:
    """Compare a stored snapshot (or a directory) against a directory."""
    old_path = Path(args.old)
    old = take_snapshot(old_path) if old_path.is_dir() else load_snapshot(old_path)
    new = take_snapshot(args.new)

    diff = compare(old, new)
    for entry in diff.added:
        print(f"+ {entry.rel_path}")
    for entry in diff.removed:
        print(f"- {entry.rel_path}")
    for entry in diff.modified:
        print(f"~ {entry.rel_path}")
    if not diff.has_changes():
        print("No changes.")
    return 0


def cmd_sync(args: argparse.Namespace) -> int:
    """Mirror <src> into <dst>."""
    progress = _make_progress("sync", args.dst, args.quiet or args.dry_run)
    try:
        result = sync_directories(
            args.src,
            args.dst,
            delete=not args.no_delete,
            dry_run=args.dry_run,
            progress=progress,
        )
    finally:
        progress.stop()

    prefix = "[nSuite] (dry run)" if result.dry_run else "[nSuite]"
    for rel in result.copied:
        print(f"{prefix} copy   {rel}")
    for rel in result.deleted:
        print(f"{prefix} delete {rel}")
    print(f"{prefix} ✓ {len(result.copied)} copied ({_fmt_size(result.bytes_copied)}), "
          f"{len(result.deleted)} deleted, {len(result.diff.unchanged)} unchanged")
    return 0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_progress(label: str, target: str, quiet: bool) -> ProgressTracker | NullProgress:
    if quiet:
        return NullProgress()
    progress = ProgressTracker(label=label, target=target)
    progress.start()
    return progress


def _fmt_size(n: float) -> str:
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if n < 1024:
            return f"{n:.1f} {unit}"
        n /= 1024
    return f"{n:.1f} PB"


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nsuite",
        description="nSuite — directory snapshots and synchronization (BLAKE3, zstd)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    # --- hash ---
    p_hash = sub.add_parser("hash", help="Print BLAKE3 digests of files")
    p_hash.add_argument("files", nargs="+", help="Files to hash")

    # --- snapshot ---
    p_snap = sub.add_parser("snapshot", help="Write a compressed snapshot of a directory")
    p_snap.add_argument("dir", help="Directory to snapshot")
    p_snap.add_argument("-o", "--output", required=True, help="Snapshot file to write")
    p_snap.add_argument("--level", type=int, default=DEFAULT_LEVEL,
                        choices=range(1, MAX_LEVEL + 1), metavar=f"1-{MAX_LEVEL}",
                        help=f"zstd compression level (default {DEFAULT_LEVEL})")
    p_snap.add_argument("--quiet", action="store_true", help="No progress bars")

    # --- diff ---
    p_diff = sub.add_parser("diff", help="Compare a snapshot or directory with a directory")
    p_diff.add_argument("old", help="Snapshot file or directory (before)")
    p_diff.add_argument("new", help="Directory (after)")

    # --- sync ---
    p_sync = sub.add_parser("sync", help="Mirror a directory into another")
    p_sync.add_argument("src", help="Source directory")
    p_sync.add_argument("dst", help="Destination directory")
    p_sync.add_argument("--no-delete", action="store_true",
                        help="Keep files that only exist in the destination")
    p_sync.add_argument("--dry-run", action="store_true",
                        help="Show what would change without touching anything")
    p_sync.add_argument("--quiet", action="store_true", help="No progress bars")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def run(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose)

    handlers = {
        "hash":     cmd_hash,
        "snapshot": cmd_snapshot,
        "diff":     cmd_diff,
        "sync":     cmd_sync,
    }
    try:
        return handlers[args.command](args)
    except (NsuiteError, OSError) as exc:
        log.debug("Command %s failed", args.command, exc_info=True)
        print(f"[nSuite] Error: {exc}", file=sys.stderr)
        return 1


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
