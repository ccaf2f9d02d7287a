"""
Progress rendering — rich live progress for snapshot and sync runs.

Work is grouped into phases (``hash`` while snapshotting, ``copy`` while
syncing).  Each phase gets one row that counts files and bytes for that
phase only; each file being processed gets a short-lived row of its own.

Usage::

    tracker = ProgressTracker(label="sync", target="./backup")
    tracker.start()

    with tracker.phase("copy", files=len(entries), total_bytes=total):
        for entry in entries:
            with tracker.file(entry.rel_path, entry.size) as fp:
                ...
                fp.advance(entry.size)

    tracker.stop()
    tracker.completed   # {"copy": len(entries)}
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)


class _Phase:
    __slots__ = ("name", "task_id", "files", "done")

    def __init__(self, name: str, task_id: TaskID, files: int) -> None:
        self.name = name
        self.task_id = task_id
        self.files = files
        self.done = 0

    def describe(self) -> str:
        return f"{self.name} {self.done}/{self.files} files"


class FileProgress:
    """Context returned by ProgressTracker.file(); bytes count toward the phase too."""

    def __init__(self, progress: Progress, task_id: TaskID, size: int,
                 phase: _Phase | None) -> None:
        self._progress = progress
        self._task_id = task_id
        self._size = size
        self._phase = phase
        self._advanced = 0

    def advance(self, n: int) -> None:
        self._advanced += n
        self._progress.advance(self._task_id, n)
        if self._phase is not None:
            self._progress.advance(self._phase.task_id, n)

    def finish(self) -> None:
        self._progress.update(self._task_id, completed=max(self._size, 1))
        remaining = self._size - self._advanced
        if self._phase is not None and remaining > 0:
            self._progress.advance(self._phase.task_id, remaining)


class ProgressTracker:
    """Phase rows plus per-file rows, rendered on stderr."""

    def __init__(self, label: str, target: str = "") -> None:
        self.label = label
        self.target = target
        self.completed: dict[str, int] = {}     # phase name → files finished
        self._phase: _Phase | None = None
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold cyan]{task.fields[stage]}[/] {task.description}"),
            BarColumn(bar_width=None),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            TextColumn("[dim]{task.fields[filename]}"),
            console=Console(stderr=True),
            expand=True,
        )

    def start(self) -> None:
        self._progress.start()

    def stop(self) -> None:
        self._progress.stop()

    @contextmanager
    def phase(self, name: str, files: int, total_bytes: int) -> Generator[None, None, None]:
        """Group the files processed inside the block under one counted row."""
        task_id = self._progress.add_task(
            "", total=max(total_bytes, 1), stage=self.label, filename=self.target,
        )
        outer, self._phase = self._phase, _Phase(name, task_id, files)
        self.completed.setdefault(name, 0)
        self._progress.update(task_id, description=self._phase.describe())
        try:
            yield
        finally:
            self._progress.update(task_id, completed=max(total_bytes, 1))
            self._phase = outer

    @contextmanager
    def file(self, filename: str, size: int) -> Generator[FileProgress, None, None]:
        """Context manager tracking a single file."""
        phase = self._phase
        task_id = self._progress.add_task(
            "  ",
            total=max(size, 1),
            stage=phase.name if phase else self.label,
            filename=filename,
        )
        fp = FileProgress(self._progress, task_id, size, phase)
        try:
            yield fp
        finally:
            fp.finish()
            self._progress.remove_task(task_id)
            if phase is not None:
                phase.done += 1
                self.completed[phase.name] += 1
                self._progress.update(phase.task_id, description=phase.describe())


class NullProgress:
    """Drop-in no-op replacement when --quiet is set or no UI is wanted."""

    def start(self) -> None: ...
    def stop(self) -> None: ...

    @contextmanager
    def phase(self, name: str, files: int, total_bytes: int) -> Generator[None, None, None]:
        yield

    @contextmanager
    def file(self, filename: str, size: int) -> Generator[FileProgress, None, None]:
        class _NopFP:
            def advance(self, n: int) -> None: ...
            def finish(self) -> None: ...
        yield _NopFP()  # type: ignore[misc]
