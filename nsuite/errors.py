"""Exception types shared across nsuite."""

from __future__ import annotations


class NsuiteError(Exception):
    """Base class for every error raised by nsuite itself."""


class NullArgumentError(NsuiteError, ValueError):
    """A required source/destination is None, or the view involved is empty."""


class OutOfRangeError(NsuiteError, IndexError):
    """An offset, length or index falls outside the addressable range."""


class CompressionError(NsuiteError):
    pass


class SnapshotError(NsuiteError):
    pass


class SyncError(NsuiteError):
    pass
