"""
nSuite — directory snapshots and synchronization over bounds-checked byte views.
"""

from .buffer import Buffer
from .errors import (
    CompressionError,
    NsuiteError,
    NullArgumentError,
    OutOfRangeError,
    SnapshotError,
    SyncError,
)
from .integrity import ZERO_HASH, hash_bytes
from .memory import Address, ByteView

__version__ = "1.0.0"

__all__ = [
    "Address",
    "Buffer",
    "ByteView",
    "CompressionError",
    "NsuiteError",
    "NullArgumentError",
    "OutOfRangeError",
    "SnapshotError",
    "SyncError",
    "ZERO_HASH",
    "hash_bytes",
]
