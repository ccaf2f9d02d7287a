"""
Integrity helpers — BLAKE3 content hashing.

hash_bytes(data) → bytes[32]   (raw digest of any buffer-protocol object)
ZERO_HASH                      (sentinel digest for "no content")
"""

from __future__ import annotations

import blake3 as _b3

HASH_SIZE: int = 32

# Reserved for empty views; never produced for real content in practice.
ZERO_HASH: bytes = bytes(HASH_SIZE)


def hash_bytes(data) -> bytes:
    """Return the 32-byte BLAKE3 digest of *data* (bytes, bytearray, memoryview…)."""
    return _b3.blake3(data).digest()


def verify(data, expected: bytes) -> bool:
    """Return True if BLAKE3(data) == expected digest."""
    return hash_bytes(data) == expected
