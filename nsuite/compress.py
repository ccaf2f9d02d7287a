"""
Compression helpers — zstandard (zstd).

compress(data, level) → bytes   (one zstd frame, content size recorded)
decompress(data)      → bytes   (raw)

*data* may be any buffer-protocol object, including ``ByteView.bytes()``.
A module-level compressor/decompressor is reused across calls.
"""

from __future__ import annotations

import zstandard as zstd

from .errors import CompressionError

DEFAULT_LEVEL: int = 3           # good balance speed vs ratio
MAX_LEVEL: int = 22

_compressor: zstd.ZstdCompressor | None = None
_compressor_level: int = DEFAULT_LEVEL
_decompressor: zstd.ZstdDecompressor = zstd.ZstdDecompressor()


def _get_compressor(level: int) -> zstd.ZstdCompressor:
    global _compressor, _compressor_level
    if _compressor is None or level != _compressor_level:
        _compressor_level = level
        _compressor = zstd.ZstdCompressor(level=level, write_content_size=True)
    return _compressor


def compress(data, level: int = DEFAULT_LEVEL) -> bytes:
    """Return zstd-compressed bytes of *data* at the given compression *level*."""
    if not 1 <= level <= MAX_LEVEL:
        raise ValueError(f"zstd level must be 1-{MAX_LEVEL}, got {level}")
    return _get_compressor(level).compress(data)


def decompress(data) -> bytes:
    """Decompress one zstd frame and return raw bytes."""
    try:
        return _decompressor.decompress(data)
    except zstd.ZstdError as exc:
        raise CompressionError(f"Cannot decompress: {exc}") from exc
