"""Streaming compressors for precompression codecs.

Gzip runs at maximum level with gzip framing. Brotli runs in text mode
at maximum quality, sized from the source file's byte count.
"""

from __future__ import annotations

import zlib
from typing import Protocol

import brotli

from core.constants import (
    BROTLI_MAX_LGWIN,
    BROTLI_MIN_LGWIN,
    BROTLI_QUALITY,
    GZIP_LEVEL,
    GZIP_WBITS,
)
from core.types import CompressionCodec

CODEC_ERRORS: tuple[type[Exception], ...] = (zlib.error, brotli.error)


class StreamCompressor(Protocol):
    """Incremental compressor fed with source chunks."""

    def compress(self, chunk: bytes) -> bytes:
        """Compress one chunk and return any available output."""

    def finish(self) -> bytes:
        """Flush remaining output and end the stream."""


class GzipCompressor:
    """Gzip stream at maximum compression level."""

    def __init__(self) -> None:
        self._compressor = zlib.compressobj(GZIP_LEVEL, zlib.DEFLATED, GZIP_WBITS)

    def compress(self, chunk: bytes) -> bytes:
        return self._compressor.compress(chunk)

    def finish(self) -> bytes:
        return self._compressor.flush(zlib.Z_FINISH)


class BrotliCompressor:
    """Brotli text-mode stream at maximum quality."""

    def __init__(self, size_hint: int) -> None:
        self._compressor = brotli.Compressor(
            mode=brotli.MODE_TEXT,
            quality=BROTLI_QUALITY,
            lgwin=brotli_window_bits(size_hint),
        )

    def compress(self, chunk: bytes) -> bytes:
        return self._compressor.process(chunk)

    def finish(self) -> bytes:
        return self._compressor.finish()


def brotli_window_bits(size_hint: int) -> int:
    """Return the smallest brotli window that covers ``size_hint`` bytes.

    Args:
        size_hint: Exact source size in bytes.

    Returns:
        Window exponent clamped to the encoder's supported range.
    """
    window_bits = BROTLI_MIN_LGWIN
    while window_bits < BROTLI_MAX_LGWIN and (1 << window_bits) - 16 < size_hint:
        window_bits += 1
    return window_bits


def create_compressor(codec: CompressionCodec, size_hint: int) -> StreamCompressor:
    """Create a fresh stream compressor for one job."""
    if codec is CompressionCodec.BROTLI:
        return BrotliCompressor(size_hint)
    return GzipCompressor()
