"""
On-the-fly compression of download streams.

A request for "name.bz2" is served by fetching "name" and compressing it
while it streams. The compressed stream is a drop-in replacement for the
remote file stream it wraps.
"""

import bz2
import logging
import posixpath
from typing import Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

# Suffix -> compressor factory taking a compression level
COMPRESSED_SUFFIXES: Dict[str, Callable] = {
    ".bz2": bz2.BZ2Compressor,
}


def split_compression_suffix(requested_path: str) -> Tuple[str, Optional[str]]:
    """
    Split a recognized compression suffix off a requested path.

    Only the extension of the final component counts, and matching is
    case-sensitive. A dotfile such as ".bz2" has no extension.

    Returns:
        (path to fetch, suffix) where suffix is None for pass-through

    Example:
        >>> split_compression_suffix("logs/app.log.bz2")
        ('logs/app.log', '.bz2')
        >>> split_compression_suffix("logs/app.log")
        ('logs/app.log', None)
    """
    _, ext = posixpath.splitext(posixpath.basename(requested_path))
    if ext in COMPRESSED_SUFFIXES:
        return requested_path[: -len(ext)], ext
    return requested_path, None


class TranscodingStream:
    """
    Byte stream decorator that compresses its source incrementally.

    Only as much of the source is read as is needed to produce the next
    chunk of output. When the source is exhausted the compressor is
    flushed, so the output is always a complete compressed stream.
    """

    def __init__(self, source, compressor):
        self.source = source
        self._compressor = compressor

    def __iter__(self):
        try:
            for chunk in self.source:
                data = self._compressor.compress(chunk)
                if data:
                    yield data
            yield self._compressor.flush()
        finally:
            self.close()

    def __enter__(self) -> "TranscodingStream":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self.source.closed

    def close(self) -> None:
        self.source.close()


def wrap_stream(source, suffix: str, compress_level: int = 9) -> TranscodingStream:
    """Wrap a byte stream in the compressor registered for suffix."""
    compressor = COMPRESSED_SUFFIXES[suffix](compress_level)
    logger.debug(f"Compressing stream with {suffix} (level {compress_level})")
    return TranscodingStream(source, compressor)
