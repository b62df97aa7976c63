"""Compression-aware text stream factory.

Selects a codec by kind and level for writing, and detects the format from
magic bytes for reading. Uncompressed files pass through the same path, so
callers never need to know how a file was written.
"""

import bz2
import gzip
import io
import logging
import lzma
import os
from enum import Enum
from typing import Any, Dict, TextIO, Tuple, Union

import zstandard

from .config import StreamSettings
from .exceptions import InvalidCompressionLevel, UnknownCompressionKind

logger = logging.getLogger(__name__)

# Raised by the codecs or the text layer while decoding a source.
DECODE_ERRORS: Tuple[type, ...] = (
    OSError,
    EOFError,
    ValueError,
    lzma.LZMAError,
    zstandard.ZstdError,
)

# Raised while acquiring or writing to a sink.
ENCODE_ERRORS: Tuple[type, ...] = (OSError, ValueError, zstandard.ZstdError)

_MAGIC_PREFIX_LEN = 6


class CompressionKind(Enum):
    """Supported compression formats."""
    NONE = "none"
    GZIP = "gzip"
    BZ2 = "bz2"
    LZMA = "lzma"
    ZSTD = "zstd"

    @classmethod
    def parse(cls, value: Union["CompressionKind", str]) -> "CompressionKind":
        """Resolve a kind from an enum member, name, or common alias.

        Args:
            value: Kind or name such as "gz", "xz", "zst"

        Returns:
            CompressionKind

        Raises:
            UnknownCompressionKind: If the name is not recognized
        """
        if isinstance(value, CompressionKind):
            return value
        if isinstance(value, str):
            kind = _ALIASES.get(value.strip().lower())
            if kind is not None:
                return kind
        raise UnknownCompressionKind(value)

    @property
    def level_range(self) -> Tuple[int, int] | None:
        """Inclusive level range accepted by the codec, None if unused."""
        return _LEVEL_RANGES.get(self)

    def validate_level(self, level: int) -> int:
        """Check a level against the codec's range.

        Args:
            level: Requested compression level

        Returns:
            The level, unchanged

        Raises:
            InvalidCompressionLevel: If the level is outside the range
        """
        bounds = self.level_range
        if bounds is None:
            return level
        low, high = bounds
        if isinstance(level, bool) or not isinstance(level, int) or not low <= level <= high:
            raise InvalidCompressionLevel(self.value, level, low, high)
        return level


_ALIASES: Dict[str, CompressionKind] = {
    "none": CompressionKind.NONE,
    "plain": CompressionKind.NONE,
    "plaintext": CompressionKind.NONE,
    "z": CompressionKind.GZIP,
    "gz": CompressionKind.GZIP,
    "gzip": CompressionKind.GZIP,
    "bz2": CompressionKind.BZ2,
    "bzip2": CompressionKind.BZ2,
    "lzma": CompressionKind.LZMA,
    "xz": CompressionKind.LZMA,
    "zstd": CompressionKind.ZSTD,
    "zst": CompressionKind.ZSTD,
    "zstandard": CompressionKind.ZSTD,
}

_LEVEL_RANGES: Dict[CompressionKind, Tuple[int, int]] = {
    CompressionKind.GZIP: (0, 9),
    CompressionKind.BZ2: (1, 9),
    CompressionKind.LZMA: (0, 9),
    CompressionKind.ZSTD: (1, 22),
}

_MAGIC: Tuple[Tuple[bytes, CompressionKind], ...] = (
    (b"\x1f\x8b", CompressionKind.GZIP),
    (b"BZh", CompressionKind.BZ2),
    (b"\xfd7zXZ\x00", CompressionKind.LZMA),
    (b"\x5d\x00\x00", CompressionKind.LZMA),
    (b"\x28\xb5\x2f\xfd", CompressionKind.ZSTD),
)


def detect_compression(path: Union[str, "os.PathLike[str]"]) -> CompressionKind:
    """Determine how a file is compressed from its magic number.

    Args:
        path: Path to the file to check

    Returns:
        The detected kind; NONE for plain or empty files

    Raises:
        OSError: If the file cannot be opened
    """
    with open(path, "rb") as f:
        head = f.read(_MAGIC_PREFIX_LEN)
    for magic, kind in _MAGIC:
        if head.startswith(magic):
            return kind
    return CompressionKind.NONE


def open_writer(
    path: Union[str, "os.PathLike[str]"],
    kind: Union[CompressionKind, str] = CompressionKind.NONE,
    level: int = 6,
    settings: StreamSettings | None = None,
) -> TextIO:
    """Open a text sink, compressed with ``kind`` at ``level``.

    Args:
        path: Target file path (truncated if it exists)
        kind: Compression kind
        level: Compression level, validated against the codec's range
        settings: Text settings (encoding, errors, newline)

    Returns:
        Writable text stream

    Raises:
        InvalidCompressionLevel: If the level is out of range
        StreamConfigurationError: If the text settings are invalid; raised
            before the file is touched
        OSError: If the file cannot be created
    """
    kind = CompressionKind.parse(kind)
    kind.validate_level(level)
    settings = (settings or StreamSettings()).validate()
    text_args: Dict[str, Any] = {
        "encoding": settings.encoding,
        "errors": settings.errors,
        "newline": settings.newline,
    }

    if kind is CompressionKind.GZIP:
        return gzip.open(path, "wt", compresslevel=level, **text_args)  # type: ignore[return-value]
    elif kind is CompressionKind.BZ2:
        return bz2.open(path, "wt", compresslevel=level, **text_args)  # type: ignore[return-value]
    elif kind is CompressionKind.LZMA:
        return lzma.open(path, "wt", preset=level, **text_args)  # type: ignore[return-value]
    elif kind is CompressionKind.ZSTD:
        cctx = zstandard.ZstdCompressor(level=level)
        return zstandard.open(path, "wt", cctx=cctx, **text_args)  # type: ignore[no-any-return]
    else:
        return open(path, "w", **text_args)


def _open_binary_reader(path: Union[str, "os.PathLike[str]"], kind: CompressionKind) -> Any:
    if kind is CompressionKind.GZIP:
        return gzip.open(path, "rb")
    elif kind is CompressionKind.BZ2:
        return bz2.open(path, "rb")
    elif kind is CompressionKind.LZMA:
        return lzma.open(path, "rb")
    elif kind is CompressionKind.ZSTD:
        dctx = zstandard.ZstdDecompressor()
        return dctx.stream_reader(open(path, "rb"), read_across_frames=True, closefd=True)
    else:
        return open(path, "rb")


def open_reader(
    path: Union[str, "os.PathLike[str]"],
    settings: StreamSettings | None = None,
) -> Tuple[TextIO, CompressionKind]:
    """Open a text source, decompressing transparently.

    One byte is decoded before the stream is returned, so a corrupt
    header fails here rather than on the first read.

    Args:
        path: Source file path
        settings: Text settings (encoding, errors, newline)

    Returns:
        Tuple of (readable text stream, detected compression kind)

    Raises:
        StreamConfigurationError: If the text settings are invalid
        Any of DECODE_ERRORS if the file is missing or cannot be decoded
    """
    settings = (settings or StreamSettings()).validate()
    kind = detect_compression(path)

    with _open_binary_reader(path, kind) as trial:
        trial.read(1)

    binary = _open_binary_reader(path, kind)
    try:
        stream = io.TextIOWrapper(
            binary,
            encoding=settings.encoding,
            errors=settings.errors,
            newline=settings.newline,
        )
    except BaseException:
        binary.close()
        raise
    logger.debug(f"Opened {path} for reading ({kind.value})")
    return stream, kind
