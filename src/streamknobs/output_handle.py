"""Output handle: one write target that may be stdout, a file, or a compressed file."""

import logging
import os
import sys
from typing import Any, TextIO, Union

from .base import StreamHandle
from .compression import ENCODE_ERRORS, CompressionKind, open_writer
from .config import PathLike, StreamSettings, StreamTarget
from .exceptions import FileNotWritable, WriteError

logger = logging.getLogger(__name__)


class OutputHandle(StreamHandle):
    """Write-through handle with error checking.

    A handle starts bound to standard output or a named file and can be
    rebound any number of times. Every rebind flushes the previous sink
    before the new one takes over, so buffered data is never dropped.

    Example:
        ```python
        with OutputHandle("counts.txt") as out:
            out.write(42).write(" ").write_line(3.5)
            out.open_compressed("counts.txt.zst", "zstd", level=19)
            out.write_line("compressed")
        ```
    """

    standard_label = "<stdout>"

    def __init__(
        self,
        target: Union[StreamTarget, PathLike, None] = None,
        *,
        settings: StreamSettings | None = None,
    ):
        """Initialize the handle.

        Args:
            target: None or StreamTarget.standard() for standard output,
                otherwise a file path (opened plain, truncating)
            settings: Text and codec settings

        Raises:
            StreamConfigurationError: If the settings name an unknown encoding
            FileNotWritable: If the file cannot be opened
        """
        super().__init__(settings)
        target = StreamTarget.coerce(target)
        if target.is_standard:
            self._bind_standard(target)
        else:
            # Nothing has been written to standard output by this handle yet.
            self._rebind(
                target.path,
                CompressionKind.NONE,
                self.settings.compression_level,
                flush_previous=False,
            )

    def _standard_stream(self) -> TextIO:
        return sys.stdout

    def open(self, path: PathLike) -> None:
        """Rebind to a plain file.

        Args:
            path: File to create or truncate

        Raises:
            StreamConfigurationError: If the settings name an unknown encoding
            FileNotWritable: If the file cannot be opened; the previous
                sink stays bound
        """
        self._rebind(os.fspath(path), CompressionKind.NONE, self.settings.compression_level)

    def open_compressed(
        self,
        path: PathLike,
        kind: Union[CompressionKind, str, None] = None,
        level: int | None = None,
    ) -> None:
        """Rebind to a compressed file.

        Args:
            path: File to create or truncate
            kind: Compression kind (default: settings.compression)
            level: Compression level (default: settings.compression_level)

        Raises:
            UnknownCompressionKind: If the kind is not supported
            InvalidCompressionLevel: If the level is out of the codec's range
            FileNotWritable: If the file cannot be opened
        """
        resolved = CompressionKind.parse(kind if kind is not None else self.settings.compression)
        level = self.settings.compression_level if level is None else level
        resolved.validate_level(level)
        self._rebind(os.fspath(path), resolved, level)

    def _rebind(
        self, filename: str, kind: CompressionKind, level: int, flush_previous: bool = True
    ) -> None:
        self.settings.validate()
        if flush_previous:
            self.flush()

        # Two open writers on one file would interleave; release the old one first.
        if self._owned is not None and _same_path(self._filename, filename):
            self._close_owned()

        try:
            new_stream = open_writer(filename, kind, level, self.settings)
        except ENCODE_ERRORS as e:
            logger.debug(f"Cannot open {filename} for writing: {e}")
            raise FileNotWritable(filename) from e

        previous = self.label
        try:
            self._swap(new_stream, filename, kind)
        except ENCODE_ERRORS as e:
            raise FileNotWritable(previous) from e

    def _close_owned(self) -> None:
        label = self.label
        try:
            self._bind_standard()
        except ENCODE_ERRORS as e:
            raise FileNotWritable(label) from e

    def close(self) -> None:
        """Flush and release the sink, then rebind to standard output.

        Safe to call more than once.
        """
        if self._owned is not None:
            logger.debug(f"Closing {self._filename}")
        try:
            self.flush()
        finally:
            self._close_owned()

    def flush(self) -> None:
        """Force buffered text to the underlying resource.

        Raises:
            FileNotWritable: If the underlying flush fails
        """
        try:
            self.stream.flush()
        except ENCODE_ERRORS as e:
            raise FileNotWritable(self.label) from e

    def write(self, value: Any) -> "OutputHandle":
        """Write the text representation of a value.

        Args:
            value: Any object; written as ``str(value)``

        Returns:
            This handle, so writes can be chained

        Raises:
            WriteError: If the sink rejects the write
        """
        self._write(str(value), type(value).__name__)
        return self

    def write_line(self, value: Any = "") -> "OutputHandle":
        """Write a value followed by a line feed."""
        self._write(f"{value}\n", type(value).__name__)
        return self

    def _write(self, text: str, type_name: str) -> None:
        try:
            self.stream.write(text)
        except ENCODE_ERRORS as e:
            raise WriteError(type_name, self.label) from e


def _same_path(a: str, b: str) -> bool:
    return os.path.realpath(a) == os.path.realpath(b)
