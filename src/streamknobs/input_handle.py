"""Input handle: one read source, always opened through the compression-aware reader."""

import logging
import os
import re
import sys
from typing import Any, Callable, Iterator, TextIO, TypeVar, Union

from .base import StreamHandle
from .compression import DECODE_ERRORS, open_reader
from .config import PathLike, StreamSettings, StreamTarget
from .exceptions import CannotReadFromFile, NotRewindable, ReadError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TOKEN = re.compile(r"\S+")
_TRUE = {"1", "true"}
_FALSE = {"0", "false"}


class InputHandle(StreamHandle):
    """Read-through handle with restartable reads.

    Files are opened through the compression-aware reader, so gzip, bzip2,
    xz and zstd files read exactly like plain text. A handle bound to a
    named file can be rewound, which re-opens the file from byte zero.

    Example:
        ```python
        points = InputHandle("points.txt.gz")
        n = points.count_lines()   # stream is back at the start
        for _ in range(n):
            x, y = points.read(float), points.read(float)
        ```
    """

    standard_label = "<stdin>"

    def __init__(
        self,
        target: Union[StreamTarget, PathLike, None] = None,
        *,
        settings: StreamSettings | None = None,
    ):
        """Initialize the handle.

        Args:
            target: None or StreamTarget.standard() for standard input,
                otherwise a file path
            settings: Text and codec settings

        Raises:
            CannotReadFromFile: If the file is missing or cannot be decoded
        """
        super().__init__(settings)
        self._pending = ""
        target = StreamTarget.coerce(target)
        if target.is_standard:
            self._bind_standard(target)
        else:
            self.open(target.path)

    @classmethod
    def from_handle(cls, other: "InputHandle") -> "InputHandle":
        """Create a new handle on the same source, positioned at the start.

        The file is re-opened rather than shared: two handles never own the
        same underlying descriptor. A handle without a filename transfers
        as a standard binding on the same stream object, so a caller-supplied
        stream carries over.
        """
        if other.filename:
            return cls(other.filename, settings=other.settings)
        return cls(StreamTarget.standard(other._stream), settings=other.settings)

    def __copy__(self) -> "InputHandle":
        return type(self).from_handle(self)

    def _standard_stream(self) -> TextIO:
        return sys.stdin

    def open(self, path: PathLike) -> None:
        """Bind to a file, detecting its compression.

        Args:
            path: File to read

        Raises:
            CannotReadFromFile: If the file is missing, unreadable or its
                container is corrupt; the previous source stays bound
        """
        filename = os.fspath(path)
        try:
            stream, kind = open_reader(filename, self.settings)
        except DECODE_ERRORS as e:
            logger.debug(f"Cannot open {filename} for reading: {e}")
            raise CannotReadFromFile(filename) from e
        self._pending = ""
        self._swap(stream, filename, kind)

    def rewind(self) -> None:
        """Re-open the bound file from the beginning.

        Raises:
            NotRewindable: If bound to standard input
            CannotReadFromFile: If the file can no longer be opened
        """
        if self.is_standard:
            raise NotRewindable(self.label)
        logger.debug(f"Rewinding {self._filename}")
        self.open(self._filename)

    def close(self) -> None:
        """Release the source and fall back to standard input."""
        if self._owned is not None:
            logger.debug(f"Closing {self._filename}")
        self._pending = ""
        self._bind_standard()

    def read(self, type_: Callable[[str], T] = str, default: Any = None) -> Any:  # type: ignore[assignment]
        """Read the next whitespace-delimited token as ``type_``.

        Args:
            type_: Conversion applied to the token (str, int, float, bool, ...)
            default: Value returned at end of stream

        Returns:
            The converted token, or ``default`` if no tokens remain

        Raises:
            ReadError: If the token cannot be converted or the source
                cannot be decoded
        """
        type_name = getattr(type_, "__name__", repr(type_))
        try:
            token = self._next_token()
        except DECODE_ERRORS as e:
            raise ReadError(type_name, self.label) from e
        if token is None:
            return default
        try:
            return _convert(type_, token)
        except (ValueError, TypeError) as e:
            raise ReadError(type_name, self.label) from e

    def _next_token(self) -> str | None:
        while True:
            match = _TOKEN.search(self._pending)
            if match is not None:
                self._pending = self._pending[match.end():]
                return match.group()
            line = self.stream.readline()
            if not line:
                self._pending = ""
                return None
            self._pending = line

    def readline(self) -> str | None:
        """Read the rest of the current line without its terminator.

        After a token read this returns whatever followed the token on its
        line, which may be empty.

        Returns:
            The line, or None at end of stream

        Raises:
            ReadError: If the source cannot be decoded
        """
        try:
            if self._pending:
                line, self._pending = self._pending, ""
            else:
                line = self.stream.readline()
        except DECODE_ERRORS as e:
            raise ReadError("str", self.label) from e
        if not line:
            return None
        return line[:-1] if line.endswith("\n") else line

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.readline()
            if line is None:
                return
            yield line

    def count_lines(self) -> int:
        """Count the remaining lines, then rewind to the start of the file.

        A final line without a terminator still counts. The scan is linear
        in the file size and leaves the handle at byte zero, whatever the
        position was before the call.

        Returns:
            Number of lines from the current position to end of stream

        Raises:
            NotRewindable: If bound to standard input (nothing is consumed)
            ReadError: If the source cannot be decoded; the handle is still
                rewound to the start
        """
        if self.is_standard:
            raise NotRewindable(self.label)
        n_lines = 1 if self._pending else 0
        self._pending = ""
        try:
            for _ in self.stream:
                n_lines += 1
        except DECODE_ERRORS as e:
            raise ReadError("str", self.label) from e
        finally:
            self.rewind()
        return n_lines


def _convert(type_: Callable[[str], Any], token: str) -> Any:
    if type_ is bool:
        lowered = token.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"Not a boolean: {token!r}")
    return type_(token)
