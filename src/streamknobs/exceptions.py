"""Exception hierarchy for streamknobs.

Every error raised by the handles derives from :class:`StreamIOError` and
carries an :class:`ErrorKind` tag, so callers can tell a missing or
unwritable resource apart from malformed data or a failed boundary
precondition without inspecting messages.

Example:
    ```python
    from streamknobs import InputHandle
    from streamknobs.exceptions import ErrorKind, StreamIOError

    try:
        handle = InputHandle("data/points.txt.gz")
    except StreamIOError as e:
        if e.kind is ErrorKind.RESOURCE:
            logger.error(f"Input missing: {e.context['filename']}")
        raise
    ```
"""

from enum import Enum
from typing import Any, Dict


class ErrorKind(Enum):
    """Category of a stream error."""
    RESOURCE = "resource"
    DATA = "data"
    PRECONDITION = "precondition"
    CONFIGURATION = "configuration"


class StreamIOError(Exception):
    """Base exception for all streamknobs errors.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context

    Args:
        message: Human-readable error message
        context: Optional dictionary with error context (paths, type names)
    """

    kind: ErrorKind = ErrorKind.RESOURCE

    def __init__(self, message: str, context: Dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.details = self.context


class StreamResourceError(StreamIOError):
    """Raised when an underlying file cannot be acquired."""

    kind = ErrorKind.RESOURCE


class StreamDataError(StreamIOError):
    """Raised when a typed read or write leaves the stream in a failed state."""

    kind = ErrorKind.DATA


class PreconditionError(StreamIOError):
    """Raised when a boundary precondition does not hold."""

    kind = ErrorKind.PRECONDITION


class StreamConfigurationError(StreamIOError):
    """Raised when settings or codec parameters are invalid."""

    kind = ErrorKind.CONFIGURATION


class FileNotWritable(StreamResourceError):
    """A write target could not be opened or flushed."""

    def __init__(self, name: str):
        super().__init__(
            f"File {name} is not writable (does the directory exist?).",
            context={"filename": name},
        )
        self.name = name


class CannotReadFromFile(StreamResourceError):
    """A read source could not be opened or decoded."""

    def __init__(self, name: str):
        super().__init__(f"Cannot read from file: {name}.", context={"filename": name})
        self.name = name


class DirectoryDoesNotExist(PreconditionError):
    """A required directory is missing or is not a directory."""

    def __init__(self, path: str):
        super().__init__(f"Directory {path} does not exist.", context={"path": path})
        self.path = path


class NotRewindable(PreconditionError):
    """Rewind was requested on a handle that is not backed by a named file."""

    def __init__(self, name: str = "<stdin>"):
        super().__init__(
            f"Cannot rewind {name}: not backed by a named file.",
            context={"filename": name},
        )
        self.name = name


class WriteError(StreamDataError):
    """Writing a value failed."""

    def __init__(self, type_name: str, filename: str):
        super().__init__(
            f"Error writing type: {type_name} to file {filename}",
            context={"type": type_name, "filename": filename},
        )
        self.type_name = type_name
        self.filename = filename


class ReadError(StreamDataError):
    """Reading a value failed (unparseable token or undecodable bytes)."""

    def __init__(self, type_name: str, filename: str):
        super().__init__(
            f"Error reading type: {type_name} from file {filename}",
            context={"type": type_name, "filename": filename},
        )
        self.type_name = type_name
        self.filename = filename


class UnknownCompressionKind(StreamConfigurationError):
    """The requested compression kind is not supported."""

    def __init__(self, value: Any):
        super().__init__(f"Unknown compression kind: {value!r}", context={"value": value})


class InvalidCompressionLevel(StreamConfigurationError):
    """The compression level lies outside the codec's range."""

    def __init__(self, kind: str, level: int, low: int, high: int):
        super().__init__(
            f"Compression level {level} out of range for {kind} (expected {low}-{high})",
            context={"kind": kind, "level": level, "range": (low, high)},
        )


__all__ = [
    "ErrorKind",
    "StreamIOError",
    "StreamResourceError",
    "StreamDataError",
    "PreconditionError",
    "StreamConfigurationError",
    "FileNotWritable",
    "CannotReadFromFile",
    "DirectoryDoesNotExist",
    "NotRewindable",
    "WriteError",
    "ReadError",
    "UnknownCompressionKind",
    "InvalidCompressionLevel",
]
