"""Plain and compressed text streams behind one handle.

This package provides:

- **OutputHandle**: write to stdout, a plain file, or a gzip/bzip2/xz/zstd
  file, and rebind between them without losing buffered output
- **InputHandle**: read tokens or lines from stdin or any file, with the
  compression detected automatically and rewind/line counting built in
- **directory_exists**: boundary check before writing into a directory
- **Exceptions**: a categorized error hierarchy rooted at StreamIOError

Example:
    ```python
    from streamknobs import InputHandle, OutputHandle, directory_exists

    directory_exists("results")
    with OutputHandle() as out:
        out.open_compressed("results/values.txt.gz", "gzip", level=9)
        for value in (1, 2, 3):
            out.write_line(value)

    values = InputHandle("results/values.txt.gz")
    total = sum(values.read(int) for _ in range(values.count_lines()))
    ```
"""

from streamknobs.compression import (
    CompressionKind,
    detect_compression,
    open_reader,
    open_writer,
)
from streamknobs.config import StreamSettings, StreamTarget, TargetKind
from streamknobs.directory import directory_exists
from streamknobs.exceptions import (
    CannotReadFromFile,
    DirectoryDoesNotExist,
    ErrorKind,
    FileNotWritable,
    InvalidCompressionLevel,
    NotRewindable,
    PreconditionError,
    ReadError,
    StreamConfigurationError,
    StreamDataError,
    StreamIOError,
    StreamResourceError,
    UnknownCompressionKind,
    WriteError,
)
from streamknobs.input_handle import InputHandle
from streamknobs.output_handle import OutputHandle

__version__ = "1.0.0"

__all__ = [
    # Version
    "__version__",
    # Handles
    "InputHandle",
    "OutputHandle",
    "directory_exists",
    # Compression
    "CompressionKind",
    "detect_compression",
    "open_reader",
    "open_writer",
    # Configuration
    "StreamSettings",
    "StreamTarget",
    "TargetKind",
    # Exceptions
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
