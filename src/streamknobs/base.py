"""Base handle: a logical stream bound to a swappable underlying resource."""

import logging
from abc import ABC, abstractmethod
from typing import Any, TextIO

from .compression import CompressionKind
from .config import StreamSettings, StreamTarget

logger = logging.getLogger(__name__)


class StreamHandle(ABC):
    """Owner of exactly one active text stream at a time.

    The handle keeps a nullable slot for a stream it opened itself. Standard
    streams are borrowed: they are bound but never closed by the handle.
    Subclasses implement the acquisition policy; this class implements the
    swap and release mechanics shared by both directions.
    """

    standard_label = "<standard>"

    def __init__(self, settings: StreamSettings | None = None):
        """Initialize handle state.

        Args:
            settings: Text and codec settings (default: from environment)
        """
        self.settings = settings or StreamSettings.from_env()
        self._owned: TextIO | None = None
        self._stream: TextIO | None = None
        self._filename = ""
        self._compression = CompressionKind.NONE

    @abstractmethod
    def _standard_stream(self) -> TextIO:
        """Return the process-wide standard stream for this direction."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the bound resource."""
        pass

    @property
    def stream(self) -> TextIO:
        """The currently bound text stream."""
        if self._stream is None:
            return self._standard_stream()
        return self._stream

    @property
    def filename(self) -> str:
        """Path of the bound file, empty for a standard stream."""
        return self._filename

    @property
    def compression(self) -> CompressionKind:
        """Compression kind of the bound resource."""
        return self._compression

    @property
    def is_standard(self) -> bool:
        """True if bound to a standard stream rather than a named file."""
        return self._owned is None

    def _bind_standard(self, target: StreamTarget | None = None) -> None:
        previous = self._owned
        self._owned = None
        self._stream = target.stream if target is not None else None
        self._filename = ""
        self._compression = CompressionKind.NONE
        if previous is not None:
            previous.close()

    def _swap(self, new_stream: TextIO, filename: str, compression: CompressionKind) -> None:
        """Bind an already verified resource, then release the previous one."""
        previous = self._owned
        self._owned = new_stream
        self._stream = new_stream
        self._filename = filename
        self._compression = compression
        logger.debug(f"{type(self).__name__} bound to {filename} ({compression.value})")
        if previous is not None:
            previous.close()

    def __enter__(self) -> Any:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    @property
    def label(self) -> str:
        """Name used in error messages: the filename or the standard stream."""
        return self._filename or self.standard_label

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.label!r}, compression={self._compression.value})"
