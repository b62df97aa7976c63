"""Settings and binding targets for stream handles."""

import codecs
import json
import os
from dataclasses import dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import IO, Any, Dict, Union

import yaml  # type: ignore[import-untyped]

from .exceptions import StreamConfigurationError

PathLike = Union[str, "os.PathLike[str]"]


class TargetKind(Enum):
    """What a handle is bound to."""
    STANDARD = "standard"
    FILE = "file"


@dataclass(frozen=True)
class StreamTarget:
    """Explicit binding choice for a handle: a standard stream or a named file.

    Attributes:
        kind: Standard stream or named file.
        path: File path (empty for standard streams).
        stream: Optional stream object to use instead of the process
            stdin/stdout for a standard binding.
    """
    kind: TargetKind
    path: str = ""
    stream: IO[str] | None = None

    @classmethod
    def standard(cls, stream: IO[str] | None = None) -> "StreamTarget":
        """Bind to a standard stream (process stdin/stdout unless given)."""
        return cls(TargetKind.STANDARD, stream=stream)

    @classmethod
    def file(cls, path: PathLike) -> "StreamTarget":
        """Bind to a named file."""
        return cls(TargetKind.FILE, path=os.fspath(path))

    @classmethod
    def coerce(cls, value: Union["StreamTarget", PathLike, None]) -> "StreamTarget":
        """Normalize a constructor argument into a target.

        Args:
            value: None for the standard stream, a path, or a target

        Returns:
            StreamTarget
        """
        if value is None:
            return cls.standard()
        if isinstance(value, StreamTarget):
            return value
        return cls.file(value)

    @property
    def is_standard(self) -> bool:
        return self.kind is TargetKind.STANDARD


@dataclass
class StreamSettings:
    """Text and codec settings shared by input and output handles.

    Attributes:
        encoding: Text encoding used for every file.
        errors: Encoding error policy passed to the text layer.
        newline: Line terminator; "\\n" disables newline translation.
        compression: Default compression kind for ``open_compressed``.
        compression_level: Default compression level.
    """
    encoding: str = "utf-8"
    errors: str = "strict"
    newline: str = "\n"
    compression: str = "gzip"
    compression_level: int = 6

    ENV_PREFIX = "STREAMKNOBS_"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StreamSettings":
        """Create settings from a dictionary, ignoring unknown keys.

        Args:
            data: Settings dictionary

        Returns:
            StreamSettings
        """
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_file(cls, path: PathLike) -> "StreamSettings":
        """Load settings from a YAML or JSON file.

        A top-level ``streamknobs`` key is honored if present, so the
        settings may live inside a larger application config.

        Args:
            path: Path to a .yaml/.yml or .json file

        Returns:
            StreamSettings

        Raises:
            StreamConfigurationError: If the file is missing or malformed
        """
        file_path = Path(path)
        if not file_path.exists():
            raise StreamConfigurationError(
                f"Settings file not found: {file_path}", context={"path": str(file_path)}
            )

        try:
            with open(file_path, encoding="utf-8") as f:
                if file_path.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise StreamConfigurationError(
                f"Invalid settings file {file_path}: {e}", context={"path": str(file_path)}
            ) from e

        data = data or {}
        if not isinstance(data, dict):
            raise StreamConfigurationError(
                f"Settings file {file_path} must contain a mapping",
                context={"path": str(file_path)},
            )
        if isinstance(data.get("streamknobs"), dict):
            data = data["streamknobs"]
        return cls.from_dict(data)

    @classmethod
    def from_env(
        cls, prefix: str | None = None, base: "StreamSettings | None" = None
    ) -> "StreamSettings":
        """Apply environment variable overrides.

        Environment variable format: STREAMKNOBS_<FIELD>, e.g.
        STREAMKNOBS_ENCODING=latin-1 or STREAMKNOBS_COMPRESSION_LEVEL=9.

        Args:
            prefix: Custom environment variable prefix (default: STREAMKNOBS_)
            base: Settings to override (default: built-in defaults)

        Returns:
            New StreamSettings with overrides applied
        """
        prefix = prefix or cls.ENV_PREFIX
        settings = base or cls()
        overrides: Dict[str, Any] = {}

        for f in fields(cls):
            env_var = f"{prefix}{f.name.upper()}"
            if env_var not in os.environ:
                continue
            value = os.environ[env_var]
            if f.type in (int, "int"):
                try:
                    overrides[f.name] = int(value)
                except ValueError as e:
                    raise StreamConfigurationError(
                        f"Environment variable {env_var} must be an integer, got {value!r}",
                        context={"variable": env_var, "value": value},
                    ) from e
            else:
                overrides[f.name] = _unescape(value) if f.name == "newline" else value

        return replace(settings, **overrides)

    def validate(self) -> "StreamSettings":
        """Check that the text settings name a real codec and error policy.

        Returns:
            These settings, unchanged

        Raises:
            StreamConfigurationError: If the encoding, error policy or
                newline convention is not recognized
        """
        try:
            codecs.lookup(self.encoding)
        except LookupError as e:
            raise StreamConfigurationError(
                f"Unknown encoding: {self.encoding!r}", context={"encoding": self.encoding}
            ) from e
        try:
            codecs.lookup_error(self.errors)
        except LookupError as e:
            raise StreamConfigurationError(
                f"Unknown encoding error policy: {self.errors!r}", context={"errors": self.errors}
            ) from e
        if self.newline not in _NEWLINES:
            raise StreamConfigurationError(
                f"Unsupported newline: {self.newline!r}", context={"newline": self.newline}
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Export settings as a dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


_NEWLINES = (None, "", "\n", "\r", "\r\n")


def _unescape(value: str) -> str:
    # Shells make a literal line feed awkward to export.
    return value.replace("\\r", "\r").replace("\\n", "\n")
