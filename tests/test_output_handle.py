"""Tests for OutputHandle."""

import io
import logging

import pytest

from streamknobs import output_handle
from streamknobs import (
    CompressionKind,
    FileNotWritable,
    InputHandle,
    InvalidCompressionLevel,
    OutputHandle,
    StreamConfigurationError,
    StreamSettings,
    StreamTarget,
    UnknownCompressionKind,
    WriteError,
)

COMPRESSED_KINDS = [k for k in CompressionKind if k is not CompressionKind.NONE]


class TestConstruction:
    """Binding at construction time."""

    def test_default_is_stdout(self, capsys):
        """No target means standard output."""
        out = OutputHandle()
        assert out.is_standard
        assert out.filename == ""
        out.write("hello").write(" ").write(42)
        out.flush()
        assert capsys.readouterr().out == "hello 42"

    def test_supplied_standard_stream(self):
        """A supplied stream is used as the standard binding."""
        buffer = io.StringIO()
        out = OutputHandle(StreamTarget.standard(buffer))
        out.write_line(3.5)
        assert buffer.getvalue() == "3.5\n"
        assert out.is_standard

    def test_named_file(self, tmp_path):
        """A path opens a plain file."""
        path = tmp_path / "out.txt"
        out = OutputHandle(path)
        assert out.filename == str(path)
        assert not out.is_standard
        out.write(1).write(" ").write("two")
        out.close()
        assert path.read_text() == "1 two"

    def test_named_file_missing_directory(self, tmp_path):
        """A missing directory raises FileNotWritable with the OSError cause."""
        path = tmp_path / "missing" / "out.txt"
        with pytest.raises(FileNotWritable) as exc_info:
            OutputHandle(path)
        assert str(path) in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_named_file_ignores_broken_stdout(self, tmp_path, monkeypatch):
        """Binding a file at construction never flushes standard output."""

        class BrokenPipe:
            def write(self, text):
                return len(text)

            def flush(self):
                raise BrokenPipeError("stdout closed")

        monkeypatch.setattr("sys.stdout", BrokenPipe())
        path = tmp_path / "out.txt"
        out = OutputHandle(path)
        out.write_line("saved")
        out.close()
        assert path.read_text() == "saved\n"

    def test_unknown_encoding_leaves_file_untouched(self, tmp_path):
        """Bad settings fail before an existing file is truncated."""
        path = tmp_path / "precious.txt"
        path.write_text("precious")
        with pytest.raises(StreamConfigurationError):
            OutputHandle(path, settings=StreamSettings(encoding="bogus-enc"))
        assert path.read_text() == "precious"


class TestRebinding:
    """open / open_compressed / close."""

    def test_open_then_write_then_close(self, tmp_path):
        """Data written after open lands in the file."""
        path = tmp_path / "value.txt"
        out = OutputHandle()
        out.open(path)
        out.write(12345)
        out.close()
        assert path.read_text() == "12345"

    def test_open_missing_directory(self, tmp_path):
        """open into a missing directory raises FileNotWritable."""
        out = OutputHandle()
        with pytest.raises(FileNotWritable):
            out.open(tmp_path / "missing" / "out.txt")

    def test_no_leakage_across_rebind(self, tmp_path):
        """Each file gets only what was written while it was bound."""
        first = tmp_path / "a.txt"
        second = tmp_path / "b.txt"
        out = OutputHandle(first)
        out.write_line("A")
        out.open(second)
        out.write_line("B")
        out.close()
        assert first.read_text() == "A\n"
        assert second.read_text() == "B\n"

    def test_failed_rebind_keeps_previous_sink(self, tmp_path):
        """A failed open leaves the previous file bound and writable."""
        path = tmp_path / "keep.txt"
        out = OutputHandle(path)
        out.write_line("before")
        with pytest.raises(FileNotWritable):
            out.open(tmp_path / "missing" / "out.txt")
        assert out.filename == str(path)
        out.write_line("after")
        out.close()
        assert path.read_text() == "before\nafter\n"

    def test_failed_compressed_rebind_keeps_previous_sink(self, tmp_path):
        """A failed open_compressed leaves the previous file bound."""
        path = tmp_path / "keep.txt"
        out = OutputHandle(path)
        out.write("x")
        with pytest.raises(FileNotWritable):
            out.open_compressed(tmp_path / "missing" / "out.gz", "gzip")
        out.write("y")
        out.close()
        assert path.read_text() == "xy"

    def test_reopen_same_path_truncates(self, tmp_path):
        """Reopening the bound path replaces its content."""
        path = tmp_path / "same.txt"
        out = OutputHandle(path)
        out.write("old content")
        out.open_compressed(path, "gzip")
        out.write_line("new")
        out.close()
        assert InputHandle(path).readline() == "new"

    def test_close_rebinds_to_stdout(self, tmp_path, capsys):
        """close flushes the file and falls back to standard output."""
        path = tmp_path / "out.txt"
        out = OutputHandle(path)
        out.write("file")
        out.close()
        assert out.is_standard
        assert out.filename == ""
        out.write("console")
        out.flush()
        assert capsys.readouterr().out == "console"
        assert path.read_text() == "file"

    def test_close_is_idempotent(self, tmp_path):
        """close may be called repeatedly."""
        out = OutputHandle(tmp_path / "out.txt")
        out.close()
        out.close()
        assert out.is_standard

    def test_context_manager_closes(self, tmp_path):
        """Leaving the with block closes the file."""
        path = tmp_path / "ctx.txt"
        with OutputHandle(path) as out:
            out.write("done")
        assert out.is_standard
        assert path.read_text() == "done"

    def test_flush_makes_data_visible(self, tmp_path):
        """flush pushes buffered text to disk."""
        path = tmp_path / "flush.txt"
        out = OutputHandle(path)
        out.write("visible")
        out.flush()
        assert path.read_text() == "visible"
        out.close()

    def test_rebind_with_unknown_encoding_keeps_files(self, tmp_path):
        """A rebind with bad settings truncates nothing and keeps the sink."""
        bound = tmp_path / "bound.txt"
        existing = tmp_path / "existing.txt"
        existing.write_text("precious")
        out = OutputHandle(bound)
        out.write("kept")
        out.settings = StreamSettings(encoding="bogus-enc")
        with pytest.raises(StreamConfigurationError):
            out.open(existing)
        with pytest.raises(StreamConfigurationError):
            out.open(bound)
        assert existing.read_text() == "precious"
        assert out.filename == str(bound)
        out.close()
        assert bound.read_text() == "kept"

    def test_failed_reopen_of_same_path_falls_back_to_stdout(self, tmp_path, monkeypatch):
        """Reopening the bound path releases it first, so a failure leaves stdout bound."""
        path = tmp_path / "same.txt"
        out = OutputHandle(path)
        out.write("before")

        def refuse(*args, **kwargs):
            raise PermissionError("read-only")

        monkeypatch.setattr(output_handle, "open_writer", refuse)
        with pytest.raises(FileNotWritable) as exc_info:
            out.open(path)
        assert isinstance(exc_info.value.__cause__, PermissionError)
        assert out.is_standard
        assert out.filename == ""
        assert path.read_text() == "before"

    def test_failed_rebind_to_other_path_keeps_sink(self, tmp_path, monkeypatch):
        """A failure opening a different path leaves the current file bound."""
        path = tmp_path / "current.txt"
        out = OutputHandle(path)

        def refuse(*args, **kwargs):
            raise PermissionError("read-only")

        monkeypatch.setattr(output_handle, "open_writer", refuse)
        with pytest.raises(FileNotWritable):
            out.open(tmp_path / "other.txt")
        assert not out.is_standard
        assert out.filename == str(path)
        out.close()


class TestCompressed:
    """Compressed sinks."""

    @pytest.mark.parametrize("kind", COMPRESSED_KINDS, ids=lambda k: k.value)
    @pytest.mark.parametrize("level", [1, 6, 9])
    def test_round_trip(self, tmp_path, kind, level):
        """Compressed output reads back through InputHandle."""
        path = tmp_path / "records.dat"
        records = [f"record-{i}" for i in range(50)]
        out = OutputHandle()
        out.open_compressed(path, kind, level)
        assert out.compression is kind
        for record in records:
            out.write_line(record)
        out.close()

        source = InputHandle(path)
        assert source.compression is kind
        assert list(source) == records

    def test_zstd_high_level(self, tmp_path):
        """zstd accepts levels above 9."""
        path = tmp_path / "high.zst"
        with OutputHandle() as out:
            out.open_compressed(path, "zstd", 22)
            out.write_line("max")
        assert InputHandle(path).read() == "max"

    def test_defaults_from_settings(self, tmp_path):
        """Kind and level default to the settings."""
        path = tmp_path / "default.out"
        settings = StreamSettings(compression="bz2", compression_level=9)
        with OutputHandle(settings=settings) as out:
            out.open_compressed(path)
            assert out.compression is CompressionKind.BZ2
            out.write_line("x")
        assert path.read_bytes().startswith(b"BZh9")

    def test_invalid_level_leaves_handle_untouched(self, tmp_path):
        """A bad level fails before any file is created."""
        first = tmp_path / "first.txt"
        target = tmp_path / "never.gz"
        out = OutputHandle(first)
        with pytest.raises(InvalidCompressionLevel):
            out.open_compressed(target, "gzip", 11)
        assert not target.exists()
        assert out.filename == str(first)
        out.close()

    def test_unknown_kind(self, tmp_path):
        """Unsupported kinds raise UnknownCompressionKind."""
        out = OutputHandle()
        with pytest.raises(UnknownCompressionKind):
            out.open_compressed(tmp_path / "x", "rar")

    def test_plain_open_resets_compression(self, tmp_path):
        """A plain open clears the compression kind."""
        out = OutputHandle()
        out.open_compressed(tmp_path / "a.gz", "gzip")
        out.open(tmp_path / "b.txt")
        assert out.compression is CompressionKind.NONE
        out.close()


class TestWriteErrors:
    """Write failures name the value's type and the file."""

    def test_write_to_closed_stream(self):
        """WriteError names the type and the standard stream."""
        buffer = io.StringIO()
        out = OutputHandle(StreamTarget.standard(buffer))
        buffer.close()
        with pytest.raises(WriteError, match="Error writing type: int to file <stdout>"):
            out.write(7)

    def test_unencodable_text(self, tmp_path):
        """Text the encoding cannot represent raises WriteError."""
        path = tmp_path / "ascii.txt"
        out = OutputHandle(path, settings=StreamSettings(encoding="ascii"))
        with pytest.raises(WriteError) as exc_info:
            out.write("café")
            out.flush()
        assert exc_info.value.filename == str(path)
        assert exc_info.value.type_name == "str"

    def test_flush_failure_propagates(self):
        """A failing flush raises FileNotWritable."""
        class FailingStream:
            def write(self, text):
                return len(text)

            def flush(self):
                raise OSError("disk full")

        out = OutputHandle(StreamTarget.standard(FailingStream()))
        with pytest.raises(FileNotWritable):
            out.flush()


def test_rebind_is_logged(tmp_path, caplog):
    """Binding a file is logged at debug level."""
    path = tmp_path / "logged.txt"
    with caplog.at_level(logging.DEBUG, logger="streamknobs"):
        with OutputHandle(path):
            pass
    assert any(str(path) in r.message for r in caplog.records)
