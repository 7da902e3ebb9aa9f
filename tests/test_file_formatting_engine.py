"""Tests for the file formatting engine and file writer."""

import pytest
from eon.engines import FileFormattingEngine
from eon.formatter import FormatOptions, Formatter
from eon.io import FileWriter
from eon.types import ErrorKind, LexError


def write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(text.encode("utf-8"))
    return path


class TestFileFormattingEngine:
    """Tests for FileFormattingEngine class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.engine = FileFormattingEngine()

    def test_discover_walks_directories(self, temp_dir):
        """Test recursive discovery with the extension filter."""
        write(temp_dir / "a.eon", "a: 1\n")
        write(temp_dir / "nested" / "b.eon", "b: 2\n")
        write(temp_dir / "nested" / "notes.txt", "not eon")

        files, missing = self.engine.discover([str(temp_dir)])

        assert sorted(files) == sorted([str(temp_dir / "a.eon"), str(temp_dir / "nested" / "b.eon")])
        assert missing == []

    def test_discover_honours_ignore_files(self, temp_dir):
        """Test .gitignore, .eonignore and the .git directory."""
        write(temp_dir / ".gitignore", "build/\n*.gen.eon\n")
        write(temp_dir / "sub" / ".eonignore", "local.eon\n")
        write(temp_dir / "keep.eon", "")
        write(temp_dir / "out.gen.eon", "")
        write(temp_dir / "build" / "x.eon", "")
        write(temp_dir / ".git" / "config.eon", "")
        write(temp_dir / "sub" / "local.eon", "")
        write(temp_dir / "sub" / "shared.eon", "")

        files, _ = self.engine.discover([str(temp_dir)])

        assert sorted(files) == sorted([str(temp_dir / "keep.eon"), str(temp_dir / "sub" / "shared.eon")])

    def test_explicit_files_are_always_used(self, temp_dir):
        """Test that named files bypass the filters."""
        path = write(temp_dir / "config.txt", "a: 1\n")
        write(temp_dir / ".gitignore", "config.txt\n")

        files, _ = self.engine.discover([str(path), str(path)])
        assert files == [str(path)]

    def test_missing_paths(self, temp_dir):
        """Test paths that do not exist."""
        result = self.engine.run([str(temp_dir / "nope")])

        assert result.missing_paths == [str(temp_dir / "nope")]
        assert result.exit_code == 1

    def test_format_rewrites_files(self, temp_dir, messy_document, formatted_document):
        """Test write mode."""
        messy = write(temp_dir / "messy.eon", messy_document)
        clean = write(temp_dir / "clean.eon", formatted_document)

        result = self.engine.run([str(temp_dir)])

        assert result.exit_code == 0
        assert [r.path for r in result.changed] == [str(messy)]
        assert messy.read_text(encoding="utf-8") == formatted_document
        assert clean.read_text(encoding="utf-8") == formatted_document

    def test_check_mode_does_not_write(self, temp_dir, messy_document):
        """Test check mode."""
        messy = write(temp_dir / "messy.eon", messy_document)

        result = self.engine.run([str(temp_dir)], check_only=True)

        assert result.exit_code == 1
        assert len(result.changed) == 1
        assert messy.read_text(encoding="utf-8") == messy_document

    def test_check_mode_passes_when_formatted(self, temp_dir, formatted_document):
        """Test check mode on canonical files."""
        write(temp_dir / "clean.eon", formatted_document)

        assert self.engine.run([str(temp_dir)], check_only=True).exit_code == 0

    def test_errors_do_not_stop_other_files(self, temp_dir):
        """Test that a broken file is reported and the others are formatted."""
        write(temp_dir / "bad.eon", "a: [1, 2")
        good = write(temp_dir / "good.eon", "a:   1")

        result = FileFormattingEngine(max_workers=2).run([str(temp_dir)])

        assert result.exit_code == 1
        assert len(result.failed) == 1
        assert "error[UnexpectedEndOfInput]" in result.failed[0].error
        assert "bad.eon" in result.failed[0].error
        assert good.read_text(encoding="utf-8") == "a: 1\n"

    def test_invalid_utf8_file(self, temp_dir):
        """Test that undecodable files fail."""
        path = temp_dir / "binary.eon"
        path.write_bytes(b"a: \"\xff\"")

        result = self.engine.run([str(path)])

        assert result.exit_code == 1
        assert "InvalidUtf8" in result.failed[0].error

    def test_custom_extension_and_options(self, temp_dir):
        """Test the extension setting and a custom formatter."""
        path = write(temp_dir / "conf.cfg", "a: {\nb: 1\n}")
        engine = FileFormattingEngine(formatter=Formatter(FormatOptions(indentation="    ")),
                                      extension=".cfg")

        engine.run([str(temp_dir)])
        assert path.read_text(encoding="utf-8") == "a: {\n    b: 1\n}\n"


class TestFileWriter:
    """Tests for FileWriter class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.file_writer = FileWriter()

    def test_write_and_read(self, temp_dir):
        """Test writing a document and reading it back."""
        path = temp_dir / "out" / "doc.eon"
        info = self.file_writer.write_document(path, "a: \"é\"\n")

        assert info["size"] == len("a: \"é\"\n".encode("utf-8"))
        assert self.file_writer.read_document(path) == "a: \"é\"\n"
        assert [p.name for p in path.parent.iterdir()] == ["doc.eon"]

    def test_line_endings_are_preserved(self, temp_dir):
        """Test that reading does not translate newlines."""
        path = temp_dir / "crlf.eon"
        path.write_bytes(b"a: 1\r\n")

        assert self.file_writer.read_document(path) == "a: 1\r\n"

    def test_read_invalid_utf8(self, temp_dir):
        """Test reading undecodable bytes."""
        path = temp_dir / "bad.eon"
        path.write_bytes(b"\xfe")

        with pytest.raises(LexError) as exc_info:
            self.file_writer.read_document(path)
        assert exc_info.value.kind == ErrorKind.INVALID_UTF8

    def test_read_missing_file(self, temp_dir):
        """Test reading a file that does not exist."""
        with pytest.raises(OSError):
            self.file_writer.read_document(temp_dir / "missing.eon")
