"""
Tests for the identifier stream reader.

Tests cover line terminator handling, blank and comment filtering,
line numbering, undecodable bytes, and file input.
"""

from io import BytesIO
from pathlib import Path

import pytest

from idwatch.utils.stream_reader import InputLine, StreamReader


def _read(data: bytes, comment_prefix: str = "#") -> list:
    return list(StreamReader(BytesIO(data), comment_prefix=comment_prefix))


class TestDecodeLine:
    """Test terminator stripping."""

    def test_lf(self) -> None:
        assert StreamReader.decode_line(b"abc\n") == "abc"

    def test_crlf(self) -> None:
        assert StreamReader.decode_line(b"abc\r\n") == "abc"

    def test_no_terminator(self) -> None:
        assert StreamReader.decode_line(b"abc") == "abc"

    def test_inner_whitespace_preserved(self) -> None:
        assert StreamReader.decode_line(b" abc \n") == " abc "

    def test_invalid_utf8_replaced(self) -> None:
        assert StreamReader.decode_line(b"ab\xffc\n") == "ab�c"


class TestIteration:
    """Test line filtering and numbering."""

    def test_yields_lines_with_numbers(self) -> None:
        lines = _read(b"aaa\nbbb\n")
        assert lines == [InputLine(1, "aaa"), InputLine(2, "bbb")]

    def test_last_line_without_newline(self) -> None:
        assert _read(b"aaa\nbbb") == [InputLine(1, "aaa"), InputLine(2, "bbb")]

    def test_blank_lines_skipped(self) -> None:
        lines = _read(b"aaa\n\n   \nbbb\n")
        assert [line.lineno for line in lines] == [1, 4]

    def test_comment_lines_skipped(self) -> None:
        lines = _read(b"# header\naaa\n  # indented\n")
        assert lines == [InputLine(2, "aaa")]

    def test_custom_comment_prefix(self) -> None:
        lines = _read(b"// note\n# kept\n", comment_prefix="//")
        assert lines == [InputLine(2, "# kept")]

    def test_empty_prefix_disables_comments(self) -> None:
        lines = _read(b"# kept\n", comment_prefix="")
        assert lines == [InputLine(1, "# kept")]

    def test_counters(self) -> None:
        reader = StreamReader(BytesIO(b"a\n\n# c\nb\n"))
        list(reader)
        assert reader.lines_read == 4
        assert reader.lines_skipped == 2

    def test_empty_stream(self) -> None:
        assert _read(b"") == []


class TestLineLimit:
    """Test the per-line byte limit."""

    def test_long_line_truncated_and_rest_discarded(self) -> None:
        reader = StreamReader(BytesIO(b"0" * 50 + b"\nabc\n"), max_line_bytes=16)
        assert list(reader) == [
            InputLine(1, "0" * 16, truncated=True),
            InputLine(2, "abc"),
        ]

    def test_line_at_limit_not_truncated(self) -> None:
        reader = StreamReader(BytesIO(b"a" * 15 + b"\n"), max_line_bytes=16)
        assert list(reader) == [InputLine(1, "a" * 15)]

    def test_unterminated_stream_yields_one_truncated_line(self) -> None:
        reader = StreamReader(BytesIO(b"0" * 100_000), max_line_bytes=16)
        lines = list(reader)
        assert len(lines) == 1
        assert lines[0].truncated
        assert reader.lines_read == 1

    def test_truncated_comment_still_yielded(self) -> None:
        reader = StreamReader(BytesIO(b"#" * 40 + b"\n"), max_line_bytes=16)
        assert [line.truncated for line in reader] == [True]

    def test_invalid_limit(self) -> None:
        with pytest.raises(ValueError):
            StreamReader(BytesIO(b""), max_line_bytes=1)


class TestFileInput:
    """Test reading from files."""

    def test_open_file(self, tmp_path: Path) -> None:
        path = tmp_path / "ids.txt"
        path.write_bytes(b"aaa\nbbb\n")
        reader = StreamReader.open(path)
        try:
            assert [line.text for line in reader] == ["aaa", "bbb"]
        finally:
            reader.close()

    def test_crlf_fixture(self, streams_dir: Path) -> None:
        reader = StreamReader.open(streams_dir / "crlf.txt")
        try:
            assert [line.text for line in reader] == ["00000000000a", "00000000000b"]
        finally:
            reader.close()

    def test_comments_only_fixture(self, streams_dir: Path) -> None:
        reader = StreamReader.open(streams_dir / "comments_only.txt")
        try:
            assert list(reader) == []
        finally:
            reader.close()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            StreamReader.open(tmp_path / "missing.txt")
