"""
Line reader for identifier streams.

Reads candidate identifiers from a line-oriented byte stream (standard
input or a file). Blank lines and comment lines are skipped; every
other line is yielded with its physical line number, line terminator
removed and nothing else touched, so that stray whitespace is reported
as malformed input rather than silently fixed.

Reading is lazy: one line is pulled from the stream at a time, and the
read blocks until the producer writes the next line or closes the pipe.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

DEFAULT_MAX_LINE_BYTES = 1024


@dataclass(frozen=True)
class InputLine:
    """
    One candidate identifier line.

    Attributes:
        lineno: 1-based physical line number.
        text: Line content without its terminator.
        truncated: The line exceeded the reader's byte limit; *text*
            holds only its first bytes.
    """

    lineno: int
    text: str
    truncated: bool = False


class StreamReader:
    """
    Iterates candidate identifier lines from a byte stream.

    Attributes:
        stream: The binary input stream.
        comment_prefix: Lines starting with this prefix are ignored.
        max_line_bytes: Longest line, terminator included, read in full.
        lines_read: Physical lines read so far.
        lines_skipped: Blank and comment lines skipped so far.
    """

    def __init__(
        self,
        stream: Optional[BinaryIO] = None,
        comment_prefix: str = "#",
        max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
    ) -> None:
        """
        Initialize reader over a binary stream.

        Args:
            stream: Binary stream to read (default: ``sys.stdin.buffer``).
            comment_prefix: Comment marker; an empty string disables comments.
            max_line_bytes: Byte limit per line; the rest of a longer line
                is discarded unread into memory.
        """
        if max_line_bytes < 2:
            raise ValueError(f"max_line_bytes must be >= 2, got {max_line_bytes}")
        self.stream: BinaryIO = stream if stream is not None else sys.stdin.buffer
        self.comment_prefix: str = comment_prefix
        self.max_line_bytes: int = max_line_bytes
        self.lines_read: int = 0
        self.lines_skipped: int = 0

    @classmethod
    def open(
        cls,
        filepath: Path,
        comment_prefix: str = "#",
        max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
    ) -> StreamReader:
        """
        Create a reader over a file.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Input file not found: {path}")
        return cls(
            path.open("rb"), comment_prefix=comment_prefix, max_line_bytes=max_line_bytes,
        )

    def __iter__(self) -> Iterator[InputLine]:
        while True:
            raw = self.stream.readline(self.max_line_bytes)
            if not raw:
                return
            self.lines_read += 1
            truncated = not raw.endswith(b"\n") and len(raw) >= self.max_line_bytes
            if truncated:
                self._discard_rest_of_line()
            text = self.decode_line(raw)
            if not truncated and self.is_ignored(text):
                self.lines_skipped += 1
                continue
            yield InputLine(lineno=self.lines_read, text=text, truncated=truncated)

    def _discard_rest_of_line(self) -> None:
        while True:
            chunk = self.stream.readline(self.max_line_bytes)
            if not chunk or chunk.endswith(b"\n"):
                return

    def close(self) -> None:
        """Close the underlying stream unless it is standard input."""
        if self.stream is not sys.stdin.buffer:
            self.stream.close()

    # ------------------------------------------------------------------ #
    # Static helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def decode_line(raw: bytes) -> str:
        """
        Strip one ``\\n`` or ``\\r\\n`` terminator and decode as UTF-8.

        Undecodable bytes become U+FFFD so the decoder reports them as
        malformed characters.
        """
        if raw.endswith(b"\n"):
            raw = raw[:-1]
            if raw.endswith(b"\r"):
                raw = raw[:-1]
        return raw.decode("utf-8", errors="replace")

    def is_ignored(self, text: str) -> bool:
        """True for blank lines and comment lines."""
        stripped = text.strip()
        if not stripped:
            return True
        return bool(self.comment_prefix) and stripped.startswith(self.comment_prefix)
