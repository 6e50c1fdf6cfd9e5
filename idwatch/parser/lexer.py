"""
Lexical analyzer for encoded identifiers.

Tokenizes an encoded identifier into runs of base-36 digits. Any
character outside ``[0-9A-Za-z]`` (including whitespace) is reported
with its index so that malformed lines can be diagnosed precisely.
"""

from __future__ import annotations

import sly


class LexerError(Exception):
    """Exception raised for characters outside the identifier alphabet."""

    def __init__(self, message: str, char: str, index: int) -> None:
        super().__init__(message)
        self.char = char
        self.index = index


class IdentifierLexer(sly.Lexer):
    """
    Lexical analyzer for base-36 identifiers.

    Token Types:
        DIGITS - A run of case-insensitive base-36 digits
    """

    tokens = {DIGITS}

    DIGITS = r"[0-9A-Za-z]+"

    def error(self, t):
        """Handle characters outside the alphabet."""
        raise LexerError(
            f"Invalid character {t.value[0]!r} at index {self.index}",
            char=t.value[0],
            index=self.index,
        )
