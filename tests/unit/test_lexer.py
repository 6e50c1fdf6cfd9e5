"""
Tests for the identifier lexical analyzer.

Tests cover tokenization of base-36 digit runs in both cases and the
error reporting for characters outside the alphabet.
"""

import pytest

from idwatch.parser.lexer import IdentifierLexer, LexerError


@pytest.fixture
def lexer() -> IdentifierLexer:
    """Return a fresh lexer instance."""
    return IdentifierLexer()


def _tokens(lexer: IdentifierLexer, text: str) -> list[tuple[str, str]]:
    """Helper: return list of (type, value) pairs from tokenizing text."""
    return [(tok.type, tok.value) for tok in lexer.tokenize(text)]


class TestDigits:
    """Test base-36 digit runs."""

    def test_decimal_digits(self, lexer: IdentifierLexer) -> None:
        assert _tokens(lexer, "0123456789") == [("DIGITS", "0123456789")]

    def test_lower_case_letters(self, lexer: IdentifierLexer) -> None:
        assert _tokens(lexer, "abcxyz") == [("DIGITS", "abcxyz")]

    def test_upper_case_letters(self, lexer: IdentifierLexer) -> None:
        assert _tokens(lexer, "ABCXYZ") == [("DIGITS", "ABCXYZ")]

    def test_mixed_case(self, lexer: IdentifierLexer) -> None:
        assert _tokens(lexer, "0aZ9") == [("DIGITS", "0aZ9")]

    def test_empty_input(self, lexer: IdentifierLexer) -> None:
        assert _tokens(lexer, "") == []


class TestErrors:
    """Test rejection of characters outside the alphabet."""

    def test_space_rejected(self, lexer: IdentifierLexer) -> None:
        with pytest.raises(LexerError) as info:
            _tokens(lexer, "abc def")
        assert info.value.char == " "
        assert info.value.index == 3

    def test_punctuation_rejected(self, lexer: IdentifierLexer) -> None:
        with pytest.raises(LexerError, match="'-'"):
            _tokens(lexer, "ab-c")

    def test_leading_invalid_character(self, lexer: IdentifierLexer) -> None:
        with pytest.raises(LexerError) as info:
            _tokens(lexer, "_abc")
        assert info.value.index == 0

    def test_non_ascii_digit_rejected(self, lexer: IdentifierLexer) -> None:
        """Unicode digits are not part of the alphabet."""
        with pytest.raises(LexerError):
            _tokens(lexer, "12٣")

    def test_replacement_character_rejected(self, lexer: IdentifierLexer) -> None:
        with pytest.raises(LexerError):
            _tokens(lexer, "ab�")

    def test_lexer_reusable_after_error(self, lexer: IdentifierLexer) -> None:
        with pytest.raises(LexerError):
            _tokens(lexer, "a b")
        assert _tokens(lexer, "ab") == [("DIGITS", "ab")]
