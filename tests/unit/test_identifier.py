"""
Tests for the DecodedIdentifier value object.
"""

from dataclasses import FrozenInstanceError

import pytest

from idwatch.core.identifier import DecodedIdentifier


def _ident(value: int, timestamp: int = 0, node_ctr: int = 0, **kw) -> DecodedIdentifier:
    return DecodedIdentifier(
        text=f"{value:012d}", value=value, timestamp=timestamp,
        node_ctr=node_ctr, counter=node_ctr, **kw,
    )


class TestDecodedIdentifier:
    """Test construction, immutability and comparisons."""

    def test_frozen(self) -> None:
        ident = _ident(1)
        with pytest.raises(FrozenInstanceError):
            ident.value = 2  # type: ignore[misc]

    def test_negative_value_rejected(self) -> None:
        with pytest.raises(ValueError):
            _ident(-1)

    def test_negative_field_rejected(self) -> None:
        with pytest.raises(ValueError):
            _ident(1, timestamp=-5)

    def test_equality_ignores_position(self) -> None:
        assert _ident(5, position=1, lineno=1) == _ident(5, position=9, lineno=12)

    def test_precedes(self) -> None:
        assert _ident(1).precedes(_ident(2))
        assert not _ident(2).precedes(_ident(2))

    def test_same_tick(self) -> None:
        assert _ident(1, timestamp=256).same_tick(_ident(2, timestamp=256))
        assert not _ident(1, timestamp=256).same_tick(_ident(2, timestamp=512))

    def test_str_is_text(self) -> None:
        assert str(_ident(7)) == "000000000007"
