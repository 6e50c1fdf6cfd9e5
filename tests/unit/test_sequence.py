"""
Tests for the SequenceValidator.

Tests cover the accept path, each ordering violation kind, the order
in which checks apply, state advancement after violations, and the
counter-reset policy.
"""

from typing import List, Optional

import pytest

from idwatch.core.identifier import DecodedIdentifier
from idwatch.core.sequence import SequenceValidator
from idwatch.core.violation import ViolationKind
from idwatch.parser.decoder import decode

from conftest import NOW_MS, encode_id


def _id(ts: int, ctr: int, position: int = 0) -> DecodedIdentifier:
    """Decode an identifier built from a timestamp and node_ctr."""
    return decode(encode_id(ts, ctr), position=position)


def _raw(value: int, ts: int, ctr: int) -> DecodedIdentifier:
    """Build an identifier with arbitrary, possibly inconsistent fields."""
    return DecodedIdentifier(
        text=f"{value:012d}", value=value, timestamp=ts, node_ctr=ctr, counter=ctr,
    )


def _kinds(v: SequenceValidator, idents: List[DecodedIdentifier]) -> List[Optional[ViolationKind]]:
    out = []
    for ident in idents:
        rec = v.check(ident)
        out.append(rec.kind if rec is not None else None)
    return out


class TestAccept:
    """Test accepted sequences."""

    def test_first_identifier_accepted(self) -> None:
        v = SequenceValidator()
        assert v.check(_id(NOW_MS, 5)) is None
        assert v.last is not None

    def test_strictly_increasing_within_tick(self) -> None:
        v = SequenceValidator()
        idents = [_id(NOW_MS, c) for c in range(10)]
        assert _kinds(v, idents) == [None] * 10

    def test_counter_reset_at_timestamp_bump(self) -> None:
        """Any counter value is allowed after the timestamp advances."""
        v = SequenceValidator()
        assert _kinds(v, [_id(NOW_MS, 900), _id(NOW_MS + 256, 3)]) == [None, None]

    def test_sparse_increasing_values(self) -> None:
        v = SequenceValidator()
        idents = [_id(NOW_MS + 256 * i, (i * 7919) % 1000) for i in range(50)]
        assert _kinds(v, idents) == [None] * 50


class TestViolations:
    """Test each violation kind."""

    def test_order_regression(self) -> None:
        v = SequenceValidator()
        kinds = _kinds(v, [_id(NOW_MS, 10), _id(NOW_MS, 11), _id(NOW_MS, 10)])
        assert kinds == [None, None, ViolationKind.ORDER_REGRESSION]

    def test_duplicate(self) -> None:
        v = SequenceValidator()
        kinds = _kinds(v, [_id(NOW_MS, 10), _id(NOW_MS, 10)])
        assert kinds == [None, ViolationKind.DUPLICATE]

    def test_timestamp_regression_with_larger_value(self) -> None:
        """Inconsistent fields are caught even when the value increased."""
        v = SequenceValidator()
        kinds = _kinds(v, [_raw(10, 1000, 5), _raw(11, 500, 6)])
        assert kinds == [None, ViolationKind.TIMESTAMP_REGRESSION]

    def test_counter_not_advancing_with_larger_value(self) -> None:
        v = SequenceValidator()
        kinds = _kinds(v, [_raw(10, 1000, 5), _raw(11, 1000, 5)])
        assert kinds == [None, ViolationKind.COUNTER_NOT_ADVANCING]

    def test_order_regression_takes_precedence(self) -> None:
        """Value checks run before field checks."""
        v = SequenceValidator()
        kinds = _kinds(v, [_raw(10, 1000, 5), _raw(9, 500, 1)])
        assert kinds == [None, ViolationKind.ORDER_REGRESSION]

    def test_record_fields(self) -> None:
        v = SequenceValidator()
        v.check(_id(NOW_MS, 11, position=1))
        rec = v.check(_id(NOW_MS, 10, position=2))
        assert rec is not None
        assert rec.position == 2
        assert rec.previous == encode_id(NOW_MS, 11)
        assert rec.current == encode_id(NOW_MS, 10)
        assert "<" in rec.detail


class TestStateAdvance:
    """last is updated on accept and violation alike."""

    def test_last_updated_after_violation(self) -> None:
        v = SequenceValidator()
        v.check(_id(NOW_MS, 20))
        regressed = _id(NOW_MS, 5)
        v.check(regressed)
        assert v.last == regressed

    def test_no_cascade_after_single_regression(self) -> None:
        v = SequenceValidator()
        kinds = _kinds(v, [_id(NOW_MS, 20), _id(NOW_MS, 5), _id(NOW_MS, 6), _id(NOW_MS, 7)])
        assert kinds == [None, ViolationKind.ORDER_REGRESSION, None, None]


class TestCounterResetPolicy:
    """Test the optional bound on the counter after a timestamp bump."""

    def test_reset_within_bound(self) -> None:
        v = SequenceValidator(counter_reset_max=100)
        assert _kinds(v, [_id(NOW_MS, 500), _id(NOW_MS + 256, 100)]) == [None, None]

    def test_reset_above_bound(self) -> None:
        v = SequenceValidator(counter_reset_max=100)
        kinds = _kinds(v, [_id(NOW_MS, 500), _id(NOW_MS + 256, 101)])
        assert kinds == [None, ViolationKind.COUNTER_RESET_OUT_OF_RANGE]

    def test_bound_ignored_within_tick(self) -> None:
        v = SequenceValidator(counter_reset_max=100)
        assert _kinds(v, [_id(NOW_MS, 500), _id(NOW_MS, 501)]) == [None, None]

    def test_bound_ignored_for_first_identifier(self) -> None:
        v = SequenceValidator(counter_reset_max=100)
        assert v.check(_id(NOW_MS, 5000)) is None
