"""
Sequence validator for strict monotonic ordering.

Holds the previously seen identifier and compares each new one
against it. Checks run in a fixed order and the first failing check
determines the violation kind:

    value <  last.value                    -> ORDER_REGRESSION
    value == last.value                    -> DUPLICATE
    timestamp < last.timestamp             -> TIMESTAMP_REGRESSION
    same tick and node_ctr <= last's       -> COUNTER_NOT_ADVANCING
    tick bump and counter > reset bound    -> COUNTER_RESET_OUT_OF_RANGE

``last`` moves forward on accept and on violation alike, so one bad
identifier produces one violation instead of a cascade.
"""

from __future__ import annotations

from typing import Optional

from idwatch.core.identifier import DecodedIdentifier
from idwatch.core.violation import ViolationKind, ViolationRecord


class SequenceValidator:
    """
    Stateful checker for the ordering invariants of the stream.

    Attributes:
        last: The previously checked identifier (``None`` before the first).
        counter_reset_max: Upper bound for the counter right after a
            timestamp bump, or ``None`` to allow any value.
    """

    __slots__ = ("last", "counter_reset_max")

    def __init__(self, counter_reset_max: Optional[int] = None) -> None:
        """
        Initialise with an empty history.

        Args:
            counter_reset_max: Optional counter-reset bound.
        """
        self.last: Optional[DecodedIdentifier] = None
        self.counter_reset_max: Optional[int] = counter_reset_max

    def check(self, current: DecodedIdentifier) -> Optional[ViolationRecord]:
        """
        Check *current* against the previous identifier.

        Returns:
            ``None`` when accepted, otherwise the ViolationRecord.
        """
        last = self.last
        self.last = current
        if last is None:
            return None

        kind, detail = self._compare(last, current)
        if kind is None:
            return None
        return ViolationRecord(
            position=current.position,
            kind=kind,
            current=current.text,
            previous=last.text,
            detail=detail,
            lineno=current.lineno,
        )

    def _compare(
        self, last: DecodedIdentifier, current: DecodedIdentifier,
    ) -> tuple[Optional[ViolationKind], str]:
        """Return ``(kind, detail)`` for the first failing check."""
        if current.precedes(last):
            return (
                ViolationKind.ORDER_REGRESSION,
                f"value {current.value} < previous {last.value}",
            )
        if current.value == last.value:
            return ViolationKind.DUPLICATE, f"value {current.value} repeated"
        if current.timestamp < last.timestamp:
            return (
                ViolationKind.TIMESTAMP_REGRESSION,
                f"timestamp {current.timestamp} < previous {last.timestamp}",
            )
        if current.same_tick(last):
            if current.node_ctr <= last.node_ctr:
                return (
                    ViolationKind.COUNTER_NOT_ADVANCING,
                    f"node_ctr {current.node_ctr} <= previous {last.node_ctr} "
                    f"at timestamp {current.timestamp}",
                )
            return None, ""
        if self.counter_reset_max is not None and current.counter > self.counter_reset_max:
            return (
                ViolationKind.COUNTER_RESET_OUT_OF_RANGE,
                f"counter {current.counter} > reset bound {self.counter_reset_max}",
            )
        return None, ""
