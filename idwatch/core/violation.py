"""
Violation taxonomy and records.

Every decision the checker makes about an input line is either the
normal accept path or one or more immutable ViolationRecord objects,
each tagged with a ViolationKind.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ViolationKind(Enum):
    """
    Kinds of detected deviations from the identifier scheme.

    MALFORMED_INPUT:            Line could not be decoded.
    ORDER_REGRESSION:           Value moved backward.
    DUPLICATE:                  Value equal to the previous one.
    TIMESTAMP_REGRESSION:       Timestamp moved backward although the value grew.
    COUNTER_NOT_ADVANCING:      Same timestamp, counter did not increase.
    COUNTER_RESET_OUT_OF_RANGE: Counter after a timestamp bump exceeds the reset bound.
    CLOCK_AHEAD:                Timestamp too far in the future.
    CLOCK_BEHIND:               Timestamp too far in the past.
    """

    MALFORMED_INPUT = "malformed_input"
    ORDER_REGRESSION = "order_regression"
    DUPLICATE = "duplicate"
    TIMESTAMP_REGRESSION = "timestamp_regression"
    COUNTER_NOT_ADVANCING = "counter_not_advancing"
    COUNTER_RESET_OUT_OF_RANGE = "counter_reset_out_of_range"
    CLOCK_AHEAD = "clock_ahead"
    CLOCK_BEHIND = "clock_behind"

    @property
    def is_sequence(self) -> bool:
        """True for kinds raised by the sequence validator."""
        return self in _SEQUENCE_KINDS

    @classmethod
    def from_name(cls, name: str) -> ViolationKind:
        """
        Look up a kind by its value or member name, case-insensitively.

        Accepts ``duplicate``, ``DUPLICATE`` and ``order-regression``
        style spellings.

        Raises:
            ValueError: If no kind matches.
        """
        key = name.strip().lower().replace("-", "_")
        for kind in cls:
            if kind.value == key:
                return kind
        raise ValueError(
            f"Unknown violation kind '{name}'; expected one of "
            f"{sorted(k.value for k in cls)}"
        )


_SEQUENCE_KINDS = frozenset({
    ViolationKind.ORDER_REGRESSION,
    ViolationKind.DUPLICATE,
    ViolationKind.TIMESTAMP_REGRESSION,
    ViolationKind.COUNTER_NOT_ADVANCING,
    ViolationKind.COUNTER_RESET_OUT_OF_RANGE,
})


@dataclass(frozen=True)
class ViolationRecord:
    """
    Immutable record of one detected violation.

    Attributes:
        position: Sequence position of the offending line.
        kind: The violation kind.
        current: Text of the offending identifier (or raw line).
        previous: Text of the previous identifier, if any.
        detail: Observed vs expected relationship.
        lineno: Physical input line number.
    """

    position: int
    kind: ViolationKind
    current: str
    previous: Optional[str] = None
    detail: str = ""
    lineno: int = 0

    def describe(self) -> str:
        """Return a single-line description of the violation."""
        prev = self.previous if self.previous is not None else "-"
        text = (
            f"#{self.position} line {self.lineno}: {self.kind.value}: "
            f"previous={prev} current={self.current!r}"
        )
        if self.detail:
            text += f" ({self.detail})"
        return text
