"""
Freshness checker for bounded clock skew.

The timestamp embedded in an identifier should be close to the
checker's own wall clock. With ``now`` sampled at validation time:

    t(id) > now + max_future_skew   ->  CLOCK_AHEAD
    now - t(id) > max_past_skew     ->  CLOCK_BEHIND

Both window edges are inclusive: a timestamp exactly at the edge is
accepted. The check is independent of ordering, so a monotonic but
stale stream is still flagged.
"""

from __future__ import annotations

from typing import Optional

from idwatch.core.identifier import DecodedIdentifier
from idwatch.core.violation import ViolationKind, ViolationRecord


class FreshnessChecker:
    """
    Decides whether an identifier's timestamp is acceptably fresh.

    Attributes:
        max_future_skew_ms: Tolerance for timestamps ahead of ``now``.
        max_past_skew_ms: Tolerance for timestamps behind ``now``.
    """

    __slots__ = ("max_future_skew_ms", "max_past_skew_ms")

    def __init__(self, max_future_skew: float = 1.0, max_past_skew: float = 10.0) -> None:
        """
        Initialise with the two tolerance windows.

        Args:
            max_future_skew: Seconds a timestamp may lead the wall clock.
            max_past_skew: Seconds a timestamp may lag the wall clock.
        """
        if max_future_skew < 0 or max_past_skew < 0:
            raise ValueError("skew tolerances must be non-negative")
        self.max_future_skew_ms: float = max_future_skew * 1000.0
        self.max_past_skew_ms: float = max_past_skew * 1000.0

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    @staticmethod
    def skew(current: DecodedIdentifier, now_ms: float) -> float:
        """Signed skew in milliseconds; positive means ahead of ``now``."""
        return current.timestamp - now_ms

    def check_freshness(
        self, current: DecodedIdentifier, now_ms: float,
    ) -> Optional[ViolationRecord]:
        """
        Check *current* against the wall-clock sample *now_ms*.

        Returns:
            ``None`` when within both windows, otherwise the ViolationRecord.
        """
        skew = self.skew(current, now_ms)
        if skew > self.max_future_skew_ms:
            kind = ViolationKind.CLOCK_AHEAD
            detail = f"ahead by {skew / 1000.0:.3f}s > {self.max_future_skew_ms / 1000.0:g}s"
        elif -skew > self.max_past_skew_ms:
            kind = ViolationKind.CLOCK_BEHIND
            detail = f"behind by {-skew / 1000.0:.3f}s > {self.max_past_skew_ms / 1000.0:g}s"
        else:
            return None
        return ViolationRecord(
            position=current.position,
            kind=kind,
            current=current.text,
            previous=None,
            detail=detail,
            lineno=current.lineno,
        )
