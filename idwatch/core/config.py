"""
Checker configuration.

All tunables of a run live in one frozen dataclass, validated on
construction so that a bad option fails before any input is read.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from idwatch.core.violation import ViolationKind
from idwatch.parser.decoder import DEFAULT_SCHEME, IdentifierScheme


@dataclass(frozen=True)
class CheckerConfig:
    """
    Options controlling a validation run.

    Attributes:
        max_future_skew: Seconds an identifier may lead the wall clock.
        max_past_skew: Seconds an identifier may lag the wall clock.
        halt_on_violation: Stop at the first violation of any kind.
        halt_on: Violation kinds that stop the run.
        violation_retention_limit: Records kept at each end of the log.
        violation_threshold: Violations tolerated before the run fails.
        comment_prefix: Lines starting with this are ignored ("" disables).
        clock_sample_interval: Identifiers sharing one wall-clock sample.
        stats_interval: Seconds of identifier time between periodic
            snapshots (0 disables).
        counter_reset_max: Bound on the counter after a timestamp bump.
        require_input: Fail when no identifier was decoded.
        scheme: Identifier layout.
    """

    max_future_skew: float = 1.0
    max_past_skew: float = 10.0
    halt_on_violation: bool = False
    halt_on: FrozenSet[ViolationKind] = field(default_factory=frozenset)
    violation_retention_limit: int = 100
    violation_threshold: int = 0
    comment_prefix: str = "#"
    clock_sample_interval: int = 1
    stats_interval: float = 10.0
    counter_reset_max: Optional[int] = None
    require_input: bool = False
    scheme: IdentifierScheme = DEFAULT_SCHEME

    def __post_init__(self) -> None:
        """Validate option ranges."""
        if self.max_future_skew < 0:
            raise ValueError(f"max_future_skew must be non-negative, got {self.max_future_skew}")
        if self.max_past_skew < 0:
            raise ValueError(f"max_past_skew must be non-negative, got {self.max_past_skew}")
        if self.violation_retention_limit < 0:
            raise ValueError(
                "violation_retention_limit must be non-negative, "
                f"got {self.violation_retention_limit}"
            )
        if self.violation_threshold < 0:
            raise ValueError(
                f"violation_threshold must be non-negative, got {self.violation_threshold}"
            )
        if self.clock_sample_interval < 1:
            raise ValueError(
                f"clock_sample_interval must be at least 1, got {self.clock_sample_interval}"
            )
        if self.stats_interval < 0:
            raise ValueError(f"stats_interval must be non-negative, got {self.stats_interval}")
        if self.counter_reset_max is not None:
            limit = (1 << self.scheme.counter_bits) - 1
            if not 0 <= self.counter_reset_max <= limit:
                raise ValueError(f"counter_reset_max must be in [0, {limit}]")
        object.__setattr__(self, "halt_on", frozenset(self.halt_on))

    def should_halt(self, kind: ViolationKind) -> bool:
        """True when a violation of *kind* must stop the run."""
        return self.halt_on_violation or kind in self.halt_on
