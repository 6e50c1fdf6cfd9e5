"""
Aggregation of run statistics and violation records.

Everything here is constant-memory with respect to stream length:
counters and running min/max/sum values are updated in place, and the
violation log keeps only the first K and the most recent K records
while still counting every violation exactly.
"""

from __future__ import annotations

from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterable, List, Optional, Tuple

from idwatch.core.identifier import DecodedIdentifier
from idwatch.core.violation import ViolationKind, ViolationRecord


@dataclass
class RunningStats:
    """
    Streaming min/max/sum/count over a sequence of numbers.

    Attributes:
        count: Number of samples.
        total: Sum of samples.
        minimum: Smallest sample (``None`` before the first).
        maximum: Largest sample (``None`` before the first).
    """

    count: int = 0
    total: float = 0.0
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def add(self, x: float) -> None:
        """Fold one sample into the statistics."""
        self.count += 1
        self.total += x
        if self.minimum is None or x < self.minimum:
            self.minimum = x
        if self.maximum is None or x > self.maximum:
            self.maximum = x

    @property
    def mean(self) -> Optional[float]:
        """Arithmetic mean, or ``None`` when empty."""
        if self.count == 0:
            return None
        return self.total / self.count

    def copy(self) -> RunningStats:
        return RunningStats(self.count, self.total, self.minimum, self.maximum)


@dataclass(frozen=True)
class RunSnapshot:
    """
    Immutable view of the aggregator state at one point in time.

    Attributes:
        taken_at_ms: Wall-clock time of the snapshot.
        started_at_ms: Wall-clock time the run started.
        lines_processed: Non-ignored input lines seen.
        identifiers_decoded: Lines that decoded successfully.
        identifiers_accepted: Lines with no violation at all.
        total_violations: Exact number of violation records created.
        violations_by_kind: ``(kind, count)`` pairs, in taxonomy order.
        first_timestamp: Timestamp of the first decoded identifier.
        last_timestamp: Timestamp of the last decoded identifier.
        skew: Running statistics of per-identifier skew in ms.
        counter_updates: Number of counter updates observed.
        counter_update_interval_sum: Sum of ms between counter updates.
        retained: Retained violation records (first K then last K).
        evicted: Number of records dropped by bounded retention.
    """

    taken_at_ms: float
    started_at_ms: float
    lines_processed: int
    identifiers_decoded: int
    identifiers_accepted: int
    total_violations: int
    violations_by_kind: Tuple[Tuple[ViolationKind, int], ...]
    first_timestamp: Optional[int]
    last_timestamp: Optional[int]
    skew: RunningStats
    counter_updates: int
    counter_update_interval_sum: int
    retained: Tuple[ViolationRecord, ...]
    evicted: int

    @property
    def elapsed_ms(self) -> int:
        """Milliseconds from the first to the last identifier timestamp."""
        if self.first_timestamp is None or self.last_timestamp is None:
            return 0
        return self.last_timestamp - self.first_timestamp

    @property
    def run_ms(self) -> float:
        """Wall-clock milliseconds from the start of the run to the snapshot."""
        return max(0.0, self.taken_at_ms - self.started_at_ms)

    @property
    def mean_counter_update_interval(self) -> Optional[float]:
        """Mean ms between counter updates, or ``None`` if none seen."""
        if self.counter_updates == 0:
            return None
        return self.counter_update_interval_sum / self.counter_updates

    def count_of(self, kind: ViolationKind) -> int:
        """Number of violations of *kind*."""
        return dict(self.violations_by_kind).get(kind, 0)


class Aggregator:
    """
    Accumulates counts, skew statistics and violation records.

    Attributes:
        retention_limit: K, the number of records kept at each end.
    """

    def __init__(self, retention_limit: int = 100, started_at_ms: float = 0.0) -> None:
        """
        Initialise empty statistics.

        Args:
            retention_limit: Records kept from the start and from the end.
            started_at_ms: Wall-clock start time of the run.
        """
        if retention_limit < 0:
            raise ValueError(f"retention_limit must be non-negative, got {retention_limit}")
        self.retention_limit: int = retention_limit
        self.started_at_ms: float = started_at_ms

        self.lines_processed: int = 0
        self.identifiers_decoded: int = 0
        self.identifiers_accepted: int = 0
        self.total_violations: int = 0
        self.by_kind: Counter = Counter()
        self.first_timestamp: Optional[int] = None
        self.last_timestamp: Optional[int] = None
        self.skew: RunningStats = RunningStats()

        self.counter_updates: int = 0
        self.counter_update_interval_sum: int = 0
        self._last_counter_update_ts: Optional[int] = None
        self._prev_node_ctr: Optional[int] = None

        self._head: List[ViolationRecord] = []
        self._tail: Deque[ViolationRecord] = deque(maxlen=retention_limit)

    def record(
        self,
        identifier: Optional[DecodedIdentifier],
        outcomes: Iterable[Optional[ViolationRecord]],
        now_ms: float,
    ) -> List[ViolationRecord]:
        """
        Fold the result of checking one input line into the statistics.

        Args:
            identifier: The decoded identifier, or ``None`` if decoding failed.
            outcomes: Check results; ``None`` entries mean accept.
            now_ms: Wall-clock sample used for the checks.

        Returns:
            The violation records among *outcomes*.
        """
        self.lines_processed += 1
        violations = [o for o in outcomes if o is not None]

        for v in violations:
            self._retain(v)

        if not violations:
            self.identifiers_accepted += 1

        if identifier is not None:
            self.identifiers_decoded += 1
            if self.first_timestamp is None:
                self.first_timestamp = identifier.timestamp
            self.last_timestamp = identifier.timestamp
            self.skew.add(identifier.timestamp - now_ms)
            if not any(v.kind.is_sequence for v in violations):
                self._track_counter(identifier)

        return violations

    def retained(self) -> List[ViolationRecord]:
        """Retained violation records, oldest first."""
        return self._head + list(self._tail)

    @property
    def evicted(self) -> int:
        """Number of records no longer retained."""
        return self.total_violations - len(self._head) - len(self._tail)

    def snapshot(self, now_ms: float) -> RunSnapshot:
        """Return an immutable copy of the current state."""
        return RunSnapshot(
            taken_at_ms=now_ms,
            started_at_ms=self.started_at_ms,
            lines_processed=self.lines_processed,
            identifiers_decoded=self.identifiers_decoded,
            identifiers_accepted=self.identifiers_accepted,
            total_violations=self.total_violations,
            violations_by_kind=tuple(
                (kind, self.by_kind[kind]) for kind in ViolationKind if self.by_kind[kind]
            ),
            first_timestamp=self.first_timestamp,
            last_timestamp=self.last_timestamp,
            skew=self.skew.copy(),
            counter_updates=self.counter_updates,
            counter_update_interval_sum=self.counter_update_interval_sum,
            retained=tuple(self.retained()),
            evicted=self.evicted,
        )

    def statistics(self) -> Dict[str, object]:
        """Flat dictionary of the headline counters."""
        return {
            "lines_processed": self.lines_processed,
            "identifiers_decoded": self.identifiers_decoded,
            "identifiers_accepted": self.identifiers_accepted,
            "total_violations": self.total_violations,
            "violations_retained": len(self._head) + len(self._tail),
        }

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _retain(self, record: ViolationRecord) -> None:
        self.total_violations += 1
        self.by_kind[record.kind] += 1
        if len(self._head) < self.retention_limit:
            self._head.append(record)
        elif self.retention_limit > 0:
            self._tail.append(record)

    def _track_counter(self, identifier: DecodedIdentifier) -> None:
        # A counter update is anything other than a +1 step: a reset at a
        # timestamp bump or a jump within a tick.
        prev = self._prev_node_ctr
        self._prev_node_ctr = identifier.node_ctr
        if prev is not None and identifier.node_ctr == prev + 1:
            return
        if self._last_counter_update_ts is not None:
            self.counter_updates += 1
            self.counter_update_interval_sum += (
                identifier.timestamp - self._last_counter_update_ts
            )
        self._last_counter_update_ts = identifier.timestamp
