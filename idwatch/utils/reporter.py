"""
Reporting for validation runs.

Streams one line per violation to the error channel as violations
occur, renders the statistics table for periodic and final snapshots,
and maps a finished run onto a process exit status.
"""

from __future__ import annotations

import sys
from typing import List, Optional, TextIO

from idwatch.core.aggregator import RunSnapshot
from idwatch.core.monitor import MonitorResult
from idwatch.core.violation import ViolationRecord

EXIT_OK = 0
EXIT_VIOLATIONS = 1
EXIT_FATAL = 2

_ROW = "{:<48} {:>12} {:>12}"


def _fmt(value: Optional[float], spec: str = ".3f") -> str:
    if value is None:
        return "NA"
    return format(value, spec)


class Reporter:
    """
    Renders violations and run summaries.

    Attributes:
        out: Stream for summaries and periodic snapshots.
        err: Stream for streaming violation lines.
        max_future_skew: Seconds, used for the expected skew range.
        max_past_skew: Seconds, used for the expected skew range.
        tick_ms: Timestamp resolution in ms (expected counter interval).
        max_counter: Size of the per-tick counter space.
        threshold: Violations tolerated before the run fails.
    """

    def __init__(
        self,
        out: TextIO = sys.stdout,
        err: TextIO = sys.stderr,
        max_future_skew: float = 1.0,
        max_past_skew: float = 10.0,
        tick_ms: int = 256,
        max_counter: int = 1 << 24,
        threshold: int = 0,
    ) -> None:
        self.out: TextIO = out
        self.err: TextIO = err
        self.max_future_skew: float = max_future_skew
        self.max_past_skew: float = max_past_skew
        self.tick_ms: int = tick_ms
        self.max_counter: int = max_counter
        self.threshold: int = threshold

    # ------------------------------------------------------------------ #
    # Streaming output
    # ------------------------------------------------------------------ #

    def violation(self, record: ViolationRecord) -> None:
        """Write one violation line to the error stream."""
        self.err.write(f"VIOLATION {record.describe()}\n")
        self.err.flush()

    def periodic(self, snapshot: RunSnapshot) -> None:
        """Write an intermediate statistics table to the output stream."""
        self.out.write("\n" + self.render_summary(snapshot) + "\n")
        self.out.flush()

    def summary(self, result: MonitorResult) -> None:
        """Write the final summary and verdict to the output stream."""
        self.out.write("\n" + self.render_summary(result.snapshot) + "\n")
        self.out.write("\n" + result.verdict + "\n")
        self.out.flush()

    # ------------------------------------------------------------------ #
    # Rendering
    # ------------------------------------------------------------------ #

    def render_summary(self, snapshot: RunSnapshot) -> str:
        """
        Render the statistics table for *snapshot*.

        The rendering depends only on the snapshot and on this reporter's
        fixed settings, so rendering the same snapshot twice yields the
        same text.
        """
        elapsed = snapshot.elapsed_ms
        per_tick: Optional[float] = None
        if elapsed >= self.tick_ms:
            per_tick = snapshot.identifiers_decoded / (elapsed / self.tick_ms)

        lag: Optional[float] = None
        if snapshot.last_timestamp is not None:
            lag = (snapshot.taken_at_ms - snapshot.last_timestamp) / 1000.0

        expected_violations = f"<={self.threshold}" if self.threshold else "0"

        lines: List[str] = [_ROW.format("STAT", "EXPECTED", "ACTUAL")]
        rows = [
            ("Seconds since the checker started (sec)", "NA", f"{snapshot.run_ms / 1000.0:.1f}"),
            ("Seconds from first input ID to last (sec)", "NA", f"{elapsed / 1000.0:.1f}"),
            ("Number of input lines processed", "NA", str(snapshot.lines_processed)),
            ("Number of valid IDs decoded", "NA", str(snapshot.identifiers_decoded)),
            ("Number of IDs accepted", "NA", str(snapshot.identifiers_accepted)),
            ("Number of violations", expected_violations, str(snapshot.total_violations)),
            (
                f"Mean number of IDs per {self.tick_ms} millisecond",
                f"<~{self.max_counter // 2}",
                _fmt(per_tick, ".1f"),
            ),
            (
                "Current time less timestamp of last ID (sec)",
                f"{-self.max_future_skew:.1f} - {self.max_past_skew:.1f}",
                _fmt(lag),
            ),
            ("Minimum skew of ID timestamp (msec)", "NA", _fmt(snapshot.skew.minimum, ".0f")),
            ("Maximum skew of ID timestamp (msec)", "NA", _fmt(snapshot.skew.maximum, ".0f")),
            ("Mean skew of ID timestamp (msec)", "NA", _fmt(snapshot.skew.mean, ".1f")),
            (
                "Mean interval of counter updates (msec)",
                f"~{self.tick_ms}",
                _fmt(snapshot.mean_counter_update_interval, ".3f"),
            ),
        ]
        lines.extend(_ROW.format(*row) for row in rows)

        if snapshot.violations_by_kind:
            lines.append("")
            lines.append("Violations by kind:")
            for kind, count in snapshot.violations_by_kind:
                lines.append(f"  {kind.value:<30} {count:>12}")
            lines.append(
                f"  {'(records retained / evicted)':<30} "
                f"{len(snapshot.retained):>5} / {snapshot.evicted}"
            )

        return "\n".join(lines)

    # ------------------------------------------------------------------ #
    # Exit status
    # ------------------------------------------------------------------ #

    @staticmethod
    def exit_status(result: MonitorResult) -> int:
        """Map a finished run onto a process exit status."""
        if result.error is not None:
            return EXIT_FATAL
        if result.passed:
            return EXIT_OK
        return EXIT_VIOLATIONS
