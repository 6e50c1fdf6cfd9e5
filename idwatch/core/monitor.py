"""
Main monitor orchestration for identifier stream validation.

Runs the single-threaded pipeline

    line -> decode -> sequence check -> freshness check -> aggregate

one line at a time. The only blocking point is pulling the next line
from the input iterator. The run ends on end of input, on an interrupt,
on an input I/O failure, or on a violation configured to halt; in every
case a final result with the statistics gathered so far is produced.

Clock policy: the wall clock is sampled once every
``clock_sample_interval`` decoded identifiers (default: every
identifier). Identifiers in a batch share one sample, which loosens
freshness resolution by the time the batch takes to arrive.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional

from idwatch.core.aggregator import Aggregator, RunSnapshot
from idwatch.core.clock_drift import FreshnessChecker
from idwatch.core.config import CheckerConfig
from idwatch.core.sequence import SequenceValidator
from idwatch.core.violation import ViolationKind, ViolationRecord
from idwatch.parser.decoder import DecodeError, MalformedIdentifier, decode
from idwatch.utils.logger import CheckerLogger, LogLevel
from idwatch.utils.stream_reader import InputLine

if TYPE_CHECKING:
    from idwatch.utils.reporter import Reporter


@dataclass
class MonitorResult:
    """
    Result of validating a stream.

    Attributes:
        passed: Whether the stream conforms (within the threshold).
        verdict: Human-readable verdict string.
        snapshot: Final statistics.
        halted_on: Kind of the violation that stopped the run, if any.
        interrupted: Whether the run was cancelled by an interrupt.
        error: Description of a fatal input error, if any.
    """

    passed: bool
    verdict: str
    snapshot: RunSnapshot
    halted_on: Optional[ViolationKind] = None
    interrupted: bool = False
    error: Optional[str] = None


class StreamMonitor:
    """
    Validates a stream of encoded identifiers.

    Attributes:
        config: Run configuration.
        logger: Logger for progress and debug output.
        reporter: Optional reporter receiving violations as they occur
            and periodic snapshots.
        validator: The sequence validator.
        freshness: The freshness checker.
        aggregator: The statistics aggregator.
    """

    def __init__(
        self,
        config: Optional[CheckerConfig] = None,
        logger: Optional[CheckerLogger] = None,
        reporter: Optional[Reporter] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the monitor.

        Args:
            config: Run configuration (default: CheckerConfig()).
            logger: Optional logger for debug output.
            reporter: Optional reporter for streaming output.
            clock: Wall-clock source returning seconds since the epoch.
        """
        self.config: CheckerConfig = config or CheckerConfig()
        self.logger: CheckerLogger = logger or CheckerLogger(LogLevel.SILENT)
        self.reporter: Optional[Reporter] = reporter
        self._clock: Callable[[], float] = clock

        self.validator = SequenceValidator(counter_reset_max=self.config.counter_reset_max)
        self.freshness = FreshnessChecker(
            max_future_skew=self.config.max_future_skew,
            max_past_skew=self.config.max_past_skew,
        )
        self.aggregator = Aggregator(
            retention_limit=self.config.violation_retention_limit,
            started_at_ms=self._now_ms(),
        )

        self.halted_on: Optional[ViolationKind] = None
        self._position: int = 0
        self._clock_sample: Optional[float] = None
        self._samples_left: int = 0
        self._last_stats_ts: Optional[int] = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def run(self, lines: Iterable[InputLine]) -> MonitorResult:
        """
        Validate every line of *lines* and return the final result.

        Args:
            lines: Candidate identifier lines, in input order.

        Returns:
            MonitorResult with verdict and statistics.
        """
        self.logger.configuration(self.describe_config())
        interrupted = False
        error: Optional[str] = None

        try:
            for line in lines:
                self.process(line.text, line.lineno, truncated=line.truncated)
                if self.halted_on is not None:
                    self.logger.warning(f"Halting on {self.halted_on.value} violation")
                    break
        except KeyboardInterrupt:
            interrupted = True
            self.logger.warning("Interrupted; reporting statistics gathered so far")
        except OSError as exc:
            error = f"input stream failed: {exc}"
            self.logger.warning(f"Fatal: {error}")

        return self.finalize(interrupted=interrupted, error=error)

    def process(
        self, text: str, lineno: int = 0, truncated: bool = False,
    ) -> List[ViolationRecord]:
        """
        Validate a single input line.

        Args:
            text: The line without its terminator.
            lineno: Physical line number.
            truncated: Only the start of an over-long line was read.

        Returns:
            Violations raised for this line (empty when accepted).
        """
        self._position += 1
        position = self._position
        previous = self.validator.last

        try:
            if truncated:
                raise MalformedIdentifier(
                    f"line too long, truncated after {len(text)} characters",
                    text=text,
                    lineno=lineno,
                )
            ident = decode(text, lineno=lineno, position=position, scheme=self.config.scheme)
        except DecodeError as exc:
            record = ViolationRecord(
                position=position,
                kind=ViolationKind.MALFORMED_INPUT,
                current=text,
                previous=previous.text if previous is not None else None,
                detail=f"{exc.kind}: {exc}",
                lineno=lineno,
            )
            # Decode failures take no clock sample and carry no skew
            violations = self.aggregator.record(None, [record], 0.0)
        else:
            now_ms = self._sample_clock()
            outcomes = [
                self.validator.check(ident),
                self.freshness.check_freshness(ident, now_ms),
            ]
            violations = self.aggregator.record(ident, outcomes, now_ms)
            self.logger.identifier_processed(
                position, ident.text, ident.timestamp, ident.node_ctr,
                self.freshness.skew(ident, now_ms),
            )
            if not any(v.kind.is_sequence for v in violations):
                self._maybe_emit_periodic(ident.timestamp)

        for v in violations:
            if self.reporter is not None:
                self.reporter.violation(v)
            if self.halted_on is None and self.config.should_halt(v.kind):
                self.halted_on = v.kind

        return violations

    def finalize(
        self, interrupted: bool = False, error: Optional[str] = None,
    ) -> MonitorResult:
        """
        Build the final result from the statistics gathered so far.

        Args:
            interrupted: Whether the run was cancelled.
            error: Fatal input error description, if any.

        Returns:
            MonitorResult with verdict and statistics.
        """
        snapshot = self.aggregator.snapshot(self._now_ms())
        threshold = self.config.violation_threshold

        if error is not None:
            passed, verdict = False, f"ERROR: {error}"
        elif self.halted_on is not None:
            passed, verdict = False, f"FAILED: halted on {self.halted_on.value} violation"
        elif snapshot.total_violations > threshold:
            passed = False
            verdict = f"FAILED: {snapshot.total_violations} violation(s) found"
            if threshold:
                verdict += f" (threshold {threshold})"
        elif self.config.require_input and snapshot.identifiers_decoded == 0:
            passed, verdict = False, "FAILED: no valid ID processed"
        else:
            passed = True
            verdict = f"PASSED: {snapshot.identifiers_decoded} identifier(s) conform"
            if snapshot.total_violations:
                verdict += f" ({snapshot.total_violations} violation(s) within threshold)"

        self.logger.info("Run finished", **self.aggregator.statistics())

        return MonitorResult(
            passed=passed,
            verdict=verdict,
            snapshot=snapshot,
            halted_on=self.halted_on,
            interrupted=interrupted,
            error=error,
        )

    def snapshot(self) -> RunSnapshot:
        """Return the current statistics."""
        return self.aggregator.snapshot(self._now_ms())

    def describe_config(self) -> dict:
        """Effective configuration as a flat dictionary."""
        cfg = self.config
        return {
            "max_future_skew": f"{cfg.max_future_skew:g}s",
            "max_past_skew": f"{cfg.max_past_skew:g}s",
            "halt_on": (
                "all" if cfg.halt_on_violation
                else ", ".join(sorted(k.value for k in cfg.halt_on)) or "none"
            ),
            "violation_retention_limit": cfg.violation_retention_limit,
            "violation_threshold": cfg.violation_threshold,
            "clock_sample_interval": cfg.clock_sample_interval,
            "counter_reset_max": cfg.counter_reset_max,
            "node_id_size": cfg.scheme.node_id_size,
        }

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _now_ms(self) -> float:
        return self._clock() * 1000.0

    def _sample_clock(self) -> float:
        """Return the wall-clock sample for the current batch."""
        if self._clock_sample is None or self._samples_left <= 0:
            self._clock_sample = self._now_ms()
            self._samples_left = self.config.clock_sample_interval
        self._samples_left -= 1
        return self._clock_sample

    def _maybe_emit_periodic(self, timestamp: int) -> None:
        """Emit a snapshot each time identifier time crosses the stats interval."""
        interval_ms = self.config.stats_interval * 1000.0
        if self.reporter is None or interval_ms <= 0:
            return
        if self._last_stats_ts is None:
            self._last_stats_ts = timestamp
        elif timestamp > self._last_stats_ts + interval_ms:
            self.reporter.periodic(self.snapshot())
            self._last_stats_ts = timestamp
