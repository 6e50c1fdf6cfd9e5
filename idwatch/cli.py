"""
Command-line interface for the idwatch identifier checker.

Usage::

    any-command-that-prints-identifiers-infinitely | idwatch [options]

Reads identifiers from standard input (or ``--input FILE``), reports
each violation on standard error as it is found, and prints the
statistics summary on standard output when the input ends or the run
is interrupted.
"""

from __future__ import annotations

import argparse
import os
import signal
import sys
from pathlib import Path

import idwatch
from idwatch.core.config import CheckerConfig
from idwatch.core.monitor import StreamMonitor
from idwatch.core.violation import ViolationKind
from idwatch.parser.decoder import IdentifierScheme
from idwatch.utils.logger import CheckerLogger, LogLevel
from idwatch.utils.reporter import EXIT_FATAL, Reporter
from idwatch.utils.stream_reader import StreamReader


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the idwatch CLI."""
    parser = argparse.ArgumentParser(
        prog="idwatch",
        description=(
            "idwatch: streaming conformance checker for sortable, "
            "time-ordered identifiers. "
            "Usage: any-command-that-prints-identifiers-infinitely | idwatch"
        ),
    )

    parser.add_argument(
        "-i",
        "--input",
        type=Path,
        default=None,
        metavar="FILE",
        help="Read identifiers from FILE instead of standard input",
    )
    parser.add_argument(
        "--max-future-skew",
        type=float,
        default=1.0,
        metavar="SEC",
        help="Tolerated lead of ID timestamps over the wall clock (default: 1.0)",
    )
    parser.add_argument(
        "--max-past-skew",
        type=float,
        default=10.0,
        metavar="SEC",
        help="Tolerated lag of ID timestamps behind the wall clock (default: 10.0)",
    )
    parser.add_argument(
        "--halt-on-violation",
        action="store_true",
        help="Stop at the first violation of any kind",
    )
    parser.add_argument(
        "--halt-on",
        action="append",
        default=[],
        metavar="KIND",
        type=_violation_kind,
        help=(
            "Stop at the first violation of KIND (repeatable); one of: "
            + ", ".join(k.value for k in ViolationKind)
        ),
    )
    parser.add_argument(
        "--retention-limit",
        type=int,
        default=100,
        metavar="K",
        help="Keep the first K and last K violation records (default: 100)",
    )
    parser.add_argument(
        "--threshold",
        type=int,
        default=0,
        metavar="N",
        help="Fail only when more than N violations are found (default: 0)",
    )
    parser.add_argument(
        "--comment-prefix",
        default="#",
        metavar="PREFIX",
        help="Ignore lines starting with PREFIX; empty disables (default: '#')",
    )
    parser.add_argument(
        "--clock-sample-interval",
        type=int,
        default=1,
        metavar="N",
        help="Sample the wall clock once per N identifiers (default: 1)",
    )
    parser.add_argument(
        "--stats-interval",
        type=float,
        default=10.0,
        metavar="SEC",
        help="Print statistics every SEC seconds of ID time; 0 disables (default: 10)",
    )
    parser.add_argument(
        "--counter-reset-max",
        type=int,
        default=None,
        metavar="N",
        help="Largest counter value allowed right after a timestamp advance",
    )
    parser.add_argument(
        "--node-id-size",
        type=int,
        default=0,
        metavar="BITS",
        help="High bits of node_ctr holding the node ID (default: 0)",
    )
    parser.add_argument(
        "--require-input",
        action="store_true",
        help="Fail when no valid identifier was processed",
    )
    parser.add_argument(
        "-o",
        "--output",
        choices=["silent", "normal", "verbose"],
        default="normal",
        help="Output level (default: normal)",
    )
    parser.add_argument(
        "-d",
        "--debug",
        type=int,
        choices=[0, 1, 2, 3],
        default=0,
        help="Debug level 0-3 (default: 0)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"idwatch {idwatch.__version__}",
    )

    return parser


def _violation_kind(value: str) -> ViolationKind:
    try:
        return ViolationKind.from_name(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _resolve_log_level(output: str, debug: int) -> LogLevel:
    """Determine the effective log level from output and debug settings."""
    if debug >= 3:
        return LogLevel.DEBUG
    if output == "verbose" or debug >= 1:
        return LogLevel.VERBOSE
    if output == "silent":
        return LogLevel.SILENT
    return LogLevel.NORMAL


def _build_config(args: argparse.Namespace) -> CheckerConfig:
    """Map parsed arguments onto a validated CheckerConfig."""
    return CheckerConfig(
        max_future_skew=args.max_future_skew,
        max_past_skew=args.max_past_skew,
        halt_on_violation=args.halt_on_violation,
        halt_on=frozenset(args.halt_on),
        violation_retention_limit=args.retention_limit,
        violation_threshold=args.threshold,
        comment_prefix=args.comment_prefix,
        clock_sample_interval=args.clock_sample_interval,
        stats_interval=args.stats_interval,
        counter_reset_max=args.counter_reset_max,
        require_input=args.require_input,
        scheme=IdentifierScheme(node_id_size=args.node_id_size),
    )


def main() -> None:
    """Entry point for the ``idwatch`` CLI command."""
    parser = _build_parser()
    args = parser.parse_args()

    try:
        _run(args)
    except SystemExit:
        raise
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(EXIT_FATAL)


def _run(args: argparse.Namespace) -> None:
    """Execute the validation pipeline."""
    config = _build_config(args)

    if args.input is not None and not args.input.exists():
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        sys.exit(EXIT_FATAL)

    # Route SIGTERM through the same graceful path as Ctrl-C
    signal.signal(signal.SIGTERM, signal.default_int_handler)

    log_level = _resolve_log_level(args.output, args.debug)
    logger = CheckerLogger(level=log_level, stream=sys.stderr)
    if args.output == "silent":
        devnull = open(os.devnull, "w")
        out = err = devnull
    else:
        out, err = sys.stdout, sys.stderr

    reporter = Reporter(
        out=out,
        err=err,
        max_future_skew=config.max_future_skew,
        max_past_skew=config.max_past_skew,
        tick_ms=1 << config.scheme.timestamp_shift,
        max_counter=1 << config.scheme.counter_bits,
        threshold=config.violation_threshold,
    )

    # Room for a full-length line of 4-byte UTF-8 characters plus CRLF
    max_line_bytes = 4 * config.scheme.length + 2
    if args.input is not None:
        reader = StreamReader.open(
            args.input,
            comment_prefix=config.comment_prefix,
            max_line_bytes=max_line_bytes,
        )
    else:
        reader = StreamReader(
            comment_prefix=config.comment_prefix, max_line_bytes=max_line_bytes,
        )
        logger.info(
            "Reading IDs from stdin; statistics every "
            f"{config.stats_interval:g} seconds of ID time. Press Ctrl-C to quit."
        )

    monitor = StreamMonitor(config=config, logger=logger, reporter=reporter)
    try:
        try:
            result = monitor.run(reader)
        finally:
            reader.close()
    except KeyboardInterrupt:
        # A signal taken during the blocking read can surface after the loop
        _ignore_interrupts()
        logger.warning("Interrupted; reporting statistics gathered so far")
        result = monitor.finalize(interrupted=True)
    else:
        _ignore_interrupts()

    logger.info(
        "Input closed", lines_read=reader.lines_read, lines_skipped=reader.lines_skipped,
    )
    reporter.summary(result)
    sys.exit(reporter.exit_status(result))


def _ignore_interrupts() -> None:
    """Keep a late SIGINT or SIGTERM from cutting the summary short."""
    signal.signal(signal.SIGINT, signal.SIG_IGN)
    signal.signal(signal.SIGTERM, signal.SIG_IGN)
