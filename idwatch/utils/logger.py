"""
Structured logging for the identifier checker.

Provides configurable log levels (silent, normal, verbose, debug)
with consistent formatting for run configuration, progress updates,
per-identifier tracing and shutdown notices.
"""

from __future__ import annotations

import sys
from enum import Enum
from typing import Any, Dict, TextIO


class LogLevel(Enum):
    """
    Logging levels for the checker.

    SILENT:  No output at all.
    NORMAL:  Warnings and shutdown notices only.
    VERBOSE: Configuration and progress information.
    DEBUG:   Detailed per-identifier output.
    """

    SILENT = 0
    NORMAL = 1
    VERBOSE = 2
    DEBUG = 3


class CheckerLogger:
    """
    Structured logger for the checker.

    Output is filtered by the configured log level. The CLI points it at
    standard error so that standard output carries only the summary.

    Attributes:
        level: The minimum log level to display.
        stream: The output stream (defaults to stderr).
    """

    def __init__(
        self,
        level: LogLevel = LogLevel.NORMAL,
        stream: TextIO = sys.stderr,
    ) -> None:
        """
        Initialize logger with level and output stream.

        Args:
            level: Minimum log level to display.
            stream: Output stream (default: sys.stderr).
        """
        self.level: LogLevel = level
        self.stream: TextIO = stream

    def debug(self, message: str, **kwargs: Any) -> None:
        """
        Log a debug message (only shown at DEBUG level).

        Args:
            message: The message to log.
            **kwargs: Additional key-value pairs to include.
        """
        if self.level.value >= LogLevel.DEBUG.value:
            self._write(f"[DEBUG] {message}")
            for k, v in kwargs.items():
                self._write(f"  {k}: {v}")

    def info(self, message: str, **kwargs: Any) -> None:
        """
        Log an info message (shown at VERBOSE and DEBUG levels).

        Args:
            message: The message to log.
            **kwargs: Additional key-value pairs to include.
        """
        if self.level.value >= LogLevel.VERBOSE.value:
            self._write(f"[INFO] {message}")
            for k, v in kwargs.items():
                self._write(f"  {k}: {v}")

    def warning(self, message: str) -> None:
        """Log a warning (shown at NORMAL level and above)."""
        if self.level.value >= LogLevel.NORMAL.value:
            self._write(f"[WARN] {message}")

    def configuration(self, options: Dict[str, Any]) -> None:
        """
        Log the effective run configuration (VERBOSE level and above).

        Args:
            options: Option names to values.
        """
        if self.level.value >= LogLevel.VERBOSE.value:
            self._write("=== Configuration ===")
            for key, value in options.items():
                label = key.replace("_", " ").title()
                self._write(f"  {label}: {value}")

    def identifier_processed(
        self, position: int, text: str, timestamp: int, node_ctr: int, skew_ms: float,
    ) -> None:
        """Log one decoded identifier (DEBUG level)."""
        if self.level.value >= LogLevel.DEBUG.value:
            self._write(
                f"[ID] #{position} {text} ts={timestamp} node_ctr={node_ctr} "
                f"skew={skew_ms:+.0f}ms"
            )

    def _write(self, message: str) -> None:
        """Write a line to the output stream."""
        self.stream.write(message + "\n")
        self.stream.flush()
