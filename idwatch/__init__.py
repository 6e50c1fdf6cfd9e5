"""
idwatch: streaming conformance checker for sortable identifiers.

Reads an unbounded stream of SCRU64-style identifiers (12 base-36
characters encoding a 64-bit integer) and verifies, online and with
constant memory, that the stream is strictly increasing, that the
timestamp/counter fields advance consistently, and that the embedded
timestamps stay close to wall-clock time.
"""

__version__ = "0.1.0"
