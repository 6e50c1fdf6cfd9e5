"""
Core validation engine for idwatch.

Contains the decoded identifier value object, the violation taxonomy,
the sequence validator, the freshness (clock drift) checker, the
aggregator, and the monitor loop tying them together.
"""
