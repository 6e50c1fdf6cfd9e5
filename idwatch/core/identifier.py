"""
Decoded identifier representation.

A decoded identifier carries the canonical text, the 64-bit integer
value, and the two logical fields split out of it: the millisecond
``timestamp`` stored in the high-order bits and the ``node_ctr`` stored
in the low-order bits. The per-tick ``counter`` is the part of
``node_ctr`` below the node ID bits.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DecodedIdentifier:
    """
    Immutable representation of one decoded identifier.

    Attributes:
        text: Canonical (lower-case) encoded text.
        value: The unsigned integer value.
        timestamp: Milliseconds since the Unix epoch.
        node_ctr: Combined node ID and counter field.
        counter: Counter portion of ``node_ctr``.
        position: 1-based sequence position in the input stream.
        lineno: Physical input line number.
    """

    text: str
    value: int
    timestamp: int
    node_ctr: int
    counter: int
    position: int = field(default=0, compare=False)
    lineno: int = field(default=0, compare=False)

    def __post_init__(self) -> None:
        """Reject negative field values."""
        if self.value < 0:
            raise ValueError(f"value must be non-negative, got {self.value}")
        if self.timestamp < 0 or self.node_ctr < 0 or self.counter < 0:
            raise ValueError("timestamp, node_ctr and counter must be non-negative")

    # ------------------------------------------------------------------ #
    # Ordering
    # ------------------------------------------------------------------ #

    def precedes(self, other: DecodedIdentifier) -> bool:
        """True when ``self.value < other.value``."""
        return self.value < other.value

    def same_tick(self, other: DecodedIdentifier) -> bool:
        """True when both identifiers carry the same timestamp."""
        return self.timestamp == other.timestamp

    def __str__(self) -> str:
        return self.text
