"""
Identifier decoder.

Turns encoded text into a DecodedIdentifier. Decoding is a pure
function: it either returns a value object or raises a DecodeError
subclass, and never touches shared state.

Default layout (SCRU64)::

    value     = int(text, 36)                      # 12 chars, < 2**64
    timestamp = (value >> 24) << 8                 # ms, 256 ms ticks
    node_ctr  = value & 0xFFFFFF
    counter   = node_ctr & ((1 << (24 - node_id_size)) - 1)
"""

from __future__ import annotations

from dataclasses import dataclass

from idwatch.core.identifier import DecodedIdentifier
from idwatch.parser.lexer import IdentifierLexer, LexerError


class DecodeError(Exception):
    """
    Base class for identifier decoding errors.

    Attributes:
        text: The offending input text.
        lineno: Physical input line number (0 when unknown).
    """

    kind = "error"

    def __init__(self, message: str, text: str, lineno: int = 0) -> None:
        super().__init__(message)
        self.text = text
        self.lineno = lineno


class MalformedIdentifier(DecodeError):
    """Wrong length or character outside the alphabet."""

    kind = "malformed"


class IdentifierOverflow(DecodeError):
    """Value does not fit in the scheme's bit width."""

    kind = "overflow"


@dataclass(frozen=True)
class IdentifierScheme:
    """
    Fixed layout of an encoded identifier.

    Attributes:
        length: Number of base-36 characters.
        bit_width: Maximum width of the decoded value in bits.
        node_ctr_bits: Low-order bits holding ``node_ctr``.
        timestamp_shift: Timestamp field unit is ``2**timestamp_shift`` ms.
        node_id_size: High bits of ``node_ctr`` reserved for the node ID.
    """

    length: int = 12
    bit_width: int = 64
    node_ctr_bits: int = 24
    timestamp_shift: int = 8
    node_id_size: int = 0

    def __post_init__(self) -> None:
        """Validate the layout."""
        if self.length < 1:
            raise ValueError(f"length must be positive, got {self.length}")
        if not 0 < self.node_ctr_bits < self.bit_width:
            raise ValueError(
                f"node_ctr_bits must be in (0, {self.bit_width}), got {self.node_ctr_bits}"
            )
        if self.timestamp_shift < 0:
            raise ValueError("timestamp_shift must be non-negative")
        if not 0 <= self.node_id_size < self.node_ctr_bits:
            raise ValueError(
                f"node_id_size must be in [0, {self.node_ctr_bits}), got {self.node_id_size}"
            )

    @property
    def max_value(self) -> int:
        """Largest representable value."""
        return (1 << self.bit_width) - 1

    @property
    def counter_bits(self) -> int:
        """Number of bits in the per-tick counter."""
        return self.node_ctr_bits - self.node_id_size

    def split(self, value: int) -> tuple[int, int, int]:
        """Split *value* into ``(timestamp_ms, node_ctr, counter)``."""
        node_ctr = value & ((1 << self.node_ctr_bits) - 1)
        timestamp = (value >> self.node_ctr_bits) << self.timestamp_shift
        counter = node_ctr & ((1 << self.counter_bits) - 1)
        return timestamp, node_ctr, counter


DEFAULT_SCHEME = IdentifierScheme()

def decode(
    text: str,
    lineno: int = 0,
    position: int = 0,
    scheme: IdentifierScheme = DEFAULT_SCHEME,
) -> DecodedIdentifier:
    """
    Decode an encoded identifier.

    Args:
        text: Encoded identifier (line terminator already removed).
        lineno: Physical line number, carried into errors.
        position: Sequence position, carried into the result.
        scheme: Identifier layout.

    Returns:
        The DecodedIdentifier.

    Raises:
        MalformedIdentifier: On length mismatch or invalid character.
        IdentifierOverflow: If the value exceeds ``scheme.bit_width`` bits.
    """
    if len(text) != scheme.length:
        raise MalformedIdentifier(
            f"expected {scheme.length} characters, got {len(text)}",
            text=text,
            lineno=lineno,
        )

    try:
        tokens = list(IdentifierLexer().tokenize(text))
    except LexerError as exc:
        raise MalformedIdentifier(str(exc), text=text, lineno=lineno) from exc

    # The length check plus a clean tokenization leaves a single run of digits
    if len(tokens) != 1:
        raise MalformedIdentifier("not a single base-36 token", text=text, lineno=lineno)

    digits = tokens[0].value.lower()
    value = int(digits, 36)
    if value > scheme.max_value:
        raise IdentifierOverflow(
            f"value exceeds {scheme.bit_width}-bit range",
            text=text,
            lineno=lineno,
        )

    timestamp, node_ctr, counter = scheme.split(value)
    return DecodedIdentifier(
        text=digits,
        value=value,
        timestamp=timestamp,
        node_ctr=node_ctr,
        counter=counter,
        position=position,
        lineno=lineno,
    )
