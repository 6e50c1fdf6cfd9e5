"""
Shared pytest fixtures for the idwatch test suite.

Provides a fixed wall clock, an identifier encoder for building test
streams, and paths to the stream fixture files.
"""

from pathlib import Path
from typing import Callable

import pytest

# A multiple of 256 so that encoded timestamps round-trip exactly
NOW_MS = 1_700_000_000_000

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def encode_id(timestamp_ms: int, node_ctr: int = 0, length: int = 12) -> str:
    """Encode a timestamp/node_ctr pair in the default 12-char layout."""
    value = ((timestamp_ms >> 8) << 24) | node_ctr
    chars = []
    for _ in range(length):
        value, rem = divmod(value, 36)
        chars.append(_DIGITS[rem])
    return "".join(reversed(chars))


@pytest.fixture
def now_ms() -> int:
    """The fixed wall-clock time used by unit tests, in milliseconds."""
    return NOW_MS


@pytest.fixture
def fixed_clock() -> Callable[[], float]:
    """A clock frozen at NOW_MS, returning seconds."""
    return lambda: NOW_MS / 1000.0


@pytest.fixture
def encode() -> Callable[..., str]:
    """The test identifier encoder."""
    return encode_id


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def streams_dir(fixtures_dir: Path) -> Path:
    """Path to the identifier stream fixtures directory."""
    return fixtures_dir / "streams"
