"""FeedQuote: Signed oracle quote and feed identifier helpers.

Feed identifiers are 32-byte hashes. They are accepted with or without the
``0x`` prefix and always handled internally in the canonical prefixed,
lowercase form.

Values are fixed-point integers scaled by ``10 ** VALUE_DECIMALS``.

.. code-block:: python

    >>> normalize_feed_hash("4CD1CAD962425681AF07B9254B7D804DE3CA3446FBFD1371BB258D2C75059812")
    '0x4cd1cad962425681af07b9254b7d804de3ca3446fbfd1371bb258d2c75059812'
    >>> format_value(67_012_500_000_000_000_000_000)
    '67012.5'
    >>> parse_value("67012.5")
    67012500000000000000000
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timezone

# Decimals used by Switchboard for feed values.
VALUE_DECIMALS = 18

FEED_HASH_PREFIX = "0x"

_HEX_RE = re.compile(r"^[0-9a-f]{64}$")
_DECIMAL_RE = re.compile(r"^(-?)(\d+)(?:\.(\d+))?$")


def normalize_feed_hash(feed_hash: str) -> str:
    """Normalize a feed identifier to ``0x`` + 64 lowercase hex characters.

    :param feed_hash: Feed identifier, with or without ``0x`` prefix.
    :returns: Canonical prefixed lowercase identifier.
    :raises ValueError: If the identifier is not 32 bytes of hex.
    """
    value = feed_hash.strip().lower()
    if value.startswith(FEED_HASH_PREFIX):
        value = value[len(FEED_HASH_PREFIX):]
    if not _HEX_RE.match(value):
        raise ValueError(
            f"Invalid feed hash '{feed_hash}'. Expected 32 bytes of hex (64 characters)"
        )
    return FEED_HASH_PREFIX + value


def strip_feed_hash(feed_hash: str) -> str:
    """Return the normalized identifier without its ``0x`` prefix."""
    return normalize_feed_hash(feed_hash)[len(FEED_HASH_PREFIX):]


def format_value(value: int, decimals: int = VALUE_DECIMALS) -> str:
    """Format a scaled integer as a decimal string.

    Trailing zeros of the fraction are trimmed, and a whole number is
    printed without a decimal point.

    :param value: Scaled integer value.
    :param decimals: Number of decimals of the scale.
    :returns: Decimal string such as ``"67012.5"`` or ``"-0.25"``.
    """
    sign = "-" if value < 0 else ""
    whole, fraction = divmod(abs(value), 10**decimals)
    if fraction == 0:
        return f"{sign}{whole}"
    fraction_str = str(fraction).rjust(decimals, "0").rstrip("0")
    return f"{sign}{whole}.{fraction_str}"


def parse_value(text: str, decimals: int = VALUE_DECIMALS) -> int:
    """Parse a decimal string into a scaled integer.

    :param text: Decimal string (e.g. ``"67012.5"``).
    :param decimals: Number of decimals of the scale.
    :returns: Scaled integer value.
    :raises ValueError: If the string is malformed or has more fractional
        digits than the scale supports.
    """
    match = _DECIMAL_RE.match(text.strip())
    if not match:
        raise ValueError(f"Invalid decimal value '{text}'")
    sign, whole, fraction = match.groups()
    fraction = fraction or ""
    if len(fraction) > decimals:
        raise ValueError(
            f"Value '{text}' has more than {decimals} fractional digits"
        )
    scaled = int(whole) * 10**decimals + int(fraction.ljust(decimals, "0") or "0")
    return -scaled if sign else scaled


def format_timestamp(timestamp: int) -> str:
    """Format a unix timestamp as an ISO 8601 UTC string."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


@dataclass(frozen=True)
class FeedQuote:
    """A signed aggregated quote for a single feed.

    :ivar feed_id: Canonical feed identifier (``0x`` + 64 hex chars).
    :ivar value: Median value scaled by ``10 ** VALUE_DECIMALS``.
    :ivar timestamp: Quote timestamp (unix seconds).
    :ivar slot: Slot number the quote was produced at.
    :ivar num_oracles: Number of oracles that responded.
    :ivar encoded: Signed update payload as ``0x``-prefixed hex.
    """

    feed_id: str
    value: int
    timestamp: int
    slot: int
    num_oracles: int
    encoded: str

    @property
    def encoded_bytes(self) -> bytes:
        """Return the signed update payload as raw bytes."""
        payload = self.encoded
        if payload.startswith("0x"):
            payload = payload[2:]
        return bytes.fromhex(payload)

    def __str__(self) -> str:
        return (
            f"{self.feed_id}: {format_value(self.value)} "
            f"(slot={self.slot}, oracles={self.num_oracles})"
        )
