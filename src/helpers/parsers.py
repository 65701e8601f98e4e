"""Parsing utilities for common data transformations."""

from datetime import UTC, datetime
import re

ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")


def parse_hex_int(hex_value: str | None, default: int = 0) -> int:
    """Parse hex string to integer.

    Args:
        hex_value: Hex-encoded string or None
        default: Default value if hex_value is None

    Returns:
        int: Parsed integer value

    Example:
        >>> parse_hex_int("0xff")
        255
        >>> parse_hex_int(None, 0)
        0
    """
    if hex_value is None:
        return default
    return int(hex_value, 16)


def to_hex_block(block_number: int) -> str:
    """Encode a block number as a JSON-RPC quantity.

    Example:
        >>> to_hex_block(100)
        '0x64'
    """
    if block_number < 0:
        msg = f"Block number cannot be negative: {block_number}"
        raise ValueError(msg)
    return hex(block_number)


def unix_to_datetime(timestamp: int | float) -> datetime:
    """Convert a unix timestamp in seconds to an aware UTC datetime.

    Example:
        >>> unix_to_datetime(0)
        datetime.datetime(1970, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)
    """
    return datetime.fromtimestamp(timestamp, tz=UTC)


def normalize_address(address: str | None) -> str | None:
    """Lowercase an address for case-insensitive comparison.

    Empty strings normalize to None so they never match anything.
    """
    if not address:
        return None
    return address.strip().lower() or None


def is_address(value: str) -> bool:
    """Check whether value looks like a 20-byte hex address."""
    return bool(ADDRESS_PATTERN.match(value))


__all__ = [
    "is_address",
    "normalize_address",
    "parse_hex_int",
    "to_hex_block",
    "unix_to_datetime",
]
