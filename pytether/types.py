"""Type definitions and coercion helpers for addresses and token amounts.

Token amounts travel as scaled integers. ``parse_units`` and ``format_units``
convert between those integers and their human-readable decimal form.
"""

from decimal import Decimal, InvalidOperation
from typing import NewType, Union

from eth_utils import (
    from_wei_decimals,
    to_bytes,
    to_checksum_address,
    to_wei_decimals,
)

Address = NewType("Address", str)

BytesLike = Union[bytes, str]
Numeric = Union[int, float, str, Decimal]


def as_address(value: BytesLike) -> Address:
    """Convert hex string or bytes to a validated, checksummed 20-byte address."""
    if isinstance(value, str):
        b = to_bytes(hexstr=value)
    elif isinstance(value, (bytes, bytearray, memoryview)):
        b = bytes(value)
    else:
        raise TypeError(f"expected str, bytes, got {type(value).__name__}")

    if len(b) != 20:
        raise ValueError(f"address must be 20 bytes, got {len(b)}")
    return Address(to_checksum_address(b))


def parse_units(value: Numeric, decimals: int) -> int:
    """Scale a decimal amount to an integer with ``decimals`` fractional digits.

    >>> parse_units("100000", 6)
    100000000000
    """
    if decimals < 0:
        raise ValueError("decimals must be >= 0")
    try:
        scaled = to_wei_decimals(value, decimals)
    except InvalidOperation:
        raise ValueError(f"invalid amount: {value!r}") from None

    # to_wei_decimals truncates extra fractional digits
    if from_wei_decimals(scaled, decimals) != Decimal(str(value)):
        raise ValueError(f"{value} has more than {decimals} decimal places")
    return scaled


def format_units(value: int, decimals: int) -> str:
    """Render a scaled integer as a decimal string.

    The fractional part always keeps at least one digit, so whole amounts
    read like ``"50000.0"``.
    """
    if decimals < 0:
        raise ValueError("decimals must be >= 0")
    text = format(Decimal(from_wei_decimals(value, decimals)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text}.0" if "." not in text else text
