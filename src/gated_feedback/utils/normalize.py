"""Canonical forms for addresses, hashes and token amounts."""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

HEX_PATTERN = re.compile(r"^0x[0-9a-f]+$")


def normalize_address(address: str) -> str:
    """Lowercase a wallet address so lookups are case-insensitive."""
    normalized = address.strip().lower()
    if not HEX_PATTERN.match(normalized):
        raise ValueError(f"Invalid wallet address: {address!r}")
    return normalized


def normalize_tx_hash(tx_hash: str) -> str:
    normalized = tx_hash.strip().lower()
    if not HEX_PATTERN.match(normalized):
        raise ValueError(f"Invalid transaction hash: {tx_hash!r}")
    return normalized


def parse_amount(value: str | int | float | Decimal) -> Decimal:
    """Parse a non-negative token amount."""
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Invalid amount: {value!r}")
    return amount


def format_amount(amount: Decimal) -> str:
    """Render an amount without exponent notation or trailing zeros."""
    text = format(amount.normalize(), "f")
    return text if text != "-0" else "0"
