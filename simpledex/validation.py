"""Argument checks shared by the liquidity and swap entry points."""

from __future__ import annotations

from simpledex.errors import InvalidAmount
from simpledex.models.types import normalize_address
from simpledex.safe_int import UINT256_MAX, S, Uint256Overflow


def require_address(address: str, name: str = "address") -> str:
    """Normalize and validate an address argument.

    Raises:
        ValueError: If address is not a 0x-prefixed 20-byte hex string
    """
    if not isinstance(address, str):
        raise ValueError(f"{name} must be a hex address string, got {type(address).__name__}")
    return normalize_address(address, validate=True)


def require_amount(amount: int, name: str = "amount") -> int:
    """Validate a positive uint256 quantity.

    Raises:
        TypeError: If amount is not an int
        InvalidAmount: If amount is zero or outside the uint256 range
    """
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError(f"{name} must be int, got {type(amount).__name__}")
    if amount == 0:
        raise InvalidAmount()
    if amount < 0 or amount > UINT256_MAX:
        raise InvalidAmount(f"{name} out of uint256 range: {amount}")
    return amount


def checked_add(current: int, delta: int, what: str) -> int:
    """current + delta, failing with InvalidAmount past uint256."""
    try:
        return (S(current) + delta).to_uint256()
    except Uint256Overflow as err:
        raise InvalidAmount(f"{what} would overflow uint256") from err
