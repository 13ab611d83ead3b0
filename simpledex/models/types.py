"""Shared type definitions for engine and API models.

Token and account identifiers are 20-byte hex addresses. They are compared
as unsigned integers, which for normalized addresses is the same as
comparing the lowercase strings.
"""

from typing import Annotated, Any

from pydantic import AfterValidator, BeforeValidator, Field

from simpledex.constants import ZERO_ADDRESS
from simpledex.safe_int import UINT256_MAX


def validate_uint256(value: Any) -> str:
    """Validate that a value is a valid uint256 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid uint256 as decimal string

    Raises:
        ValueError: If value is not a valid non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint256 must be string or int, got bool")

    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")

    return str(int_value)


def normalize_address(address: str, *, validate: bool = False) -> str:
    """Normalize an address to lowercase with 0x prefix.

    Args:
        address: An address (with or without 0x prefix)
        validate: If True, raises ValueError for invalid addresses

    Raises:
        ValueError: If validate=True and address is not a valid address
    """
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr

    if validate and not is_valid_address(addr):
        raise ValueError(f"Invalid address: {address}")

    return addr


def is_valid_address(address: str) -> bool:
    """Check if a string is a 0x-prefixed 20-byte hex address."""
    if not isinstance(address, str):
        return False
    if not address.startswith("0x"):
        return False
    if len(address) != 42:
        return False
    try:
        int(address, 16)
        return True
    except ValueError:
        return False


def address_to_int(address: str) -> int:
    """Unsigned integer value of an address, used for canonical ordering."""
    return int(normalize_address(address), 16)


def is_wildcard(address: str | None) -> bool:
    """True for filter values that match any address (None or the zero address)."""
    return address is None or normalize_address(address) == ZERO_ADDRESS


def _normalize_validated(address: str) -> str:
    return normalize_address(address, validate=True)


# 20-byte hex address, normalized to lowercase
Address = Annotated[
    str,
    Field(pattern=r"^0x[a-fA-F0-9]{40}$"),
    AfterValidator(_normalize_validated),
]

# 256-bit unsigned integer as decimal string (wire format)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]

# 256-bit unsigned integer held as a Python int (engine models)
U256 = Annotated[int, Field(ge=0, le=UINT256_MAX)]
