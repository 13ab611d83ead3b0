"""Constant product AMM math.

Formula: amount_out = (amount_in * 997 * reserve_out) / (reserve_in * 1000 + amount_in * 997)

The 997/1000 factor accounts for the 0.3% fee, which stays in the pool.
All results use integer floor division.
"""

from __future__ import annotations

from simpledex.constants import FEE_DENOMINATOR, FEE_NUMERATOR
from simpledex.errors import InsufficientLiquidity, InvalidInput
from simpledex.safe_int import S, require_uint256

__all__ = ["integer_sqrt", "get_amount_out", "get_amount_in"]


def integer_sqrt(y: int) -> int:
    """Floor square root via the Babylonian method.

    Starts from y // 2 + 1 and stops once the estimate stops decreasing.

    Raises:
        ValueError: If y is negative
    """
    if y < 0:
        raise ValueError(f"integer_sqrt of negative value: {y}")
    if y > 3:
        z = y
        x = y // 2 + 1
        while x < z:
            z = x
            x = (y // x + x) // 2
        return z
    if y != 0:
        return 1
    return 0


def get_amount_out(amount_in: int, reserve_in: int, reserve_out: int) -> int:
    """Calculate swap output using the constant product formula.

    Args:
        amount_in: Input token amount
        reserve_in: Reserve of input token in pool
        reserve_out: Reserve of output token in pool

    Returns:
        Output token amount (floor)

    Raises:
        InvalidInput: If amount_in is zero
        InsufficientLiquidity: If either reserve is zero
        Uint256Overflow: If an operand or the result does not fit in uint256
    """
    require_uint256(amount_in, "amount_in")
    require_uint256(reserve_in, "reserve_in")
    require_uint256(reserve_out, "reserve_out")
    if amount_in == 0:
        raise InvalidInput()
    if reserve_in == 0 or reserve_out == 0:
        raise InsufficientLiquidity()

    amount_in_with_fee = S(amount_in) * FEE_NUMERATOR
    numerator = amount_in_with_fee * reserve_out
    denominator = S(reserve_in) * FEE_DENOMINATOR + amount_in_with_fee

    return (numerator // denominator).to_uint256()


def get_amount_in(amount_out: int, reserve_in: int, reserve_out: int) -> int:
    """Calculate the input required to receive amount_out.

    Formula: amount_in = (reserve_in * amount_out * 1000) / ((reserve_out - amount_out) * 997) + 1

    Raises:
        InvalidInput: If amount_out is zero
        InsufficientLiquidity: If either reserve is zero or amount_out
            would drain the output reserve
    """
    require_uint256(amount_out, "amount_out")
    require_uint256(reserve_in, "reserve_in")
    require_uint256(reserve_out, "reserve_out")
    if amount_out == 0:
        raise InvalidInput("Insufficient output amount requested")
    if reserve_in == 0 or reserve_out == 0 or amount_out >= reserve_out:
        raise InsufficientLiquidity()

    numerator = S(reserve_in) * amount_out * FEE_DENOMINATOR
    denominator = (S(reserve_out) - amount_out) * FEE_NUMERATOR

    return (numerator // denominator + 1).to_uint256()
