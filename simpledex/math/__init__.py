"""Mathematical utilities for the exchange engine.

This package provides the integer primitives behind pools and swaps:
- integer_sqrt: liquidity minting and pro-rata withdrawal
- get_amount_out / get_amount_in: constant product pricing with the 0.3% fee
"""

from simpledex.math.amm_math import get_amount_in, get_amount_out, integer_sqrt

__all__ = ["integer_sqrt", "get_amount_out", "get_amount_in"]
