"""Pool record and pair canonicalization.

Pools are keyed by their canonical pair: the token with the smaller
unsigned address value first. canonical_pair() is the only place that
decides the order; everything touching reserves goes through it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

from simpledex.models.types import address_to_int, normalize_address


class CanonicalPair(NamedTuple):
    """A token pair in canonical order.

    Attributes:
        token0: Token with the smaller address value
        token1: Token with the larger address value
        swapped: True if the caller passed the tokens as (token1, token0)
    """

    token0: str
    token1: str
    swapped: bool

    @property
    def key(self) -> tuple[str, str]:
        return (self.token0, self.token1)

    def to_caller_order(self, amount0: int, amount1: int) -> tuple[int, int]:
        """Map canonical (amount0, amount1) back to the caller's argument order."""
        if self.swapped:
            return amount1, amount0
        return amount0, amount1

    def to_canonical_order(self, amount_a: int, amount_b: int) -> tuple[int, int]:
        """Map caller-ordered (amount_a, amount_b) onto (amount0, amount1)."""
        if self.swapped:
            return amount_b, amount_a
        return amount_a, amount_b


def canonical_pair(token_a: str, token_b: str) -> CanonicalPair:
    """Canonicalize a token pair.

    Args:
        token_a: First token address (any case)
        token_b: Second token address (any case)

    Returns:
        CanonicalPair with the smaller address first
    """
    a = normalize_address(token_a)
    b = normalize_address(token_b)
    if address_to_int(b) < address_to_int(a):
        return CanonicalPair(b, a, True)
    return CanonicalPair(a, b, False)


@dataclass
class Pool:
    """Reserves and tracked liquidity for one canonical pair.

    Either both reserves are zero (empty pool) or both are positive.
    total_liquidity counts virtual liquidity units minted for the pair;
    there is no per-provider breakdown.
    """

    token0: str
    token1: str
    reserve0: int = 0
    reserve1: int = 0
    total_liquidity: int = 0

    @property
    def is_empty(self) -> bool:
        return self.reserve0 == 0 or self.reserve1 == 0

    @property
    def is_consistent(self) -> bool:
        """Both reserves zero, or both positive."""
        return (self.reserve0 == 0) == (self.reserve1 == 0)

    def get_reserves(self, token_in: str) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        token_in_norm = normalize_address(token_in)
        if token_in_norm == self.token0:
            return self.reserve0, self.reserve1
        elif token_in_norm == self.token1:
            return self.reserve1, self.reserve0
        else:
            raise ValueError(f"Token {token_in} not in pool")
