"""Liquidity manager: deposits into and withdrawals from pools.

Liquidity is tracked only as a per-pair total of virtual units. Minting uses
sqrt(amount_a * amount_b) of the deposit itself, and withdrawals split the
reserves pro rata against sqrt(reserve0 * reserve1) of the current pool, so
the tracked total and the geometric total can drift apart over time.
"""

from __future__ import annotations

import structlog

from simpledex.errors import EmptyPool, IdenticalTokens, InsufficientLiquidity, InvalidAmount
from simpledex.math import integer_sqrt
from simpledex.models.events import LiquidityAdded, LiquidityRemoved
from simpledex.pools import PoolRegistry, canonical_pair
from simpledex.safe_int import S, Underflow
from simpledex.transaction import TransactionManager
from simpledex.validation import checked_add, require_address, require_amount

logger = structlog.get_logger()


class LiquidityManager:
    """Adds and removes liquidity against the pool registry."""

    def __init__(self, registry: PoolRegistry, transactions: TransactionManager) -> None:
        self._registry = registry
        self._transactions = transactions

    def add_liquidity(
        self,
        provider: str,
        token_a: str,
        token_b: str,
        amount_a: int,
        amount_b: int,
    ) -> int:
        """Deposit both tokens of a pair and mint liquidity units.

        The pool is created on first deposit. Both transfers complete before
        any reserve changes.

        Args:
            provider: Account supplying the tokens (must have approved the engine)
            token_a: First token address
            token_b: Second token address
            amount_a: Amount of token_a to deposit
            amount_b: Amount of token_b to deposit

        Returns:
            Liquidity units minted (integer_sqrt(amount_a * amount_b))

        Raises:
            IdenticalTokens: If token_a == token_b
            InvalidAmount: If either amount is zero or a total would overflow
            AssetTransferFailed: If either deposit is rejected
        """
        provider = require_address(provider, "provider")
        token_a = require_address(token_a, "token_a")
        token_b = require_address(token_b, "token_b")
        if token_a == token_b:
            raise IdenticalTokens()
        require_amount(amount_a, "amount_a")
        require_amount(amount_b, "amount_b")

        pair = canonical_pair(token_a, token_b)
        amount0, amount1 = pair.to_canonical_order(amount_a, amount_b)

        with self._transactions.begin("add_liquidity") as tx:
            self._transactions.pull(token_a, provider, amount_a)
            self._transactions.pull(token_b, provider, amount_b)

            minted = integer_sqrt(amount_a * amount_b)
            with self._registry.mutate_pool(token_a, token_b) as pool:
                pool.reserve0 = checked_add(pool.reserve0, amount0, "reserve0")
                pool.reserve1 = checked_add(pool.reserve1, amount1, "reserve1")
                pool.total_liquidity = checked_add(pool.total_liquidity, minted, "total liquidity")

            tx.emit(
                LiquidityAdded(
                    token_a=token_a,
                    token_b=token_b,
                    amount_a=amount_a,
                    amount_b=amount_b,
                    timestamp=tx.timestamp,
                )
            )

        logger.info(
            "liquidity_added",
            provider=provider[-8:],
            token0=pair.token0[-8:],
            token1=pair.token1[-8:],
            amount0=amount0,
            amount1=amount1,
            minted=minted,
        )
        return minted

    def remove_liquidity(
        self,
        provider: str,
        token_a: str,
        token_b: str,
        liquidity: int,
    ) -> tuple[int, int]:
        """Burn liquidity units and pay out a pro-rata share of both reserves.

        Args:
            provider: Account receiving the withdrawn tokens
            token_a: First token address
            token_b: Second token address
            liquidity: Liquidity units to burn

        Returns:
            (amount_a, amount_b) paid out, in the caller's token order

        Raises:
            InvalidAmount: If liquidity is zero or a share rounds down to zero
            InsufficientLiquidity: If liquidity exceeds the pair's tracked total
            EmptyPool: If either reserve is zero
            IdenticalTokens: If token_a == token_b
            AssetTransferFailed: If either payout is rejected
        """
        provider = require_address(provider, "provider")
        token_a = require_address(token_a, "token_a")
        token_b = require_address(token_b, "token_b")
        require_amount(liquidity, "liquidity")

        pair = canonical_pair(token_a, token_b)

        with self._transactions.begin("remove_liquidity") as tx:
            with self._registry.mutate_pool(token_a, token_b) as pool:
                if pool.total_liquidity < liquidity:
                    raise InsufficientLiquidity()
                if pool.is_empty:
                    raise EmptyPool()
                if token_a == token_b:
                    raise IdenticalTokens()

                geometric_total = integer_sqrt(pool.reserve0 * pool.reserve1)
                amount0 = (S(pool.reserve0) * liquidity // geometric_total).value
                amount1 = (S(pool.reserve1) * liquidity // geometric_total).value
                if amount0 == 0 or amount1 == 0:
                    raise InvalidAmount("Insufficient liquidity burned")

                try:
                    pool.reserve0 = (S(pool.reserve0) - amount0).value
                    pool.reserve1 = (S(pool.reserve1) - amount1).value
                except Underflow as err:
                    raise InsufficientLiquidity("Withdrawal exceeds pool reserves") from err
                pool.total_liquidity = (S(pool.total_liquidity) - liquidity).value

            amount_a, amount_b = pair.to_caller_order(amount0, amount1)
            self._transactions.push(token_a, provider, amount_a)
            self._transactions.push(token_b, provider, amount_b)

            tx.emit(
                LiquidityRemoved(
                    token_a=token_a,
                    token_b=token_b,
                    amount_a=amount_a,
                    amount_b=amount_b,
                    timestamp=tx.timestamp,
                )
            )

        logger.info(
            "liquidity_removed",
            provider=provider[-8:],
            token0=pair.token0[-8:],
            token1=pair.token1[-8:],
            amount0=amount0,
            amount1=amount1,
            burned=liquidity,
        )
        return amount_a, amount_b
