"""Swap engine: constant product swaps and spot prices.

Reserves are selected through canonical_pair(): when token_in sorts first
it trades against (reserve0, reserve1), otherwise against (reserve1, reserve0).
There is no minimum-output parameter; callers accept whatever the curve gives.
"""

from __future__ import annotations

import structlog

from simpledex.constants import PRICE_SCALE
from simpledex.errors import IdenticalTokens, InsufficientLiquidity, InsufficientOutput, PoolNotFound
from simpledex.history import TradeLedger
from simpledex.math import get_amount_in, get_amount_out
from simpledex.models.events import TradeExecuted
from simpledex.models.trade import TradeRecord
from simpledex.pools import PoolRegistry, canonical_pair
from simpledex.safe_int import S, Underflow
from simpledex.transaction import TransactionManager
from simpledex.validation import checked_add, require_address, require_amount

logger = structlog.get_logger()


class SwapEngine:
    """Executes swaps against pools and records them in the trade ledger."""

    def __init__(
        self,
        registry: PoolRegistry,
        trades: TradeLedger,
        transactions: TransactionManager,
    ) -> None:
        self._registry = registry
        self._trades = trades
        self._transactions = transactions

    def swap_tokens(self, trader: str, token_in: str, token_out: str, amount_in: int) -> TradeRecord:
        """Sell amount_in of token_in for token_out (exact input).

        Args:
            trader: Account paying token_in and receiving token_out
            token_in: Token sold
            token_out: Token bought
            amount_in: Amount of token_in sold

        Returns:
            The TradeRecord appended to the trader's history

        Raises:
            IdenticalTokens: If token_in == token_out
            InvalidAmount: If amount_in is zero
            InsufficientLiquidity: If the pool has an empty reserve
            InsufficientOutput: If the output rounds down to zero
            AssetTransferFailed: If the pull or the payout is rejected
        """
        trader = require_address(trader, "trader")
        token_in = require_address(token_in, "token_in")
        token_out = require_address(token_out, "token_out")
        if token_in == token_out:
            raise IdenticalTokens()
        require_amount(amount_in, "amount_in")

        pair = canonical_pair(token_in, token_out)

        with self._transactions.begin("swap_tokens") as tx:
            with self._registry.mutate_pool(token_in, token_out) as pool:
                # token_in is the canonical second token when the pair was swapped
                if pair.swapped:
                    reserve_in, reserve_out = pool.reserve1, pool.reserve0
                else:
                    reserve_in, reserve_out = pool.reserve0, pool.reserve1

                amount_out = get_amount_out(amount_in, reserve_in, reserve_out)
                if amount_out == 0:
                    raise InsufficientOutput()

                self._transactions.pull(token_in, trader, amount_in)
                self._transactions.push(token_out, trader, amount_out)

                new_reserve_in = checked_add(reserve_in, amount_in, "reserve_in")
                try:
                    new_reserve_out = (S(reserve_out) - amount_out).value
                except Underflow as err:
                    raise InsufficientLiquidity("Output exceeds pool reserve") from err

                if pair.swapped:
                    pool.reserve1, pool.reserve0 = new_reserve_in, new_reserve_out
                else:
                    pool.reserve0, pool.reserve1 = new_reserve_in, new_reserve_out

            record = TradeRecord(
                trader=trader,
                token_in=token_in,
                token_out=token_out,
                amount_in=amount_in,
                amount_out=amount_out,
                timestamp=tx.timestamp,
            )
            self._trades.append(record)
            tx.emit(
                TradeExecuted(
                    trader=trader,
                    token_in=token_in,
                    token_out=token_out,
                    amount_in=amount_in,
                    amount_out=amount_out,
                    timestamp=tx.timestamp,
                )
            )

        logger.info(
            "swap_executed",
            trader=trader[-8:],
            token_in=token_in[-8:],
            token_out=token_out[-8:],
            amount_in=amount_in,
            amount_out=amount_out,
        )
        return record

    def quote(self, token_in: str, token_out: str, amount_in: int) -> int:
        """Output a swap of amount_in would receive right now, without executing it.

        Raises the same errors as swap_tokens, except AssetTransferFailed.
        """
        token_in = require_address(token_in, "token_in")
        token_out = require_address(token_out, "token_out")
        if token_in == token_out:
            raise IdenticalTokens()
        require_amount(amount_in, "amount_in")

        pool = self._registry.get_pool(token_in, token_out)
        reserve_in, reserve_out = pool.get_reserves(token_in)
        amount_out = get_amount_out(amount_in, reserve_in, reserve_out)
        if amount_out == 0:
            raise InsufficientOutput()
        return amount_out

    def quote_exact_output(self, token_in: str, token_out: str, amount_out: int) -> int:
        """Input needed to receive at least amount_out of token_out right now."""
        token_in = require_address(token_in, "token_in")
        token_out = require_address(token_out, "token_out")
        if token_in == token_out:
            raise IdenticalTokens()
        require_amount(amount_out, "amount_out")

        pool = self._registry.get_pool(token_in, token_out)
        reserve_in, reserve_out = pool.get_reserves(token_in)
        return get_amount_in(amount_out, reserve_in, reserve_out)

    def get_price(self, token_a: str, token_b: str) -> int:
        """Spot price of the pair, scaled by 1e18.

        Always expressed as units of the canonical second token per unit of
        the canonical first token, whatever order the tokens are passed in.

        Raises:
            PoolNotFound: If either reserve is zero
        """
        token_a = require_address(token_a, "token_a")
        token_b = require_address(token_b, "token_b")
        pool = self._registry.get_pool(token_a, token_b)
        if pool.is_empty:
            raise PoolNotFound()
        return (S(pool.reserve1) * PRICE_SCALE // pool.reserve0).value
