"""SimpleDex: the exchange engine facade.

Wires the pool registry, trade ledger, liquidity manager and swap engine
around one TransactionManager, and fans committed events out to
subscribers.

Usage:
    assets = InMemoryAssetLedger()
    dex = SimpleDex(assets)
    assets.approve(token_a, alice, dex.address, amount)
    dex.add_liquidity(alice, token_a, token_b, 1000, 2000)
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from contextlib import AbstractContextManager

import structlog

from simpledex.assets import AssetLedger
from simpledex.config import DEFAULT_DEX_CONFIG, DexConfig
from simpledex.history import TradeLedger
from simpledex.liquidity import LiquidityManager
from simpledex.models.events import DexEvent
from simpledex.models.trade import TradeRecord
from simpledex.pools import Pool, PoolRegistry
from simpledex.swap import SwapEngine
from simpledex.transaction import Clock, Transaction, TransactionManager, system_clock

logger = structlog.get_logger()

EventHandler = Callable[[DexEvent], None]


class SimpleDex:
    """Constant product exchange over paired-token pools.

    Args:
        assets: Asset ledger holding token balances
        config: Engine configuration (defaults to DEFAULT_DEX_CONFIG)
        clock: Timestamp source for records and events (seconds)
    """

    def __init__(
        self,
        assets: AssetLedger,
        config: DexConfig | None = None,
        clock: Clock = system_clock,
    ) -> None:
        self.config = config or DEFAULT_DEX_CONFIG
        self.assets = assets
        self.registry = PoolRegistry()
        self.trades = TradeLedger()
        self._subscribers: list[EventHandler] = []
        self._events: deque[DexEvent] = deque(maxlen=self.config.event_log_size)

        self._transactions = TransactionManager(
            registry=self.registry,
            trades=self.trades,
            assets=assets,
            engine_address=self.config.engine_address,
            clock=clock,
            on_commit=self._dispatch,
        )
        self.liquidity = LiquidityManager(self.registry, self._transactions)
        self.swaps = SwapEngine(self.registry, self.trades, self._transactions)

    @property
    def address(self) -> str:
        """Engine account in the asset ledger."""
        return self.config.engine_address

    @property
    def events(self) -> list[DexEvent]:
        """Most recent committed events (up to config.event_log_size), oldest first."""
        return list(self._events)

    def subscribe(self, handler: EventHandler) -> None:
        """Register a callback invoked for every committed event."""
        self._subscribers.append(handler)

    def transaction(self, operation: str) -> AbstractContextManager[Transaction]:
        """Atomic block serialized with every engine operation.

        Wraps direct asset ledger updates such as minting and approvals.
        """
        return self._transactions.begin(operation)

    # --- State-changing operations ---

    def add_liquidity(self, provider: str, token_a: str, token_b: str, amount_a: int, amount_b: int) -> int:
        return self.liquidity.add_liquidity(provider, token_a, token_b, amount_a, amount_b)

    def remove_liquidity(self, provider: str, token_a: str, token_b: str, liquidity: int) -> tuple[int, int]:
        return self.liquidity.remove_liquidity(provider, token_a, token_b, liquidity)

    def swap_tokens(self, trader: str, token_in: str, token_out: str, amount_in: int) -> TradeRecord:
        return self.swaps.swap_tokens(trader, token_in, token_out, amount_in)

    # --- Read accessors ---

    def get_pool(self, token_a: str, token_b: str) -> Pool:
        return self.registry.get_pool(token_a, token_b)

    def get_liquidity(self, token_a: str, token_b: str) -> int:
        return self.registry.get_liquidity(token_a, token_b)

    def get_price(self, token_a: str, token_b: str) -> int:
        return self.swaps.get_price(token_a, token_b)

    def quote(self, token_in: str, token_out: str, amount_in: int) -> int:
        return self.swaps.quote(token_in, token_out, amount_in)

    def quote_exact_output(self, token_in: str, token_out: str, amount_out: int) -> int:
        return self.swaps.quote_exact_output(token_in, token_out, amount_out)

    def get_trade(self, trader: str, index: int) -> TradeRecord:
        return self.trades.get(trader, index)

    def get_trade_count(self, trader: str) -> int:
        return self.trades.count(trader)

    def get_trade_history(
        self,
        trader: str | None = None,
        token_in: str | None = None,
        token_out: str | None = None,
        from_ts: int = 0,
        to_ts: int = 0,
        limit: int = 0,
        offset: int = 0,
    ) -> list[TradeRecord]:
        return self.trades.query(trader, token_in, token_out, from_ts, to_ts, limit, offset)

    def _dispatch(self, events: list[DexEvent]) -> None:
        """Record committed events and notify subscribers. Handler errors are logged, not raised."""
        for event in events:
            self._events.append(event)
            for handler in self._subscribers:
                try:
                    handler(event)
                except Exception:
                    logger.exception("event_handler_failed", event_name=event.name, handler=repr(handler))
