"""All-or-nothing execution of engine operations.

Each public state-changing operation runs inside TransactionManager.begin():

- operations are serialized by one re-entrant lock
- registry, trade ledger and (if journaled) asset ledger are checkpointed
- on any exception all three are restored and the exception re-raised
- events queued during the operation are dispatched only after commit

Asset transfers go through pull()/push(), which turn ledger rejections
into AssetTransferFailed.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

import structlog

from simpledex.assets import AssetLedger, AssetLedgerError, JournaledAssetLedger
from simpledex.errors import AssetTransferFailed, DexError
from simpledex.history import TradeLedger
from simpledex.models.events import DexEvent
from simpledex.pools.registry import PoolRegistry

logger = structlog.get_logger()

Clock = Callable[[], int]


def system_clock() -> int:
    """Current wall-clock time in whole seconds."""
    return int(time.time())


@dataclass
class Transaction:
    """State of one in-flight operation."""

    operation: str
    timestamp: int
    events: list[DexEvent] = field(default_factory=list)

    def emit(self, event: DexEvent) -> None:
        """Queue an event for dispatch after commit."""
        self.events.append(event)


class TransactionManager:
    """Runs operations atomically against engine state and the asset ledger."""

    def __init__(
        self,
        registry: PoolRegistry,
        trades: TradeLedger,
        assets: AssetLedger,
        engine_address: str,
        clock: Clock = system_clock,
        on_commit: Callable[[list[DexEvent]], None] | None = None,
    ) -> None:
        self._registry = registry
        self._trades = trades
        self._assets = assets
        self._engine_address = engine_address
        self._clock = clock
        self._on_commit = on_commit
        self._lock = threading.RLock()
        self._journal: JournaledAssetLedger | None = None

        if isinstance(assets, JournaledAssetLedger):
            self._journal = assets
        else:
            logger.warning(
                "asset_ledger_not_journaled",
                ledger=type(assets).__name__,
                effect="token transfers are not rolled back on failure",
            )

    @property
    def engine_address(self) -> str:
        return self._engine_address

    @contextmanager
    def begin(self, operation: str) -> Iterator[Transaction]:
        """Run the body as one atomic operation.

        Args:
            operation: Operation name for logging

        Yields:
            The Transaction collecting events and carrying the operation timestamp
        """
        with self._lock:
            tx = Transaction(operation=operation, timestamp=self._clock())
            registry_checkpoint = self._registry.checkpoint()
            trades_checkpoint = self._trades.checkpoint()
            snapshot_id = self._journal.snapshot() if self._journal is not None else None

            try:
                yield tx
            except Exception as exc:
                self._registry.restore(registry_checkpoint)
                self._trades.restore(trades_checkpoint)
                if self._journal is not None and snapshot_id is not None:
                    self._journal.revert_to(snapshot_id)
                log = logger.info if isinstance(exc, DexError) else logger.error
                log(
                    "transaction_rolled_back",
                    operation=operation,
                    error=type(exc).__name__,
                    detail=str(exc),
                )
                raise

            if self._journal is not None and snapshot_id is not None:
                self._journal.release(snapshot_id)

        if self._on_commit is not None and tx.events:
            self._on_commit(tx.events)

    def pull(self, token: str, owner: str, amount: int) -> None:
        """Move amount of token from owner into the engine via its allowance.

        Raises:
            AssetTransferFailed: If the asset ledger rejects the transfer
        """
        try:
            ok = self._assets.transfer_from(token, self._engine_address, owner, self._engine_address, amount)
        except AssetLedgerError as err:
            raise AssetTransferFailed(f"Transfer of {amount} {token[-8:]} from {owner[-8:]} failed: {err}") from err
        if not ok:
            raise AssetTransferFailed(f"Transfer of {amount} {token[-8:]} from {owner[-8:]} was rejected")

    def push(self, token: str, recipient: str, amount: int) -> None:
        """Pay amount of token out of the engine account.

        Raises:
            AssetTransferFailed: If the asset ledger rejects the transfer
        """
        try:
            ok = self._assets.transfer(token, self._engine_address, recipient, amount)
        except AssetLedgerError as err:
            raise AssetTransferFailed(f"Transfer of {amount} {token[-8:]} to {recipient[-8:]} failed: {err}") from err
        if not ok:
            raise AssetTransferFailed(f"Transfer of {amount} {token[-8:]} to {recipient[-8:]} was rejected")
