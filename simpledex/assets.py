"""Fungible asset ledger collaborator.

The engine never tracks token balances itself. It pulls deposits with
transfer_from (the caller must have approved the engine) and pays out with
transfer from its own account, through any object satisfying AssetLedger.

Ledgers that also implement snapshot/revert_to (JournaledAssetLedger) are
rolled back together with engine state when an operation fails, the way a
reverted transaction undoes token movements on chain.
"""

from __future__ import annotations

import copy
from typing import Protocol, runtime_checkable

import structlog

from simpledex.models.types import normalize_address
from simpledex.safe_int import UINT256_MAX

logger = structlog.get_logger()


class AssetLedgerError(Exception):
    """Base error raised by asset ledgers on a rejected transfer."""

    pass


class InsufficientBalance(AssetLedgerError):
    """Sender balance is below the transfer amount."""

    pass


class InsufficientAllowance(AssetLedgerError):
    """Spender allowance is below the transfer amount."""

    pass


@runtime_checkable
class AssetLedger(Protocol):
    """ERC20-style transfer semantics, keyed by token address."""

    def transfer_from(self, token: str, spender: str, sender: str, recipient: str, amount: int) -> bool:
        """Move amount of token from sender to recipient using spender's allowance."""
        ...

    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> bool:
        """Move amount of token from sender to recipient."""
        ...

    def balance_of(self, token: str, account: str) -> int:
        """Balance of account in token."""
        ...


@runtime_checkable
class JournaledAssetLedger(AssetLedger, Protocol):
    """Asset ledger that can roll back to an earlier snapshot."""

    def snapshot(self) -> int:
        """Record the current state and return its snapshot id."""
        ...

    def revert_to(self, snapshot_id: int) -> None:
        """Restore the state recorded by snapshot_id, discarding later snapshots."""
        ...

    def release(self, snapshot_id: int) -> None:
        """Discard snapshot_id and later snapshots, keeping the current state."""
        ...


class InMemoryAssetLedger:
    """In-memory multi-token ledger with allowances and snapshots.

    Transfers raise InsufficientBalance or InsufficientAllowance instead of
    returning False, mirroring tokens that revert on failure. An allowance
    of 2**256 - 1 is treated as infinite and never decremented.
    """

    def __init__(self) -> None:
        # token -> account -> balance
        self._balances: dict[str, dict[str, int]] = {}
        # token -> owner -> spender -> allowance
        self._allowances: dict[str, dict[str, dict[str, int]]] = {}
        self._snapshots: list[tuple[dict, dict]] = []

    def mint(self, token: str, account: str, amount: int) -> None:
        """Credit newly created tokens to account."""
        token, account = normalize_address(token), normalize_address(account)
        balances = self._balances.setdefault(token, {})
        balances[account] = balances.get(account, 0) + amount

    def approve(self, token: str, owner: str, spender: str, amount: int) -> None:
        """Set spender's allowance over owner's tokens."""
        token, owner, spender = (normalize_address(x) for x in (token, owner, spender))
        self._allowances.setdefault(token, {}).setdefault(owner, {})[spender] = amount

    def allowance(self, token: str, owner: str, spender: str) -> int:
        token, owner, spender = (normalize_address(x) for x in (token, owner, spender))
        return self._allowances.get(token, {}).get(owner, {}).get(spender, 0)

    def balance_of(self, token: str, account: str) -> int:
        return self._balances.get(normalize_address(token), {}).get(normalize_address(account), 0)

    def transfer(self, token: str, sender: str, recipient: str, amount: int) -> bool:
        token, sender, recipient = (normalize_address(x) for x in (token, sender, recipient))
        self._move(token, sender, recipient, amount)
        return True

    def transfer_from(self, token: str, spender: str, sender: str, recipient: str, amount: int) -> bool:
        token, spender, sender, recipient = (
            normalize_address(x) for x in (token, spender, sender, recipient)
        )
        current = self.allowance(token, sender, spender)
        if current < amount:
            raise InsufficientAllowance(
                f"Allowance {current} of {spender[-8:]} over {sender[-8:]} is below {amount}"
            )
        self._move(token, sender, recipient, amount)
        if current != UINT256_MAX:
            self._allowances[token][sender][spender] = current - amount
        return True

    def snapshot(self) -> int:
        self._snapshots.append((copy.deepcopy(self._balances), copy.deepcopy(self._allowances)))
        return len(self._snapshots) - 1

    def revert_to(self, snapshot_id: int) -> None:
        if not 0 <= snapshot_id < len(self._snapshots):
            raise ValueError(f"Unknown snapshot id: {snapshot_id}")
        self._balances, self._allowances = self._snapshots[snapshot_id]
        del self._snapshots[snapshot_id:]
        logger.debug("asset_ledger_reverted", snapshot_id=snapshot_id)

    def release(self, snapshot_id: int) -> None:
        """Forget snapshot_id and every later snapshot without restoring."""
        del self._snapshots[snapshot_id:]

    def _move(self, token: str, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise AssetLedgerError(f"Negative transfer amount: {amount}")
        balances = self._balances.setdefault(token, {})
        available = balances.get(sender, 0)
        if available < amount:
            raise InsufficientBalance(
                f"Balance {available} of {sender[-8:]} in {token[-8:]} is below {amount}"
            )
        balances[sender] = available - amount
        balances[recipient] = balances.get(recipient, 0) + amount
