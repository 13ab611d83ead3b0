"""Append-only trade ledger.

Each trader has an ordered sequence of TradeRecords. A global sequence in
insertion order backs queries that use a wildcard trader. Records are frozen
models, so handing them out never exposes mutable ledger state.
"""

from __future__ import annotations

from simpledex.models.trade import TradeRecord
from simpledex.models.types import is_wildcard, normalize_address


class TradeLedger:
    """Per-trader trade history with filtered, paginated retrieval."""

    def __init__(self) -> None:
        self._by_trader: dict[str, list[TradeRecord]] = {}
        self._all: list[TradeRecord] = []

    def __len__(self) -> int:
        return len(self._all)

    def append(self, record: TradeRecord) -> None:
        self._by_trader.setdefault(record.trader, []).append(record)
        self._all.append(record)

    def count(self, trader: str) -> int:
        return len(self._by_trader.get(normalize_address(trader), ()))

    def get(self, trader: str, index: int) -> TradeRecord:
        """Record at position index of the trader's history.

        Raises:
            IndexError: If index is out of range
        """
        records = self._by_trader.get(normalize_address(trader), [])
        if not 0 <= index < len(records):
            raise IndexError(f"Trade index {index} out of range for {trader} ({len(records)} trades)")
        return records[index]

    def query(
        self,
        trader: str | None = None,
        token_in: str | None = None,
        token_out: str | None = None,
        from_ts: int = 0,
        to_ts: int = 0,
        limit: int = 0,
        offset: int = 0,
    ) -> list[TradeRecord]:
        """Filter and paginate trade history.

        Args:
            trader: Trader address; None or the zero address matches all traders
            token_in: Input token filter; None or the zero address matches any
            token_out: Output token filter; None or the zero address matches any
            from_ts: Inclusive lower timestamp bound
            to_ts: Inclusive upper timestamp bound; 0 means no upper bound
            limit: Maximum number of records returned; 0 means no cap
            offset: Number of matching records skipped before collecting

        Returns:
            Matching records in insertion order
        """
        if limit < 0 or offset < 0:
            raise ValueError(f"limit and offset must be non-negative (limit={limit}, offset={offset})")

        want_trader = _filter_value(trader)
        want_in = _filter_value(token_in)
        want_out = _filter_value(token_out)

        if want_trader is None:
            records = self._all
        else:
            records = self._by_trader.get(want_trader, [])

        # Never collect more than exist
        max_results = len(records) if limit == 0 else min(limit, len(records))

        result: list[TradeRecord] = []
        skipped = 0
        for record in records:
            if len(result) >= max_results:
                break
            if want_in is not None and record.token_in != want_in:
                continue
            if want_out is not None and record.token_out != want_out:
                continue
            if record.timestamp < from_ts:
                continue
            if to_ts != 0 and record.timestamp > to_ts:
                continue
            if skipped < offset:
                skipped += 1
                continue
            result.append(record)
        return result

    def checkpoint(self) -> int:
        """Current ledger size; records are only ever appended."""
        return len(self._all)

    def restore(self, checkpoint: int) -> None:
        """Drop every record appended after the checkpoint."""
        while len(self._all) > checkpoint:
            record = self._all.pop()
            # The newest global record is also the newest of its trader
            trader_records = self._by_trader[record.trader]
            trader_records.pop()
            if not trader_records:
                del self._by_trader[record.trader]


def _filter_value(address: str | None) -> str | None:
    """Normalized filter address, or None for a wildcard."""
    if address is None or is_wildcard(address):
        return None
    return normalize_address(address)
