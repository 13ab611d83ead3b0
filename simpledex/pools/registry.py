"""Pool registry: keyed storage of reserves and liquidity totals.

Pools live in a dict keyed by canonical pair. Stored Pool objects are never
mutated in place: mutate_pool() hands out a staged copy and swaps it in on
success, which is what makes checkpoint() a cheap shallow copy.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace

import structlog

from simpledex.errors import InsufficientLiquidity
from simpledex.pools.types import CanonicalPair, Pool, canonical_pair

logger = structlog.get_logger()

RegistryCheckpoint = dict[tuple[str, str], Pool]


class PoolRegistry:
    """Registry of constant product pools.

    Lookups are order independent: (A, B) and (B, A) resolve to the same
    pool. Unknown pairs read as empty pools; a pool is stored the first
    time a mutation commits for its pair.
    """

    def __init__(self) -> None:
        self._pools: dict[tuple[str, str], Pool] = {}

    def __len__(self) -> int:
        return len(self._pools)

    def get_pool(self, token_a: str, token_b: str) -> Pool:
        """Get a snapshot of the pool for a token pair (order independent).

        Args:
            token_a: First token address (any case)
            token_b: Second token address (any case)

        Returns:
            Copy of the stored pool, or an empty Pool if the pair is unknown
        """
        pair = canonical_pair(token_a, token_b)
        return self._snapshot(pair)

    def get_liquidity(self, token_a: str, token_b: str) -> int:
        """Tracked liquidity total for a pair (order independent)."""
        pool = self._pools.get(canonical_pair(token_a, token_b).key)
        return pool.total_liquidity if pool is not None else 0

    def pairs(self) -> list[Pool]:
        """Snapshots of all non-empty pools, in canonical key order."""
        return [replace(pool) for key, pool in sorted(self._pools.items()) if not pool.is_empty]

    @contextmanager
    def mutate_pool(self, token_a: str, token_b: str) -> Iterator[Pool]:
        """Staged access to one pool.

        Yields a copy of the pool. The copy replaces the stored pool only if
        the block exits without raising; any exception discards it.

        Raises:
            InsufficientLiquidity: If the staged pool ends up with exactly
                one zero reserve
        """
        pair = canonical_pair(token_a, token_b)
        staged = self._snapshot(pair)
        yield staged
        if not staged.is_consistent:
            raise InsufficientLiquidity(f"Pool {pair.token0[-8:]}/{pair.token1[-8:]} would be left one-sided")
        self._pools[pair.key] = staged

    def checkpoint(self) -> RegistryCheckpoint:
        """Capture the current registry state for rollback."""
        return dict(self._pools)

    def restore(self, checkpoint: RegistryCheckpoint) -> None:
        """Roll the registry back to a checkpoint."""
        self._pools = dict(checkpoint)
        logger.debug("pool_registry_restored", pools=len(self._pools))

    def _snapshot(self, pair: CanonicalPair) -> Pool:
        pool = self._pools.get(pair.key)
        if pool is None:
            return Pool(token0=pair.token0, token1=pair.token1)
        return replace(pool)

