"""Pool management package.

Provides PoolRegistry and the canonical pair convention every component
uses to map tokens onto reserves.
"""

from .registry import PoolRegistry
from .types import CanonicalPair, Pool, canonical_pair

__all__ = [
    "PoolRegistry",
    "Pool",
    "CanonicalPair",
    "canonical_pair",
]
