"""Pydantic models for engine records and events."""

from simpledex.models.events import DexEvent, LiquidityAdded, LiquidityRemoved, TradeExecuted
from simpledex.models.trade import TradeRecord
from simpledex.models.types import Address, U256, Uint256, normalize_address

__all__ = [
    # Types
    "Address",
    "Uint256",
    "U256",
    "normalize_address",
    # Records
    "TradeRecord",
    # Events
    "DexEvent",
    "LiquidityAdded",
    "LiquidityRemoved",
    "TradeExecuted",
]
