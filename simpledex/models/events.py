"""Events emitted by the engine after a state transition commits.

Liquidity events echo the caller's token argument order, not the canonical
pool order.
"""

from typing import Literal

from pydantic import BaseModel, Field

from simpledex.models.trade import UINT64_MAX
from simpledex.models.types import Address, U256


class LiquidityAdded(BaseModel):
    """Liquidity deposited into a pool."""

    model_config = {"frozen": True}

    name: Literal["LiquidityAdded"] = "LiquidityAdded"
    token_a: Address
    token_b: Address
    amount_a: U256
    amount_b: U256
    timestamp: int = Field(ge=0, le=UINT64_MAX)


class LiquidityRemoved(BaseModel):
    """Liquidity withdrawn from a pool."""

    model_config = {"frozen": True}

    name: Literal["LiquidityRemoved"] = "LiquidityRemoved"
    token_a: Address
    token_b: Address
    amount_a: U256
    amount_b: U256
    timestamp: int = Field(ge=0, le=UINT64_MAX)


class TradeExecuted(BaseModel):
    """A swap settled against a pool."""

    model_config = {"frozen": True}

    name: Literal["TradeExecuted"] = "TradeExecuted"
    trader: Address
    token_in: Address
    token_out: Address
    amount_in: U256
    amount_out: U256
    timestamp: int = Field(ge=0, le=UINT64_MAX)


DexEvent = LiquidityAdded | LiquidityRemoved | TradeExecuted
