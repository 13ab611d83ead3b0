"""Trade record model."""

from pydantic import BaseModel, Field

from simpledex.models.types import Address, U256

UINT64_MAX = 2**64 - 1


class TradeRecord(BaseModel):
    """One completed swap. Immutable once created."""

    model_config = {"frozen": True}

    trader: Address
    token_in: Address
    token_out: Address
    amount_in: U256
    amount_out: U256
    timestamp: int = Field(ge=0, le=UINT64_MAX)
