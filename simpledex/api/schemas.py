"""Request and response bodies for the HTTP API.

Uint256 quantities travel as decimal strings so JSON clients never lose
precision.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from simpledex.models.trade import TradeRecord
from simpledex.models.types import Address, Uint256
from simpledex.pools import Pool


class AddLiquidityRequest(BaseModel):
    """Deposit into a pool on behalf of provider."""

    provider: Address
    token_a: Address = Field(alias="tokenA")
    token_b: Address = Field(alias="tokenB")
    amount_a: Uint256 = Field(alias="amountA")
    amount_b: Uint256 = Field(alias="amountB")

    model_config = {"populate_by_name": True}


class AddLiquidityResponse(BaseModel):
    liquidity: Uint256


class RemoveLiquidityRequest(BaseModel):
    """Burn liquidity units and withdraw to provider."""

    provider: Address
    token_a: Address = Field(alias="tokenA")
    token_b: Address = Field(alias="tokenB")
    liquidity: Uint256

    model_config = {"populate_by_name": True}


class RemoveLiquidityResponse(BaseModel):
    amount_a: Uint256 = Field(alias="amountA")
    amount_b: Uint256 = Field(alias="amountB")

    model_config = {"populate_by_name": True}


class SwapRequest(BaseModel):
    """Exact-input swap on behalf of trader."""

    trader: Address
    token_in: Address = Field(alias="tokenIn")
    token_out: Address = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn")

    model_config = {"populate_by_name": True}


class TradeResponse(BaseModel):
    """Wire form of a TradeRecord."""

    trader: Address
    token_in: Address = Field(alias="tokenIn")
    token_out: Address = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")
    timestamp: int

    model_config = {"populate_by_name": True}

    @classmethod
    def from_record(cls, record: TradeRecord) -> TradeResponse:
        return cls(
            trader=record.trader,
            token_in=record.token_in,
            token_out=record.token_out,
            amount_in=str(record.amount_in),
            amount_out=str(record.amount_out),
            timestamp=record.timestamp,
        )


class PoolResponse(BaseModel):
    """Pool reserves in canonical token order."""

    token0: Address
    token1: Address
    reserve0: Uint256
    reserve1: Uint256
    total_liquidity: Uint256 = Field(alias="totalLiquidity")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_pool(cls, pool: Pool) -> PoolResponse:
        return cls(
            token0=pool.token0,
            token1=pool.token1,
            reserve0=str(pool.reserve0),
            reserve1=str(pool.reserve1),
            total_liquidity=str(pool.total_liquidity),
        )


class PriceResponse(BaseModel):
    """Price of token0 in token1, scaled by 1e18."""

    token0: Address
    token1: Address
    price: Uint256


class QuoteResponse(BaseModel):
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")

    model_config = {"populate_by_name": True}


class TradeCountResponse(BaseModel):
    trader: Address
    count: int


class ErrorResponse(BaseModel):
    """Body of every 400 and 404 the engine returns."""

    error: str
    detail: str


class MintRequest(BaseModel):
    """Credit newly created tokens to an account."""

    token: Address
    account: Address
    amount: Uint256


class ApproveRequest(BaseModel):
    """Set an allowance. The spender defaults to the engine account."""

    token: Address
    owner: Address
    spender: Address | None = None
    amount: Uint256


class BalanceResponse(BaseModel):
    token: Address
    account: Address
    balance: Uint256


class AllowanceResponse(BaseModel):
    token: Address
    owner: Address
    spender: Address
    allowance: Uint256
