"""API endpoints for the exchange engine."""

from functools import lru_cache
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Path, Query

from simpledex.api.schemas import (
    AddLiquidityRequest,
    AddLiquidityResponse,
    AllowanceResponse,
    ApproveRequest,
    BalanceResponse,
    ErrorResponse,
    MintRequest,
    PoolResponse,
    PriceResponse,
    QuoteResponse,
    RemoveLiquidityRequest,
    RemoveLiquidityResponse,
    SwapRequest,
    TradeCountResponse,
    TradeResponse,
)
from simpledex.assets import InMemoryAssetLedger
from simpledex.config import DexConfig
from simpledex.engine import SimpleDex
from simpledex.pools import canonical_pair

logger = structlog.get_logger()

router = APIRouter(
    responses={
        400: {"model": ErrorResponse, "description": "Operation rejected by the engine"},
        404: {"model": ErrorResponse, "description": "Unknown pool"},
    }
)

ADDRESS_PATTERN = r"^0x[a-fA-F0-9]{40}$"
PathAddress = Annotated[str, Path(pattern=ADDRESS_PATTERN)]


@lru_cache(maxsize=1)
def get_default_engine() -> SimpleDex:
    """Process-wide engine backed by an in-memory asset ledger."""
    config = DexConfig.from_env()
    logger.info("engine_created", engine_address=config.engine_address)
    return SimpleDex(InMemoryAssetLedger(), config=config)


def get_engine() -> SimpleDex:
    """Dependency provider for the engine instance.

    Override this in tests to inject an engine:
        app.dependency_overrides[get_engine] = lambda: engine
    """
    return get_default_engine()


EngineDep = Annotated[SimpleDex, Depends(get_engine)]


@router.get("/pools/{token_a}/{token_b}")
def get_pool(token_a: PathAddress, token_b: PathAddress, engine: EngineDep) -> PoolResponse:
    """Reserves and tracked liquidity of a pair (empty if it has never been funded)."""
    return PoolResponse.from_pool(engine.get_pool(token_a, token_b))


@router.get("/pools/{token_a}/{token_b}/price")
def get_price(token_a: PathAddress, token_b: PathAddress, engine: EngineDep) -> PriceResponse:
    """Spot price of the canonical first token in the canonical second token."""
    price = engine.get_price(token_a, token_b)
    pair = canonical_pair(token_a, token_b)
    return PriceResponse(token0=pair.token0, token1=pair.token1, price=str(price))


@router.get("/quote")
def quote(
    engine: EngineDep,
    token_in: Annotated[str, Query(alias="tokenIn", pattern=ADDRESS_PATTERN)],
    token_out: Annotated[str, Query(alias="tokenOut", pattern=ADDRESS_PATTERN)],
    amount_in: Annotated[int | None, Query(alias="amountIn", ge=0)] = None,
    amount_out: Annotated[int | None, Query(alias="amountOut", ge=0)] = None,
) -> QuoteResponse:
    """Quote an exact-input or exact-output swap without executing it.

    Exactly one of amountIn / amountOut must be given.
    """
    if amount_in is not None and amount_out is None:
        out = engine.quote(token_in, token_out, amount_in)
        return QuoteResponse(amount_in=str(amount_in), amount_out=str(out))
    elif amount_out is not None and amount_in is None:
        needed = engine.quote_exact_output(token_in, token_out, amount_out)
        return QuoteResponse(amount_in=str(needed), amount_out=str(amount_out))
    else:
        raise HTTPException(status_code=422, detail="Provide exactly one of amountIn or amountOut")


@router.post("/liquidity/add")
def add_liquidity(request: AddLiquidityRequest, engine: EngineDep) -> AddLiquidityResponse:
    minted = engine.add_liquidity(
        request.provider,
        request.token_a,
        request.token_b,
        int(request.amount_a),
        int(request.amount_b),
    )
    return AddLiquidityResponse(liquidity=str(minted))


@router.post("/liquidity/remove")
def remove_liquidity(request: RemoveLiquidityRequest, engine: EngineDep) -> RemoveLiquidityResponse:
    amount_a, amount_b = engine.remove_liquidity(
        request.provider,
        request.token_a,
        request.token_b,
        int(request.liquidity),
    )
    return RemoveLiquidityResponse(amount_a=str(amount_a), amount_b=str(amount_b))


@router.post("/swap")
def swap(request: SwapRequest, engine: EngineDep) -> TradeResponse:
    record = engine.swap_tokens(request.trader, request.token_in, request.token_out, int(request.amount_in))
    return TradeResponse.from_record(record)


@router.get("/trades/{trader}/count")
def get_trade_count(trader: PathAddress, engine: EngineDep) -> TradeCountResponse:
    return TradeCountResponse(trader=trader, count=engine.get_trade_count(trader))


@router.get("/trades/{trader}/{index}")
def get_trade(
    trader: PathAddress,
    index: Annotated[int, Path(ge=0)],
    engine: EngineDep,
) -> TradeResponse:
    try:
        record = engine.get_trade(trader, index)
    except IndexError as err:
        raise HTTPException(status_code=404, detail=str(err)) from err
    return TradeResponse.from_record(record)


@router.get("/trades/{trader}")
def get_trade_history(
    trader: PathAddress,
    engine: EngineDep,
    token_in: Annotated[str | None, Query(alias="tokenIn", pattern=ADDRESS_PATTERN)] = None,
    token_out: Annotated[str | None, Query(alias="tokenOut", pattern=ADDRESS_PATTERN)] = None,
    from_ts: Annotated[int, Query(alias="fromTs", ge=0)] = 0,
    to_ts: Annotated[int, Query(alias="toTs", ge=0)] = 0,
    limit: Annotated[int, Query(ge=0)] = 0,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> list[TradeResponse]:
    """Filtered, paginated trade history. The zero address as trader matches everyone."""
    records = engine.get_trade_history(trader, token_in, token_out, from_ts, to_ts, limit, offset)
    return [TradeResponse.from_record(record) for record in records]


def _minting_ledger(engine: SimpleDex) -> InMemoryAssetLedger:
    if not isinstance(engine.assets, InMemoryAssetLedger):
        raise HTTPException(status_code=501, detail="Asset ledger does not support minting or approvals")
    return engine.assets


@router.post("/assets/mint")
def mint(request: MintRequest, engine: EngineDep) -> BalanceResponse:
    """Credit newly created tokens to an account (in-memory ledger only)."""
    ledger = _minting_ledger(engine)
    with engine.transaction("mint"):
        ledger.mint(request.token, request.account, int(request.amount))
        balance = ledger.balance_of(request.token, request.account)
    logger.info("tokens_minted", token=request.token[-8:], account=request.account[-8:], amount=request.amount)
    return BalanceResponse(token=request.token, account=request.account, balance=str(balance))


@router.post("/assets/approve")
def approve(request: ApproveRequest, engine: EngineDep) -> AllowanceResponse:
    """Set an allowance, by default for the engine to pull the owner's tokens."""
    ledger = _minting_ledger(engine)
    spender = request.spender or engine.address
    with engine.transaction("approve"):
        ledger.approve(request.token, request.owner, spender, int(request.amount))
    return AllowanceResponse(token=request.token, owner=request.owner, spender=spender, allowance=request.amount)


@router.get("/assets/{token}/balances/{account}")
def get_balance(token: PathAddress, account: PathAddress, engine: EngineDep) -> BalanceResponse:
    balance = engine.assets.balance_of(token, account)
    return BalanceResponse(token=token, account=account, balance=str(balance))
