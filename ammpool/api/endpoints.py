"""API endpoints for the pool service."""

from __future__ import annotations

import os
import secrets
import threading

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Security
from fastapi.security import APIKeyHeader

from ammpool.config import PoolConfig
from ammpool.errors import Unauthorized
from ammpool.models.requests import (
    DepositRequest,
    FeeRateRequest,
    FundRequest,
    RedeemRequest,
    SwapRequest,
    WithdrawFeesRequest,
)
from ammpool.models.responses import (
    DepositResponse,
    FeesWithdrawnResponse,
    FeeSurplus,
    LiquidityBalance,
    PoolState,
    RedeemResponse,
    SwapResponse,
)
from ammpool.pool import Pool
from ammpool.transfer import InMemoryCustody

logger = structlog.get_logger()

router = APIRouter()

_default_pool: Pool | None = None
_default_pool_lock = threading.Lock()


def get_default_pool() -> Pool:
    """Process-wide pool backed by in-memory custody, built from the environment."""
    global _default_pool
    with _default_pool_lock:
        if _default_pool is None:
            _default_pool = Pool.from_config(PoolConfig.from_env(), InMemoryCustody())
        return _default_pool


def get_pool() -> Pool:
    """Dependency provider for the pool instance.

    Override this in tests to inject a prepared pool:
        app.dependency_overrides[get_pool] = lambda: pool

    Returns:
        The pool to operate on.
    """
    return get_default_pool()


admin_token_header = APIKeyHeader(name="X-Admin-Token", auto_error=False)


def get_admin_token() -> str | None:
    """Shared secret for admin routes, from AMM_ADMIN_TOKEN.

    Admin routes are disabled when it is unset. Tests override this
    dependency instead of touching the environment.
    """
    return os.environ.get("AMM_ADMIN_TOKEN") or None


def get_admin_caller(
    token: str | None = Security(admin_token_header),
    expected: str | None = Depends(get_admin_token),
    pool: Pool = Depends(get_pool),
) -> str:
    """Account an admin request acts as.

    The caller is never taken from the request body: a valid X-Admin-Token
    header acts as the pool's admin account, anything else is refused.

    Raises:
        Unauthorized: If admin routes are disabled or the token is wrong
    """
    if expected is None:
        raise Unauthorized("Admin routes are disabled (AMM_ADMIN_TOKEN not set)")
    if token is None or not secrets.compare_digest(token.encode(), expected.encode()):
        raise Unauthorized("Missing or invalid admin token")
    return pool.admin


# =============================================================================
# Queries
# =============================================================================


@router.get("/pool")
def pool_state(pool: Pool = Depends(get_pool)) -> PoolState:
    """Assets, reserves, total liquidity, fee rate and pause state."""
    reserves = pool.reserves()
    return PoolState(
        assets=list(reserves),
        reserves=[str(r) for r in reserves.values()],
        total_liquidity=str(pool.total_liquidity),
        fee_bps=pool.fee_bps,
        paused=pool.paused,
    )


@router.get("/pool/liquidity/{holder}")
def liquidity_balance(holder: str, pool: Pool = Depends(get_pool)) -> LiquidityBalance:
    return LiquidityBalance(holder=holder, liquidity=str(pool.liquidity_of(holder)))


@router.get("/pool/required-amounts")
def required_amounts(
    reference_amount: int = Query(alias="referenceAmount", ge=0),
    pool: Pool = Depends(get_pool),
) -> DepositResponse:
    """Preview a proportional deposit keyed on the first asset."""
    return DepositResponse.from_quote(pool.get_required_amounts(reference_amount))


@router.get("/pool/quote")
def quote_swap(
    asset_in: int = Query(alias="assetIn", ge=0),
    asset_out: int = Query(alias="assetOut", ge=0),
    amount_in: int = Query(alias="amountIn", ge=0),
    pool: Pool = Depends(get_pool),
) -> SwapResponse:
    return SwapResponse.from_quote(pool.quote_swap(asset_in, asset_out, amount_in))


@router.get("/pool/quote-in")
def quote_amount_in(
    asset_in: int = Query(alias="assetIn", ge=0),
    asset_out: int = Query(alias="assetOut", ge=0),
    amount_out: int = Query(alias="amountOut", ge=0),
    pool: Pool = Depends(get_pool),
) -> SwapResponse:
    """Input needed to receive at least amountOut."""
    amount_in = pool.quote_amount_in(asset_in, asset_out, amount_out)
    return SwapResponse(
        asset_in=asset_in,
        asset_out=asset_out,
        amount_in=str(amount_in),
        amount_out=str(amount_out),
    )


@router.get("/pool/fees")
def fee_surplus(pool: Pool = Depends(get_pool)) -> FeeSurplus:
    return FeeSurplus(surplus={a: str(s) for a, s in pool.fee_surplus().items()})


# =============================================================================
# Operations
# =============================================================================


@router.post("/pool/deposit")
def deposit(request: DepositRequest, pool: Pool = Depends(get_pool)) -> DepositResponse:
    logger.info("received_deposit", provider=request.provider, amounts=request.amounts)
    quote = pool.add_liquidity(
        request.provider,
        [int(a) for a in request.amounts],
        value=int(request.value),
    )
    return DepositResponse.from_quote(quote)


@router.post("/pool/redeem")
def redeem(request: RedeemRequest, pool: Pool = Depends(get_pool)) -> RedeemResponse:
    logger.info("received_redeem", provider=request.provider, liquidity=request.liquidity)
    return RedeemResponse.from_quote(pool.remove_liquidity(request.provider, int(request.liquidity)))


@router.post("/pool/swap")
def swap(request: SwapRequest, pool: Pool = Depends(get_pool)) -> SwapResponse:
    logger.info(
        "received_swap",
        user=request.user,
        asset_in=request.asset_in,
        asset_out=request.asset_out,
        amount_in=request.amount_in,
    )
    quote = pool.swap(
        request.user,
        request.asset_in,
        request.asset_out,
        int(request.amount_in),
        int(request.min_amount_out),
        value=int(request.value),
    )
    return SwapResponse.from_quote(quote)


@router.post("/pool/fees/withdraw")
def withdraw_fees(
    request: WithdrawFeesRequest,
    pool: Pool = Depends(get_pool),
    caller: str = Depends(get_admin_caller),
) -> FeesWithdrawnResponse:
    amount = pool.withdraw_fees(caller, request.asset, request.to)
    return FeesWithdrawnResponse(asset=request.asset, to=request.to, amount=str(amount))


@router.post("/pool/fee-rate")
def set_fee_rate(
    request: FeeRateRequest,
    pool: Pool = Depends(get_pool),
    caller: str = Depends(get_admin_caller),
) -> PoolState:
    pool.set_fee_rate(caller, request.fee_bps)
    return pool_state(pool)


@router.post("/pool/pause")
def pause(pool: Pool = Depends(get_pool), caller: str = Depends(get_admin_caller)) -> PoolState:
    pool.pause(caller)
    return pool_state(pool)


@router.post("/pool/unpause")
def unpause(pool: Pool = Depends(get_pool), caller: str = Depends(get_admin_caller)) -> PoolState:
    pool.unpause(caller)
    return pool_state(pool)


# =============================================================================
# Custody
# =============================================================================


@router.post("/custody/fund")
def fund(request: FundRequest, pool: Pool = Depends(get_pool)) -> dict[str, str]:
    """Top up an account in the in-memory custody (local and test use)."""
    if not isinstance(pool.transfer, InMemoryCustody):
        raise HTTPException(status_code=404, detail="Pool custody does not support funding")
    pool.transfer.fund(request.asset, request.account, int(request.amount))
    balance = pool.transfer.account_balance(request.asset, request.account)
    return {"asset": request.asset, "account": request.account, "balance": str(balance)}
