"""Pydantic models for the pool HTTP surface."""

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
    ErrorResponse,
    FeesWithdrawnResponse,
    FeeSurplus,
    LiquidityBalance,
    PoolState,
    RedeemResponse,
    SwapResponse,
)
from ammpool.models.types import Uint256

__all__ = [
    # Types
    "Uint256",
    # Requests
    "DepositRequest",
    "FeeRateRequest",
    "FundRequest",
    "RedeemRequest",
    "SwapRequest",
    "WithdrawFeesRequest",
    # Responses
    "DepositResponse",
    "ErrorResponse",
    "FeeSurplus",
    "FeesWithdrawnResponse",
    "LiquidityBalance",
    "PoolState",
    "RedeemResponse",
    "SwapResponse",
]
