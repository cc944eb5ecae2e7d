"""Pydantic models for pool query and operation responses."""

from __future__ import annotations

from pydantic import BaseModel, Field

from ammpool.liquidity import DepositQuote, RedemptionQuote
from ammpool.models.types import Uint256
from ammpool.swap import SwapQuote


class PoolState(BaseModel):
    """Snapshot of the pool's public state."""

    assets: list[str]
    reserves: list[Uint256]
    total_liquidity: Uint256 = Field(alias="totalLiquidity")
    fee_bps: int = Field(alias="feeBps")
    paused: bool

    model_config = {"populate_by_name": True}


class LiquidityBalance(BaseModel):
    holder: str
    liquidity: Uint256


class DepositResponse(BaseModel):
    """Liquidity minted (or that would be minted) and amounts collected."""

    liquidity: Uint256
    amounts: list[Uint256]
    bootstrap: bool = False

    @classmethod
    def from_quote(cls, quote: DepositQuote) -> DepositResponse:
        return cls(
            liquidity=str(quote.liquidity),
            amounts=[str(a) for a in quote.amounts],
            bootstrap=quote.bootstrap,
        )


class RedeemResponse(BaseModel):
    liquidity: Uint256
    amounts: list[Uint256]

    @classmethod
    def from_quote(cls, quote: RedemptionQuote) -> RedeemResponse:
        return cls(liquidity=str(quote.liquidity), amounts=[str(a) for a in quote.amounts])


class SwapResponse(BaseModel):
    asset_in: int = Field(alias="assetIn")
    asset_out: int = Field(alias="assetOut")
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_quote(cls, quote: SwapQuote) -> SwapResponse:
        return cls(
            asset_in=quote.asset_in,
            asset_out=quote.asset_out,
            amount_in=str(quote.amount_in),
            amount_out=str(quote.amount_out),
        )


class FeeSurplus(BaseModel):
    """Withdrawable surplus per asset."""

    surplus: dict[str, Uint256]


class FeesWithdrawnResponse(BaseModel):
    asset: str
    to: str
    amount: Uint256


class ErrorResponse(BaseModel):
    error: str
    detail: str
