"""Pydantic models for pool operation requests."""

from pydantic import BaseModel, Field

from ammpool.models.types import Account, Uint256


class DepositRequest(BaseModel):
    """Add liquidity: offered amount per asset, in asset-set order."""

    provider: Account
    amounts: list[Uint256]
    value: Uint256 = Field(default="0", description="Attached native value.")

    model_config = {"populate_by_name": True}


class RedeemRequest(BaseModel):
    """Remove liquidity."""

    provider: Account
    liquidity: Uint256


class SwapRequest(BaseModel):
    """Sell amountIn of assetIn for at least minAmountOut of assetOut."""

    user: Account
    asset_in: int = Field(alias="assetIn", ge=0)
    asset_out: int = Field(alias="assetOut", ge=0)
    amount_in: Uint256 = Field(alias="amountIn")
    min_amount_out: Uint256 = Field(default="0", alias="minAmountOut")
    value: Uint256 = Field(default="0", description="Attached native value.")

    model_config = {"populate_by_name": True}


class WithdrawFeesRequest(BaseModel):
    """Admin: send an asset's fee surplus. The caller comes from the X-Admin-Token header."""

    asset: Account
    to: Account


class FeeRateRequest(BaseModel):
    fee_bps: int = Field(alias="feeBps", ge=0)

    model_config = {"populate_by_name": True}


class FundRequest(BaseModel):
    """Credit an account in the in-memory custody."""

    asset: Account
    account: Account
    amount: Uint256
