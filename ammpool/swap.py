"""Constant-product swap pricing between any two pooled assets.

Formula: amount_out = (in_with_fee * res_out) / (res_in + in_with_fee)
where in_with_fee = in * (10000 - fee_bps) / 10000.

The full amount_in (fee included) is credited to the input reserve, so the
product reserve_in * reserve_out never decreases across a swap.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from ammpool.constants import DEFAULT_FEE_BPS, FEE_DENOMINATOR
from ammpool.errors import (
    ArithmeticInvariant,
    InsufficientLiquidity,
    InvalidInput,
    SlippageExceeded,
)
from ammpool.ledger import ReserveLedger
from ammpool.safe_int import S

logger = structlog.get_logger()

# Returned by get_amount_in when the requested output cannot be reached
UNREACHABLE_AMOUNT = 2**256 - 1


def validate_fee_bps(fee_bps: int) -> int:
    """Require 0 <= fee_bps < FEE_DENOMINATOR.

    Raises:
        InvalidInput: If the fee is out of range or not an integer
    """
    if not isinstance(fee_bps, int) or isinstance(fee_bps, bool):
        raise InvalidInput(f"Fee rate must be an integer number of bps: {fee_bps!r}")
    if not (0 <= fee_bps < FEE_DENOMINATOR):
        raise InvalidInput(f"Fee rate must be in [0, {FEE_DENOMINATOR}) bps, got {fee_bps}")
    return fee_bps


@dataclass
class FeePolicy:
    """Trading fee applied to swap inputs.

    A fixed-fee pool never calls set_fee_bps; the adjustable variant is the
    same policy with an admin-gated setter on the pool.
    """

    # Fee in basis points (30 = 0.3%)
    fee_bps: int = DEFAULT_FEE_BPS

    def __post_init__(self) -> None:
        validate_fee_bps(self.fee_bps)

    @property
    def fee_multiplier(self) -> int:
        """FEE_DENOMINATOR - fee_bps.

        For 30 bps (0.3%), this returns 9970.
        """
        return FEE_DENOMINATOR - self.fee_bps

    def set_fee_bps(self, fee_bps: int) -> None:
        self.fee_bps = validate_fee_bps(fee_bps)

    def apply(self, amount_in: int) -> int:
        """floor(amount_in * fee_multiplier / FEE_DENOMINATOR)"""
        return S(amount_in).mul_div(self.fee_multiplier, FEE_DENOMINATOR).value


@dataclass(frozen=True)
class SwapQuote:
    """Priced swap between two asset indices."""

    asset_in: int
    asset_out: int
    amount_in: int
    amount_in_with_fee: int
    amount_out: int
    reserve_in: int
    reserve_out: int


def get_amount_out(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    fee_multiplier: int = FEE_DENOMINATOR - DEFAULT_FEE_BPS,
) -> int:
    """Calculate output amount using the constant product formula.

    Args:
        amount_in: Input amount (fee included)
        reserve_in: Input reserve before the swap
        reserve_out: Output reserve before the swap
        fee_multiplier: FEE_DENOMINATOR - fee_bps (default 9970 for 0.3%)

    Returns:
        Output amount, rounded down. Zero for non-positive inputs.
    """
    if amount_in <= 0:
        return 0
    if reserve_in <= 0 or reserve_out <= 0:
        return 0

    amount_in_with_fee = S(amount_in).mul_div(fee_multiplier, FEE_DENOMINATOR)
    numerator = amount_in_with_fee * S(reserve_out)
    denominator = S(reserve_in) + amount_in_with_fee

    return (numerator // denominator).value


def get_amount_in(
    amount_out: int,
    reserve_in: int,
    reserve_out: int,
    fee_multiplier: int = FEE_DENOMINATOR - DEFAULT_FEE_BPS,
) -> int:
    """Smallest input whose output is at least amount_out.

    Args:
        amount_out: Desired output amount
        reserve_in: Input reserve before the swap
        reserve_out: Output reserve before the swap
        fee_multiplier: FEE_DENOMINATOR - fee_bps

    Returns:
        Required input amount, or UNREACHABLE_AMOUNT if amount_out cannot be
        reached (output at or above the reserve, or a 100% fee).
    """
    if amount_out <= 0:
        return 0
    if reserve_in <= 0 or reserve_out <= 0:
        return 0
    if amount_out >= reserve_out or fee_multiplier <= 0:
        return UNREACHABLE_AMOUNT

    # Fee-adjusted input needed: ceil(res_in * out / (res_out - out))
    with_fee = (S(reserve_in) * S(amount_out)).ceiling_div(S(reserve_out) - S(amount_out))
    # Smallest gross input whose floored fee-adjusted value reaches with_fee
    amount_in = (with_fee * S(FEE_DENOMINATOR)).ceiling_div(S(fee_multiplier)).value

    # The floor in get_amount_out can fall one unit short; step up until it does not
    while get_amount_out(amount_in, reserve_in, reserve_out, fee_multiplier) < amount_out:
        amount_in += 1
    return amount_in


class SwapEngine:
    """Prices swaps against a ledger and applies them."""

    def __init__(self, ledger: ReserveLedger, fee_policy: FeePolicy | None = None) -> None:
        self.ledger = ledger
        self.fee_policy = fee_policy or FeePolicy()

    @property
    def fee_bps(self) -> int:
        return self.fee_policy.fee_bps

    def quote(
        self,
        asset_in: int,
        asset_out: int,
        amount_in: int,
        min_amount_out: int = 0,
    ) -> SwapQuote:
        """Price a swap without touching the ledger.

        Args:
            asset_in: Index of the asset sold
            asset_out: Index of the asset bought
            amount_in: Amount of asset_in sold (fee included)
            min_amount_out: Minimum acceptable output

        Returns:
            SwapQuote

        Raises:
            InvalidInput: Zero amount, same asset, or index out of range
            InsufficientLiquidity: Either reserve is empty, or the output
                would exceed the output reserve
            SlippageExceeded: Output below min_amount_out
        """
        assets = self.ledger.assets
        if not isinstance(amount_in, int) or isinstance(amount_in, bool) or amount_in <= 0:
            raise InvalidInput(f"Swap amount must be a positive integer: {amount_in!r}")
        if not isinstance(min_amount_out, int) or isinstance(min_amount_out, bool) or min_amount_out < 0:
            raise InvalidInput(f"Minimum output must be a non-negative integer: {min_amount_out!r}")
        if not assets.is_valid_index(asset_in) or not assets.is_valid_index(asset_out):
            raise InvalidInput(
                f"Asset indices ({asset_in}, {asset_out}) out of range [0, {assets.count})"
            )
        if asset_in == asset_out:
            raise InvalidInput(f"Cannot swap asset {asset_in} for itself")

        reserve_in = self.ledger.reserve_of(assets[asset_in])
        reserve_out = self.ledger.reserve_of(assets[asset_out])
        if reserve_in == 0 or reserve_out == 0:
            raise InsufficientLiquidity(
                f"Empty reserve: {assets[asset_in]}={reserve_in}, {assets[asset_out]}={reserve_out}"
            )

        amount_in_with_fee = self.fee_policy.apply(amount_in)
        amount_out = get_amount_out(
            amount_in, reserve_in, reserve_out, self.fee_policy.fee_multiplier
        )

        if amount_out < min_amount_out:
            raise SlippageExceeded(f"Output {amount_out} below minimum {min_amount_out}")
        if amount_out > reserve_out:
            raise InsufficientLiquidity(f"Output {amount_out} exceeds reserve {reserve_out}")

        logger.debug(
            "swap_quoted",
            asset_in=asset_in,
            asset_out=asset_out,
            amount_in=amount_in,
            amount_out=amount_out,
            fee_bps=self.fee_policy.fee_bps,
        )
        return SwapQuote(
            asset_in=asset_in,
            asset_out=asset_out,
            amount_in=amount_in,
            amount_in_with_fee=amount_in_with_fee,
            amount_out=amount_out,
            reserve_in=reserve_in,
            reserve_out=reserve_out,
        )

    def quote_amount_in(self, asset_in: int, asset_out: int, amount_out: int) -> int:
        """Smallest amount of asset_in whose swap yields at least amount_out.

        Raises:
            InvalidInput: Zero amount, same asset, or index out of range
            InsufficientLiquidity: Either reserve is empty, or amount_out is
                not below the output reserve
        """
        assets = self.ledger.assets
        if not isinstance(amount_out, int) or isinstance(amount_out, bool) or amount_out <= 0:
            raise InvalidInput(f"Requested output must be a positive integer: {amount_out!r}")
        if not assets.is_valid_index(asset_in) or not assets.is_valid_index(asset_out):
            raise InvalidInput(
                f"Asset indices ({asset_in}, {asset_out}) out of range [0, {assets.count})"
            )
        if asset_in == asset_out:
            raise InvalidInput(f"Cannot swap asset {asset_in} for itself")

        reserve_in = self.ledger.reserve_of(assets[asset_in])
        reserve_out = self.ledger.reserve_of(assets[asset_out])
        if reserve_in == 0 or reserve_out == 0:
            raise InsufficientLiquidity(
                f"Empty reserve: {assets[asset_in]}={reserve_in}, {assets[asset_out]}={reserve_out}"
            )

        amount_in = get_amount_in(
            amount_out, reserve_in, reserve_out, self.fee_policy.fee_multiplier
        )
        if amount_in == UNREACHABLE_AMOUNT:
            raise InsufficientLiquidity(f"Output {amount_out} not below reserve {reserve_out}")
        return amount_in

    def apply(self, quote: SwapQuote) -> None:
        """Credit the input reserve, debit the output reserve, check the product.

        Raises:
            ArithmeticInvariant: If the reserves moved since the quote or the
                product reserve_in * reserve_out decreased
        """
        assets = self.ledger.assets
        token_in = assets[quote.asset_in]
        token_out = assets[quote.asset_out]

        if (
            self.ledger.reserve_of(token_in) != quote.reserve_in
            or self.ledger.reserve_of(token_out) != quote.reserve_out
        ):
            raise ArithmeticInvariant("Reserves changed between quote and apply")

        self.ledger.credit(token_in, quote.amount_in)
        self.ledger.debit(token_out, quote.amount_out)

        before = S(quote.reserve_in) * S(quote.reserve_out)
        after = S(self.ledger.reserve_of(token_in)) * S(self.ledger.reserve_of(token_out))
        if after < before:
            raise ArithmeticInvariant(f"Constant product decreased: {before} -> {after}")
