"""Liquidity issuance and redemption.

Deposits into an empty pool mint the geometric mean of the deposited
amounts. Later deposits mint in proportion to the first asset's reserve and
must bring every other asset in the same proportion.

Rounding always favors the pool:
- minted liquidity rounds down
- amounts collected for a deposit round up
- amounts paid out for a redemption round down
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from ammpool.assets import check_amounts_length
from ammpool.errors import (
    ArithmeticInvariant,
    EmptyPool,
    InsufficientBalance,
    InsufficientInput,
    InvalidInput,
)
from ammpool.ledger import ReserveLedger
from ammpool.math.fixed_point import floor_geometric_mean
from ammpool.safe_int import S

logger = structlog.get_logger()


@dataclass(frozen=True)
class DepositQuote:
    """Result of pricing a deposit.

    Attributes:
        liquidity: Liquidity to mint
        amounts: Amount of each asset to collect (ordered like the asset set)
        bootstrap: True if this is the first deposit into an empty pool
    """

    liquidity: int
    amounts: tuple[int, ...]
    bootstrap: bool


@dataclass(frozen=True)
class RedemptionQuote:
    """Result of pricing a redemption.

    Attributes:
        liquidity: Liquidity to burn
        amounts: Amount of each asset paid out (ordered like the asset set)
    """

    liquidity: int
    amounts: tuple[int, ...]


def proportional_liquidity(total_liquidity: int, reference_amount: int, reference_reserve: int) -> int:
    """floor(total_liquidity * reference_amount / reference_reserve)"""
    return S(total_liquidity).mul_div(reference_amount, reference_reserve).value


def required_amount(reserve: int, liquidity: int, total_liquidity: int) -> int:
    """ceil(reserve * liquidity / total_liquidity)

    Ceiling rounding means the pool never collects less than the share the
    minted liquidity claims.
    """
    return S(reserve).mul_div(liquidity, total_liquidity, round_up=True).value


def redeemed_amount(reserve: int, liquidity: int, total_liquidity: int) -> int:
    """floor(reserve * liquidity / total_liquidity)"""
    return S(reserve).mul_div(liquidity, total_liquidity).value


class LiquidityIssuer:
    """Prices deposits and redemptions against a ledger and applies them."""

    def __init__(self, ledger: ReserveLedger) -> None:
        self.ledger = ledger

    def quote_deposit(self, amounts: Sequence[int]) -> DepositQuote:
        """Compute liquidity to mint and amounts to collect for a deposit.

        Args:
            amounts: Maximum amount of each asset the provider offers.

        Returns:
            DepositQuote (read-only, ledger is not touched)

        Raises:
            InvalidInput: Wrong length, negative amount, or a zero amount
                in the bootstrap case
            ArithmeticInvariant: Computed liquidity is zero
            InsufficientInput: An offered amount is below what is required
        """
        assets = self.ledger.assets
        check_amounts_length(assets, amounts)
        total = self.ledger.total_liquidity

        if total == 0:
            return self._quote_bootstrap(amounts)

        reserves = self.ledger.reserves()
        liquidity, required = self._proportional(amounts[0], reserves, total)

        for i, (offered, needed) in enumerate(zip(amounts, required, strict=True)):
            if offered < needed:
                raise InsufficientInput(
                    f"Asset {assets[i]} requires {needed}, offered {offered}"
                )

        logger.debug(
            "deposit_quoted",
            liquidity=liquidity,
            required=required,
            total_liquidity=total,
        )
        return DepositQuote(liquidity=liquidity, amounts=tuple(required), bootstrap=False)

    def get_required_amounts(self, reference_amount: int) -> DepositQuote:
        """Preview a proportional deposit keyed on the first asset.

        Args:
            reference_amount: Amount of the first asset to deposit.

        Returns:
            DepositQuote with the liquidity that would be minted and the
            amount of each asset that would be collected.

        Raises:
            EmptyPool: If the pool has no liquidity yet
            InvalidInput: If reference_amount is negative
            ArithmeticInvariant: If the deposit would mint zero liquidity
        """
        if not isinstance(reference_amount, int) or isinstance(reference_amount, bool):
            raise InvalidInput(f"Reference amount must be an integer: {reference_amount!r}")
        if reference_amount < 0:
            raise InvalidInput(f"Reference amount must be non-negative: {reference_amount}")

        total = self.ledger.total_liquidity
        if total == 0:
            raise EmptyPool("Pool has no liquidity; the first deposit sets the ratio")

        liquidity, required = self._proportional(reference_amount, self.ledger.reserves(), total)
        return DepositQuote(liquidity=liquidity, amounts=tuple(required), bootstrap=False)

    def quote_redemption(self, holder: str, liquidity: int) -> RedemptionQuote:
        """Compute the amount of each asset returned for burning liquidity.

        Raises:
            InvalidInput: If liquidity is zero or not a positive integer
            InsufficientBalance: If the holder owns less than liquidity
        """
        if not isinstance(liquidity, int) or isinstance(liquidity, bool) or liquidity <= 0:
            raise InvalidInput(f"Liquidity to redeem must be a positive integer: {liquidity!r}")

        balance = self.ledger.liquidity_of(holder)
        if balance < liquidity:
            raise InsufficientBalance(
                f"Holder {holder} has {balance} liquidity, cannot redeem {liquidity}"
            )

        total = self.ledger.total_liquidity
        amounts = tuple(redeemed_amount(r, liquidity, total) for r in self.ledger.reserves())

        logger.debug("redemption_quoted", holder=holder, liquidity=liquidity, amounts=amounts)
        return RedemptionQuote(liquidity=liquidity, amounts=amounts)

    def apply_deposit(self, provider: str, quote: DepositQuote) -> None:
        """Credit each collected amount, then mint to the provider."""
        for asset, amount in zip(self.ledger.assets, quote.amounts, strict=True):
            self.ledger.credit(asset, amount)
        self.ledger.mint(provider, quote.liquidity)

    def apply_redemption(self, holder: str, quote: RedemptionQuote) -> None:
        """Debit each paid-out amount, then burn from the holder."""
        for asset, amount in zip(self.ledger.assets, quote.amounts, strict=True):
            self.ledger.debit(asset, amount)
        self.ledger.burn(holder, quote.liquidity)

    def _quote_bootstrap(self, amounts: Sequence[int]) -> DepositQuote:
        assets = self.ledger.assets
        for i, amount in enumerate(amounts):
            if amount <= 0:
                raise InvalidInput(
                    f"First deposit requires every amount > 0; {assets[i]} has {amount}"
                )

        liquidity = floor_geometric_mean(list(amounts))
        if liquidity == 0:
            raise ArithmeticInvariant(f"Bootstrap deposit {list(amounts)} mints zero liquidity")

        logger.debug("bootstrap_quoted", amounts=list(amounts), liquidity=liquidity)
        return DepositQuote(liquidity=liquidity, amounts=tuple(amounts), bootstrap=True)

    @staticmethod
    def _proportional(
        reference_amount: int, reserves: list[int], total: int
    ) -> tuple[int, list[int]]:
        liquidity = proportional_liquidity(total, reference_amount, reserves[0])
        if liquidity == 0:
            raise ArithmeticInvariant(
                f"Reference amount {reference_amount} mints zero liquidity "
                f"(reserve {reserves[0]}, total {total})"
            )
        required = [required_amount(r, liquidity, total) for r in reserves]
        return liquidity, required
