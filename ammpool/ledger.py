"""Reserve and liquidity ledger.

The ledger is the single source of truth for reserves, total liquidity and
per-holder balances. credit/debit/mint/burn are its only mutators.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from ammpool.assets import AssetSet, normalize_asset
from ammpool.errors import (
    ArithmeticInvariant,
    InsufficientBalance,
    InsufficientReserve,
    InvalidInput,
)
from ammpool.safe_int import S

logger = structlog.get_logger()


@dataclass(frozen=True)
class LedgerSnapshot:
    """Copy of ledger state taken before a multi-step mutation."""

    reserves: dict[str, int]
    total_liquidity: int
    balances: dict[str, int] = field(default_factory=dict)


def _check_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
        raise InvalidInput(f"Amount must be a non-negative integer: {amount!r}")


class ReserveLedger:
    """Per-asset reserves, total liquidity and holder balances.

    Holders with a zero balance are dropped to keep the table sparse;
    an absent holder reads as zero.
    """

    def __init__(self, assets: AssetSet) -> None:
        self._assets = assets
        self._reserves: dict[str, int] = {asset: 0 for asset in assets}
        self._total_liquidity = 0
        self._balances: dict[str, int] = {}

    # --- Reads ---

    @property
    def assets(self) -> AssetSet:
        return self._assets

    @property
    def total_liquidity(self) -> int:
        return self._total_liquidity

    def reserve_of(self, asset: str) -> int:
        return self._reserves[self._key(asset)]

    def reserves(self) -> list[int]:
        """Reserves ordered like the asset set."""
        return [self._reserves[asset] for asset in self._assets]

    def liquidity_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def holders(self) -> dict[str, int]:
        """All non-zero holder balances."""
        return dict(self._balances)

    # --- Mutators ---

    def credit(self, asset: str, amount: int) -> None:
        """Increase a reserve.

        Raises:
            Uint256Overflow: If the reserve would exceed 2^256-1
        """
        _check_amount(amount)
        key = self._key(asset)
        self._reserves[key] = (S(self._reserves[key]) + S(amount)).to_uint256()

    def debit(self, asset: str, amount: int) -> None:
        """Decrease a reserve.

        Raises:
            InsufficientReserve: If the reserve would go negative
        """
        _check_amount(amount)
        key = self._key(asset)
        current = self._reserves[key]
        if amount > current:
            raise InsufficientReserve(f"Cannot debit {amount} of {key}: reserve is {current}")
        self._reserves[key] = current - amount

    def mint(self, holder: str, amount: int) -> None:
        _check_amount(amount)
        if amount == 0:
            return
        self._total_liquidity = (S(self._total_liquidity) + S(amount)).to_uint256()
        self._balances[holder] = self._balances.get(holder, 0) + amount

    def burn(self, holder: str, amount: int) -> None:
        """Decrease a holder's balance and the total by the same amount.

        Raises:
            InsufficientBalance: If the holder has less than amount
        """
        _check_amount(amount)
        current = self._balances.get(holder, 0)
        if amount > current:
            raise InsufficientBalance(
                f"Holder {holder} has {current} liquidity, cannot burn {amount}"
            )
        remaining = current - amount
        if remaining == 0:
            self._balances.pop(holder, None)
        else:
            self._balances[holder] = remaining
        self._total_liquidity -= amount

    # --- Atomicity support ---

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            reserves=dict(self._reserves),
            total_liquidity=self._total_liquidity,
            balances=dict(self._balances),
        )

    def restore(self, snapshot: LedgerSnapshot) -> None:
        """Roll back to a snapshot taken from this ledger."""
        self._reserves = dict(snapshot.reserves)
        self._total_liquidity = snapshot.total_liquidity
        self._balances = dict(snapshot.balances)
        logger.debug("ledger_restored", total_liquidity=snapshot.total_liquidity)

    def check_invariants(self) -> None:
        """Verify non-negativity, claim conservation and reserve backing.

        Raises:
            ArithmeticInvariant: If any of the three is violated
        """
        if any(r < 0 for r in self._reserves.values()) or self._total_liquidity < 0:
            raise ArithmeticInvariant("Negative reserve or total liquidity")
        if any(b < 0 for b in self._balances.values()):
            raise ArithmeticInvariant("Negative holder balance")

        claimed = sum(self._balances.values())
        if claimed != self._total_liquidity:
            raise ArithmeticInvariant(
                f"Holder balances sum to {claimed}, total liquidity is {self._total_liquidity}"
            )

        all_empty = all(r == 0 for r in self._reserves.values())
        if (self._total_liquidity == 0) != all_empty:
            raise ArithmeticInvariant(
                f"Total liquidity {self._total_liquidity} inconsistent with reserves "
                f"{self.reserves()}"
            )

    def _key(self, asset: str) -> str:
        key = normalize_asset(asset)
        if key not in self._reserves:
            raise InvalidInput(f"Asset {asset} not in pool")
        return key

    def __repr__(self) -> str:
        return (
            f"ReserveLedger(reserves={self.reserves()}, "
            f"total_liquidity={self._total_liquidity}, holders={len(self._balances)})"
        )
