"""Fee surplus accounting.

Surplus is whatever custody holds above the recorded reserve. Withdrawing
it never touches the reserve, so liquidity holders' claims are unaffected.
"""

from __future__ import annotations

import structlog

from ammpool.errors import ArithmeticInvariant, NoFeesAvailable
from ammpool.ledger import ReserveLedger
from ammpool.transfer import AssetTransfer

logger = structlog.get_logger()


class FeeAccrual:
    """Derives withdrawable surplus per asset from custody and ledger."""

    def __init__(self, ledger: ReserveLedger, transfer: AssetTransfer) -> None:
        self.ledger = ledger
        self.transfer = transfer

    def surplus(self, asset: str) -> int:
        """observed_balance(asset) - reserve[asset]

        Raises:
            ArithmeticInvariant: If custody holds less than the reserve
        """
        reserve = self.ledger.reserve_of(asset)
        observed = self.transfer.balance_of(asset)
        if observed < reserve:
            raise ArithmeticInvariant(
                f"Custody holds {observed} of {asset}, below reserve {reserve}"
            )
        return observed - reserve

    def surpluses(self) -> list[int]:
        """Surplus of every asset, ordered like the asset set."""
        return [self.surplus(asset) for asset in self.ledger.assets]

    def quote_withdrawal(self, asset: str) -> int:
        """Amount fee withdrawal would send for an asset.

        Raises:
            NoFeesAvailable: If there is no surplus
        """
        amount = self.surplus(asset)
        if amount == 0:
            raise NoFeesAvailable(f"No fee surplus for {asset}")
        logger.debug("fee_withdrawal_quoted", asset=asset, amount=amount)
        return amount
