"""Value transport between callers and pool custody.

The pool only talks to the AssetTransfer protocol. InMemoryCustody is the
reference transport used by the HTTP service and the tests: it keeps
per-account balances for every asset, the native sentinel included.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import structlog

from ammpool.assets import normalize_asset
from ammpool.errors import InvalidInput, TransferFailed

logger = structlog.get_logger()

# Account holding everything in pool custody
POOL_ACCOUNT = "pool"


@runtime_checkable
class AssetTransfer(Protocol):
    """Protocol for moving value in and out of pool custody.

    Implementations raise TransferFailed on insufficient balance/allowance
    or transport errors. A pull from or push to the custody account itself
    is a failed transfer. Implementations are treated as untrusted: a call
    may try to re-enter the pool.
    """

    def pull(self, asset: str, sender: str, amount: int) -> None:
        """Move amount of asset from sender into pool custody."""
        ...

    def push(self, asset: str, recipient: str, amount: int) -> None:
        """Move amount of asset out of pool custody to recipient."""
        ...

    def balance_of(self, asset: str) -> int:
        """Amount of asset currently held in pool custody."""
        ...


class InMemoryCustody:
    """Dictionary-backed AssetTransfer implementation.

    Usage:
        custody = InMemoryCustody()
        custody.fund("0xaaaa", "alice", 1_000)
        custody.pull("0xaaaa", "alice", 400)  # alice: 600, pool: 400
    """

    def __init__(self, pool_account: str = POOL_ACCOUNT) -> None:
        self.pool_account = pool_account
        self._balances: dict[tuple[str, str], int] = {}

    def account_balance(self, asset: str, account: str) -> int:
        return self._balances.get((normalize_asset(asset), account), 0)

    def balance_of(self, asset: str) -> int:
        return self.account_balance(asset, self.pool_account)

    def fund(self, asset: str, account: str, amount: int) -> None:
        """Credit an account out of thin air (faucet for tests and local runs)."""
        _check_amount(amount)
        key = (normalize_asset(asset), account)
        self._balances[key] = self._balances.get(key, 0) + amount
        logger.debug("custody_funded", asset=key[0], account=account, amount=amount)

    def pull(self, asset: str, sender: str, amount: int) -> None:
        self._move(asset, sender, self.pool_account, amount)

    def push(self, asset: str, recipient: str, amount: int) -> None:
        self._move(asset, self.pool_account, recipient, amount)

    def donate(self, asset: str, sender: str, amount: int) -> None:
        """Transfer directly into custody without going through the pool.

        The pool's ledger does not see the transfer, so the amount shows
        up as fee surplus.
        """
        self._move(asset, sender, self.pool_account, amount)

    def _move(self, asset: str, sender: str, recipient: str, amount: int) -> None:
        _check_amount(amount)
        # The pool account is never a counterparty of its own custody
        if sender == recipient:
            raise TransferFailed(f"{sender} cannot transfer to itself")
        if amount == 0:
            return
        asset_key = normalize_asset(asset)
        available = self._balances.get((asset_key, sender), 0)
        if available < amount:
            raise TransferFailed(
                f"Transfer of {amount} {asset_key} from {sender} failed: balance {available}"
            )
        self._balances[(asset_key, sender)] = available - amount
        self._balances[(asset_key, recipient)] = self._balances.get((asset_key, recipient), 0) + amount

    def __repr__(self) -> str:
        return f"InMemoryCustody(pool_account={self.pool_account!r}, entries={len(self._balances)})"


def _check_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
        raise InvalidInput(f"Transfer amount must be a non-negative integer: {amount!r}")
