"""Pool facade: the caller-facing operations.

Every operation runs inside the pool's exclusive section:
1. validate and price against the current ledger
2. pull inputs from the caller (journaled)
3. mutate the ledger (after a snapshot)
4. push outputs
5. on any failure, restore the snapshot, reverse journaled transfers, re-raise

Nested entry from the same thread (a transfer collaborator calling back
into the pool) is rejected with ReentrantCall. Other threads wait on the
lock. Events are emitted after the operation commits.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING

import structlog

from ammpool.access import AccessControl, PauseGate
from ammpool.assets import AssetSet
from ammpool.errors import InvalidInput, ReentrantCall
from ammpool.events import (
    EventBus,
    FeeRateUpdated,
    FeesWithdrawn,
    LiquidityAdded,
    LiquidityRemoved,
    Paused,
    PoolEvent,
    Swap,
    Unpaused,
)
from ammpool.fees import FeeAccrual
from ammpool.ledger import ReserveLedger
from ammpool.liquidity import DepositQuote, LiquidityIssuer, RedemptionQuote
from ammpool.swap import FeePolicy, SwapEngine, SwapQuote
from ammpool.transfer import AssetTransfer

if TYPE_CHECKING:
    from ammpool.config import PoolConfig

logger = structlog.get_logger()


class _Transaction:
    """Journal of one operation's ledger snapshot and completed transfers."""

    def __init__(self, ledger: ReserveLedger, transfer: AssetTransfer) -> None:
        self._ledger = ledger
        self._transfer = transfer
        self._snapshot = ledger.snapshot()
        self._pulled: list[tuple[str, str, int]] = []
        self._pushed: list[tuple[str, str, int]] = []

    def pull(self, asset: str, sender: str, amount: int) -> None:
        if amount == 0:
            return
        self._transfer.pull(asset, sender, amount)
        self._pulled.append((asset, sender, amount))

    def push(self, asset: str, recipient: str, amount: int) -> None:
        if amount == 0:
            return
        self._transfer.push(asset, recipient, amount)
        self._pushed.append((asset, recipient, amount))

    def rollback(self) -> None:
        """Restore the ledger and reverse transfers, newest first."""
        self._ledger.restore(self._snapshot)
        for asset, recipient, amount in reversed(self._pushed):
            try:
                self._transfer.pull(asset, recipient, amount)
            except Exception:
                logger.exception("rollback_pull_failed", asset=asset, account=recipient, amount=amount)
        for asset, sender, amount in reversed(self._pulled):
            try:
                self._transfer.push(asset, sender, amount)
            except Exception:
                logger.exception("rollback_refund_failed", asset=asset, account=sender, amount=amount)


class Pool:
    """Multi-asset constant-product pool.

    Args:
        assets: Asset identifiers, fixed for the pool's lifetime
        transfer: Value transport collaborator
        admin: Account granted DEFAULT_ADMIN_ROLE
        fee_policy: Trading fee (default 30 bps)
        events: Event bus observers subscribe to (default: a fresh bus)

    Raises:
        InvalidConfiguration: If the asset set is invalid
    """

    def __init__(
        self,
        assets: Sequence[str],
        transfer: AssetTransfer,
        admin: str,
        fee_policy: FeePolicy | None = None,
        events: EventBus | None = None,
    ) -> None:
        self.assets = AssetSet(assets)
        self.admin = admin
        self.transfer = transfer
        self.ledger = ReserveLedger(self.assets)
        self.issuer = LiquidityIssuer(self.ledger)
        self.engine = SwapEngine(self.ledger, fee_policy)
        self.fees = FeeAccrual(self.ledger, transfer)
        self.access = AccessControl(admin)
        self.gate = PauseGate()
        self.events = events or EventBus()

        self._lock = threading.RLock()
        self._entered = False

        logger.info(
            "pool_created",
            assets=list(self.assets),
            fee_bps=self.engine.fee_bps,
            admin=admin,
        )

    @classmethod
    def from_config(cls, config: PoolConfig, transfer: AssetTransfer) -> Pool:
        return cls(
            assets=config.assets,
            transfer=transfer,
            admin=config.admin,
            fee_policy=FeePolicy(fee_bps=config.fee_bps),
        )

    # =========================================================================
    # Exclusive section
    # =========================================================================

    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        with self._lock:
            if self._entered:
                raise ReentrantCall(f"{name} called while another pool operation is executing")
            self._entered = True
            try:
                yield
            finally:
                self._entered = False

    @contextmanager
    def _read(self) -> Iterator[None]:
        with self._lock:
            if self._entered:
                raise ReentrantCall("Pool state read while an operation is executing")
            yield

    @contextmanager
    def _transaction(self, name: str) -> Iterator[_Transaction]:
        tx = _Transaction(self.ledger, self.transfer)
        try:
            yield tx
            self.ledger.check_invariants()
            self.fees.surpluses()
        except BaseException as err:
            tx.rollback()
            logger.debug("operation_aborted", operation=name, error=type(err).__name__)
            raise

    def _emit(self, event: PoolEvent) -> None:
        self.events.emit(event)

    # =========================================================================
    # Liquidity
    # =========================================================================

    def add_liquidity(self, provider: str, amounts: Sequence[int], value: int = 0) -> DepositQuote:
        """Deposit assets and mint liquidity to the provider.

        Args:
            provider: Account depositing and receiving liquidity
            amounts: Maximum amount of each asset offered, ordered like the asset set
            value: Native value attached to the call; must equal the native
                entry of amounts when the pool has a native asset, else 0

        Returns:
            DepositQuote with the liquidity minted and the amounts collected.
            Offered native value above the collected amount is refunded.
        """
        amounts = list(amounts)
        with self._operation("add_liquidity"):
            self.gate.require_active()
            quote = self.issuer.quote_deposit(amounts)
            native = self.assets.native_index
            self._check_attached_value(value, amounts[native] if native is not None else None)

            with self._transaction("add_liquidity") as tx:
                for i, asset in enumerate(self.assets):
                    tx.pull(asset, provider, value if i == native else quote.amounts[i])
                self.issuer.apply_deposit(provider, quote)
                if native is not None:
                    tx.push(self.assets[native], provider, value - quote.amounts[native])

        logger.info(
            "liquidity_added",
            provider=provider,
            amounts=list(quote.amounts),
            liquidity=quote.liquidity,
            bootstrap=quote.bootstrap,
        )
        self._emit(LiquidityAdded(provider, quote.amounts, quote.liquidity))
        return quote

    def remove_liquidity(self, provider: str, liquidity: int) -> RedemptionQuote:
        """Burn liquidity and pay the provider its share of every reserve."""
        with self._operation("remove_liquidity"):
            self.gate.require_active()
            quote = self.issuer.quote_redemption(provider, liquidity)

            with self._transaction("remove_liquidity") as tx:
                self.issuer.apply_redemption(provider, quote)
                for asset, amount in zip(self.assets, quote.amounts, strict=True):
                    tx.push(asset, provider, amount)

        logger.info(
            "liquidity_removed",
            provider=provider,
            amounts=list(quote.amounts),
            liquidity=quote.liquidity,
        )
        self._emit(LiquidityRemoved(provider, quote.amounts, quote.liquidity))
        return quote

    # =========================================================================
    # Swaps
    # =========================================================================

    def swap(
        self,
        user: str,
        asset_in: int,
        asset_out: int,
        amount_in: int,
        min_amount_out: int,
        value: int = 0,
    ) -> SwapQuote:
        """Sell amount_in of asset_in for at least min_amount_out of asset_out.

        Args:
            value: Native value attached to the call; must equal amount_in
                when asset_in is the native asset, else 0
        """
        with self._operation("swap"):
            self.gate.require_active()
            quote = self.engine.quote(asset_in, asset_out, amount_in, min_amount_out)
            self._check_attached_value(
                value, amount_in if self.assets.is_native(asset_in) else None
            )

            with self._transaction("swap") as tx:
                tx.pull(self.assets[asset_in], user, amount_in)
                self.engine.apply(quote)
                tx.push(self.assets[asset_out], user, quote.amount_out)

        logger.info(
            "swap_executed",
            user=user,
            asset_in=asset_in,
            asset_out=asset_out,
            amount_in=amount_in,
            amount_out=quote.amount_out,
        )
        self._emit(Swap(user, asset_in, asset_out, amount_in, quote.amount_out))
        return quote

    # =========================================================================
    # Admin
    # =========================================================================

    def withdraw_fees(self, caller: str, asset: str, to: str) -> int:
        """Send an asset's fee surplus to `to`. Allowed while paused.

        Returns:
            Amount withdrawn
        """
        with self._operation("withdraw_fees"):
            self.access.require_admin(caller)
            asset = self.assets[self.assets.index_of(asset)]
            amount = self.fees.quote_withdrawal(asset)

            with self._transaction("withdraw_fees") as tx:
                tx.push(asset, to, amount)

        logger.info("fees_withdrawn", asset=asset, to=to, amount=amount, sender=caller)
        self._emit(FeesWithdrawn(asset, to, amount))
        return amount

    def set_fee_rate(self, caller: str, fee_bps: int) -> None:
        with self._operation("set_fee_rate"):
            self.access.require_admin(caller)
            self.engine.fee_policy.set_fee_bps(fee_bps)

        logger.info("fee_rate_updated", fee_bps=fee_bps, sender=caller)
        self._emit(FeeRateUpdated(fee_bps))

    def pause(self, caller: str) -> None:
        with self._operation("pause"):
            self.access.require_admin(caller)
            self.gate.pause()

        logger.info("pool_paused", sender=caller)
        self._emit(Paused(caller))

    def unpause(self, caller: str) -> None:
        with self._operation("unpause"):
            self.access.require_admin(caller)
            self.gate.unpause()

        logger.info("pool_unpaused", sender=caller)
        self._emit(Unpaused(caller))

    # =========================================================================
    # Queries
    # =========================================================================

    def reserves(self) -> dict[str, int]:
        with self._read():
            return dict(zip(self.assets, self.ledger.reserves(), strict=True))

    def reserve_of(self, asset: str) -> int:
        with self._read():
            return self.ledger.reserve_of(asset)

    @property
    def total_liquidity(self) -> int:
        with self._read():
            return self.ledger.total_liquidity

    def liquidity_of(self, holder: str) -> int:
        with self._read():
            return self.ledger.liquidity_of(holder)

    def get_required_amounts(self, reference_amount: int) -> DepositQuote:
        with self._read():
            return self.issuer.get_required_amounts(reference_amount)

    def quote_swap(self, asset_in: int, asset_out: int, amount_in: int) -> SwapQuote:
        with self._read():
            return self.engine.quote(asset_in, asset_out, amount_in)

    def quote_amount_in(self, asset_in: int, asset_out: int, amount_out: int) -> int:
        """Input needed for a swap to return at least amount_out."""
        with self._read():
            return self.engine.quote_amount_in(asset_in, asset_out, amount_out)

    def fee_surplus(self) -> dict[str, int]:
        with self._read():
            return dict(zip(self.assets, self.fees.surpluses(), strict=True))

    @property
    def fee_bps(self) -> int:
        return self.engine.fee_bps

    @property
    def paused(self) -> bool:
        return not self.gate.is_active()

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _check_attached_value(value: int, expected: int | None) -> None:
        """Native value must match the native input exactly, or be zero."""
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise InvalidInput(f"Attached value must be a non-negative integer: {value!r}")
        if expected is None:
            if value != 0:
                raise InvalidInput(f"Attached value {value} but no native asset is deposited")
        elif value != expected:
            raise InvalidInput(f"Attached value {value} does not match native amount {expected}")

    def __repr__(self) -> str:
        return f"Pool(assets={list(self.assets)!r}, fee_bps={self.engine.fee_bps})"
