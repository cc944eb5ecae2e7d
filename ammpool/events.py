"""Pool events delivered to observers after an operation commits."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import structlog

logger = structlog.get_logger()


@dataclass(frozen=True)
class LiquidityAdded:
    provider: str
    amounts: tuple[int, ...]
    liquidity_minted: int


@dataclass(frozen=True)
class LiquidityRemoved:
    provider: str
    amounts: tuple[int, ...]
    liquidity_burned: int


@dataclass(frozen=True)
class Swap:
    user: str
    asset_in: int
    asset_out: int
    amount_in: int
    amount_out: int


@dataclass(frozen=True)
class FeeRateUpdated:
    new_rate: int


@dataclass(frozen=True)
class FeesWithdrawn:
    asset: str
    to: str
    amount: int


@dataclass(frozen=True)
class Paused:
    account: str


@dataclass(frozen=True)
class Unpaused:
    account: str


PoolEvent = (
    LiquidityAdded | LiquidityRemoved | Swap | FeeRateUpdated | FeesWithdrawn | Paused | Unpaused
)

EventHandler = Callable[[PoolEvent], None]


class EventBus:
    """Fan-out of committed pool events to subscribers.

    A failing subscriber is logged and skipped; the operation that
    produced the event has already committed.
    """

    def __init__(self) -> None:
        self._handlers: list[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        self._handlers.remove(handler)

    def emit(self, event: PoolEvent) -> None:
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception:
                logger.exception("event_handler_failed", event_type=type(event).__name__)
