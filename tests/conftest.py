"""Pytest configuration and fixtures."""

import pytest

from ammpool.constants import NATIVE_ASSET
from ammpool.events import PoolEvent
from ammpool.pool import Pool
from ammpool.transfer import InMemoryCustody
from tests.helpers import ADMIN, ALICE, BOB, TOKEN_A, TOKEN_B, TOKEN_C, fund_accounts


@pytest.fixture
def custody() -> InMemoryCustody:
    """Custody with ALICE and BOB funded in TOKEN_A, TOKEN_B, TOKEN_C and native."""
    c = InMemoryCustody()
    fund_accounts(c, [TOKEN_A, TOKEN_B, TOKEN_C, NATIVE_ASSET], [ALICE, BOB])
    return c


@pytest.fixture
def pool(custody: InMemoryCustody) -> Pool:
    """An empty TOKEN_A/TOKEN_B pool with the default 30 bps fee."""
    return Pool([TOKEN_A, TOKEN_B], custody, admin=ADMIN)


@pytest.fixture
def seeded_pool(pool: Pool) -> Pool:
    """The TOKEN_A/TOKEN_B pool after ALICE bootstraps it with [1000, 1000]."""
    pool.add_liquidity(ALICE, [1000, 1000])
    return pool


@pytest.fixture
def native_pool(custody: InMemoryCustody) -> Pool:
    """An empty native/TOKEN_A pool."""
    return Pool([NATIVE_ASSET, TOKEN_A], custody, admin=ADMIN)


@pytest.fixture
def recorded_events(pool: Pool) -> list[PoolEvent]:
    """Events emitted by the `pool` fixture, in order."""
    events: list[PoolEvent] = []
    pool.events.subscribe(events.append)
    return events
