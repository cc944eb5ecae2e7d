"""Pool error classes.

Every failure aborts the whole operation with no observable state change.
Nothing is retried internally; retries belong to the caller.
"""


class PoolError(Exception):
    """Base error for pool operations."""

    pass


class InvalidConfiguration(PoolError):
    """Bad asset set at construction. Construction aborts."""

    pass


class InvalidInput(PoolError):
    """Malformed caller arguments."""

    pass


class InsufficientInput(PoolError):
    """Offered amount is below what the operation requires."""

    pass


class InsufficientBalance(PoolError):
    """Holder's liquidity balance is below the requested amount."""

    pass


class InsufficientReserve(PoolError):
    """Debit would drive a reserve negative."""

    pass


class InsufficientLiquidity(PoolError):
    """Reserves cannot satisfy the swap."""

    pass


class SlippageExceeded(PoolError):
    """Swap output fell below the caller's minimum."""

    pass


class ArithmeticInvariant(PoolError):
    """A computed quantity violates a required positivity or precision bound."""

    pass


class EmptyPool(PoolError):
    """Operation requires existing liquidity but the pool is empty."""

    pass


class NoFeesAvailable(PoolError):
    """Held balance equals the recorded reserve."""

    pass


class PoolPaused(PoolError):
    """Deposit, redemption and swap are disabled while the pool is paused."""

    pass


class TransferFailed(PoolError):
    """Value transport rejected a pull or push."""

    pass


class Unauthorized(PoolError):
    """Caller lacks the role required for an admin operation."""

    pass


class ReentrantCall(PoolError):
    """Nested entry into a pool operation while another one is executing."""

    pass
