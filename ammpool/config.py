"""Pool configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from ammpool.constants import DEFAULT_FEE_BPS, NATIVE_ASSET

# Native currency plus two tokens, matching the reference deployment
DEFAULT_ASSETS = (
    NATIVE_ASSET,
    "0x0b925ed163218f6662a35e0f0371ac234f9e9371",
    "0xae7ab96520de3a18e5e111b5eaab095312d7fe84",
)


@dataclass(frozen=True)
class PoolConfig:
    """Centralized configuration for a pool instance.

    Attributes:
        assets: Asset identifiers, in reserve order (default: native + 2 tokens)
        fee_bps: Trading fee in basis points (default: 30 = 0.3%)
        admin: Account granted the admin role at creation
    """

    assets: tuple[str, ...] = field(default=DEFAULT_ASSETS)
    fee_bps: int = DEFAULT_FEE_BPS
    admin: str = "admin"

    @classmethod
    def from_env(cls) -> PoolConfig:
        """Build a config from environment variables.

        - AMM_ASSETS: comma-separated asset identifiers
        - AMM_FEE_BPS: fee in basis points
        - AMM_ADMIN: admin account
        """
        defaults = cls()
        raw_assets = os.environ.get("AMM_ASSETS")
        assets = (
            tuple(a.strip() for a in raw_assets.split(",") if a.strip())
            if raw_assets
            else defaults.assets
        )
        return cls(
            assets=assets,
            fee_bps=int(os.environ.get("AMM_FEE_BPS", str(defaults.fee_bps))),
            admin=os.environ.get("AMM_ADMIN", defaults.admin),
        )


# Default configuration instance
DEFAULT_POOL_CONFIG = PoolConfig()
