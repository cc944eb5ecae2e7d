"""Pool constants.

Centralizes the asset sentinel, fee parameters and role identifiers.
"""

# Native pool currency (the zero address), as opposed to a registered token
NATIVE_ASSET = "0x0000000000000000000000000000000000000000"

# Swap fees are expressed in basis points of the input amount
FEE_DENOMINATOR = 10_000

# Default trading fee: 30 bps (0.3%)
DEFAULT_FEE_BPS = 30

# Minimum number of assets a pool can be created with
MIN_ASSETS = 2

# Role granted to the pool creator; gates pause, unpause, fee withdrawal and fee updates
DEFAULT_ADMIN_ROLE = "0x" + "00" * 32
