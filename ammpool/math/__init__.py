"""Mathematical utilities for the pool engine.

This package provides the fixed-point primitives used by liquidity issuance:
- log_2 / exp_2: 64-fractional-bit binary log and exponent
- floor_geometric_mean: bootstrap liquidity for the first deposit
"""

from ammpool.math.fixed_point import exp_2, floor_geometric_mean, from_uint, log_2, to_uint

__all__ = ["exp_2", "floor_geometric_mean", "from_uint", "log_2", "to_uint"]
