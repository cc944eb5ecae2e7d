"""Multi-asset constant-product pool engine."""

from ammpool.pool import Pool

__version__ = "0.1.0"
__all__ = ["Pool", "__version__"]
