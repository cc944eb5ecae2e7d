"""HTTP surface for the pool."""
