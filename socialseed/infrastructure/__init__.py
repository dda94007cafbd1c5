"""
Infrastructure package for social-seed.

Centralizes database connectivity concerns (pool bounds, lifetime rotation,
scoped acquisition). Keep this layer focused on I/O and resource management,
decoupled from store and seed logic.
"""

from socialseed.infrastructure.db_factory import PoolConfig, new_pool, open_pool
from socialseed.infrastructure.pool import ConnectionPool, PoolStats

__all__ = [
    "ConnectionPool",
    "PoolConfig",
    "PoolStats",
    "new_pool",
    "open_pool",
]
