"""
social-seed - populate a social-network PostgreSQL schema with synthetic data.

The package provides:

- A bounded connection pool (max open, max idle, lifetime rotation)
- A store handle with upsert-based repositories for users, posts,
  comments and follow edges
- An idempotent, transactional seed driver
- A Typer CLI (`socialseed seed | migrate | info`)
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from socialseed.config import Settings, get_settings
from socialseed.errors import (
    ClosedError,
    ConfigError,
    DatabaseConnectionError,
    PoolTimeout,
    SchemaError,
    SeedError,
    SocialSeedError,
)
from socialseed.infrastructure.db_factory import PoolConfig, new_pool, open_pool
from socialseed.infrastructure.pool import ConnectionPool, PoolStats
from socialseed.orchestrator import run_migrate, run_seed
from socialseed.seed.abstract import SeedPlan, SeedReport, Seeder, StoreFactory
from socialseed.seed.driver import seed
from socialseed.store.storage import Storage, new_storage
from socialseed.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Errors
    "SocialSeedError",
    "ConfigError",
    "DatabaseConnectionError",
    "SeedError",
    "SchemaError",
    "ClosedError",
    "PoolTimeout",
    # Pool
    "ConnectionPool",
    "PoolConfig",
    "PoolStats",
    "new_pool",
    "open_pool",
    # Store and seed
    "Storage",
    "new_storage",
    "SeedPlan",
    "SeedReport",
    "Seeder",
    "StoreFactory",
    "seed",
    # Orchestration
    "run_seed",
    "run_migrate",
    # Logging
    "configure_logging",
    "get_logger",
]
