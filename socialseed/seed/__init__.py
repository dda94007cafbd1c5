"""
Seed package for social-seed.

Re-exports the seed contracts, the deterministic generator and the default
transactional seed driver.
"""

from socialseed.seed.abstract import (
    ENTITY_ORDER,
    EntityCounts,
    SeedPlan,
    SeedReport,
    Seeder,
    StoreFactory,
)
from socialseed.seed.driver import seed
from socialseed.seed.generator import SeedData, generate

__all__ = [
    # Contracts
    "ENTITY_ORDER",
    "EntityCounts",
    "SeedPlan",
    "SeedReport",
    "Seeder",
    "StoreFactory",
    # Generation and driver
    "SeedData",
    "generate",
    "seed",
]
