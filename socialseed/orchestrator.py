"""
Orchestrator for a seed run: pool -> store -> seed -> release.

Usage (example from CLI):
    from socialseed.infrastructure.db_factory import PoolConfig
    from socialseed.orchestrator import run_seed

    config = PoolConfig.build(addr="postgres://...", max_open_conns=3, max_idle_conns=3)
    report = run_seed(config)
    print(report.as_dict())

The pool is closed on every path once it has been constructed. If construction
fails there is nothing to release and the seeder is never invoked.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Callable, Optional

from socialseed.infrastructure.db_factory import PoolConfig, new_pool
from socialseed.infrastructure.pool import ConnectionPool
from socialseed.seed.abstract import SeedPlan, SeedReport, Seeder, StoreFactory
from socialseed.seed.driver import seed as default_seeder
from socialseed.store.schema import apply_schema
from socialseed.store.storage import new_storage
from socialseed.utils.logging import get_logger
from socialseed.utils.profiler import profile_block

log = get_logger(__name__)

PoolFactory = Callable[[PoolConfig], ConnectionPool]


def run_seed(
    config: PoolConfig,
    plan: Optional[SeedPlan] = None,
    *,
    store_factory: StoreFactory = new_storage,
    seeder: Seeder = default_seeder,
    pool_factory: PoolFactory = new_pool,
    migrate: bool = False,
) -> SeedReport:
    """
    Run one seed pass against the database described by ``config``.

    Parameters
    ----------
    config : PoolConfig
        Validated pool parameters.
    plan : SeedPlan | None
        Volumes for the pass. Defaults to SeedPlan().
    store_factory : StoreFactory
        Wraps the pool in a store handle. Defaults to `new_storage`.
    seeder : Seeder
        Runs the pass. Defaults to the transactional upsert driver.
    pool_factory : Callable[[PoolConfig], ConnectionPool]
        Builds and verifies the pool. Defaults to `new_pool`.
    migrate : bool
        Apply the schema before seeding.

    Returns
    -------
    SeedReport
        Per-entity inserted/skipped counts with the profiler summary attached.

    Raises
    ------
    ConfigError, DatabaseConnectionError
        From pool construction; the seeder is not invoked.
    SeedError
        From the seed pass; the pool is still closed.
    """
    plan = plan or SeedPlan()
    pool = pool_factory(config)
    try:
        if migrate:
            apply_schema(pool)
        storage = store_factory(pool)
        with profile_block("seed") as stats:
            try:
                report = seeder(storage, pool, plan)
            finally:
                log.debug("Pool usage after seed pass", extra=asdict(pool.stats()))
        report.profile = stats.as_dict()
        log.info(
            f"[RUN COMPLETE] inserted={report.inserted} skipped={report.skipped} "
            f"in {stats.duration_seconds:.2f}s",
            extra={"report": report.as_dict()},
        )
        return report
    finally:
        pool.close()


def run_migrate(config: PoolConfig, *, pool_factory: PoolFactory = new_pool) -> None:
    """Apply the schema on a short-lived pool."""
    pool = pool_factory(config)
    try:
        apply_schema(pool)
    finally:
        pool.close()


__all__ = ["PoolFactory", "run_migrate", "run_seed"]
