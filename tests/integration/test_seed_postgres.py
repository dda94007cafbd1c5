"""
End-to-end seed runs against a real PostgreSQL database.

Skipped unless the database at TEST_DB_ADDR (or DB_ADDR, or the default local
address) is reachable.
"""

from __future__ import annotations

import threading
import time
from typing import Dict, Generator

import pytest

from socialseed.errors import SeedError
from socialseed.infrastructure.db_factory import PoolConfig, new_pool
from socialseed.infrastructure.pool import ConnectionPool
from socialseed.orchestrator import run_seed
from socialseed.seed.abstract import SeedPlan
from socialseed.seed.driver import seed
from socialseed.store.schema import TABLES, apply_schema
from socialseed.store.storage import PostsStore, Storage, new_storage

pytestmark = pytest.mark.integration

PLAN = SeedPlan(users=20, posts=30, comments=60, follows=40, random_seed=11)


@pytest.fixture
def config(test_addr: str, require_db: None) -> PoolConfig:
    return PoolConfig.build(addr=test_addr, max_open_conns=3, max_idle_conns=3, max_lifetime="15m")


@pytest.fixture
def pool(config: PoolConfig) -> Generator[ConnectionPool, None, None]:
    pool = new_pool(config)
    apply_schema(pool)
    with pool.connection() as conn:
        conn.execute(f"TRUNCATE TABLE {', '.join(TABLES)} CASCADE")
        conn.commit()
    yield pool
    pool.close()


def _counts(pool: ConnectionPool) -> Dict[str, int]:
    storage = new_storage(pool)
    with pool.connection() as conn:
        return {
            "users": storage.users.count(conn),
            "posts": storage.posts.count(conn),
            "comments": storage.comments.count(conn),
            "followers": storage.followers.count(conn),
        }


def test_rerunning_seed_leaves_row_counts_unchanged(pool: ConnectionPool) -> None:
    first = seed(new_storage(pool), pool, PLAN)
    after_first = _counts(pool)

    second = seed(new_storage(pool), pool, PLAN)

    assert after_first == {"users": 20, "posts": 30, "comments": 60, "followers": 40}
    assert _counts(pool) == after_first
    assert first.inserted == sum(after_first.values())
    assert second.inserted == 0


class _FailingPosts(PostsStore):
    def __init__(self, fail_at: int) -> None:
        self.fail_at = fail_at
        self.calls = 0

    def create(self, conn, post) -> bool:
        if self.calls == self.fail_at:
            raise RuntimeError("disk full")
        self.calls += 1
        return super().create(conn, post)


def test_failed_seed_rolls_back(pool: ConnectionPool) -> None:
    storage = Storage(pool)
    storage.posts = _FailingPosts(fail_at=5)

    with pytest.raises(SeedError) as excinfo:
        seed(storage, pool, PLAN)

    assert excinfo.value.entity == "posts"
    assert _counts(pool) == {"users": 0, "posts": 0, "comments": 0, "followers": 0}


def test_orchestrated_run_closes_pool(config: PoolConfig, pool: ConnectionPool) -> None:
    opened = []

    def pool_factory(cfg: PoolConfig) -> ConnectionPool:
        p = new_pool(cfg)
        opened.append(p)
        return p

    report = run_seed(config, PLAN, pool_factory=pool_factory)

    assert report.inserted == 150
    assert opened[0].closed


def test_real_pool_blocks_at_max_open(config: PoolConfig) -> None:
    pool = new_pool(config.model_copy(update={"max_open_conns": 1, "max_idle_conns": 1}))
    held = pool.getconn()
    done = threading.Event()

    def waiter() -> None:
        with pool.connection() as conn:
            conn.execute("SELECT 1")
        done.set()

    thread = threading.Thread(target=waiter)
    thread.start()
    time.sleep(0.1)
    assert not done.is_set()

    pool.putconn(held)
    assert done.wait(timeout=5)
    thread.join(timeout=5)
    pool.close()
