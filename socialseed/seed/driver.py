"""
Seed driver: one idempotent, transactional population pass.

Strategy
--------
* Every generated entity has a natural-key identifier and is written with an
  ``ON CONFLICT DO NOTHING`` upsert, so a re-run converges instead of
  duplicating rows.
* Entities are written in dependency order (users, posts, comments, follows)
  on a single pooled connection inside one transaction.
* The first failed insert aborts the pass; the transaction rolls back and a
  SeedError names the entity that failed.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional

from socialseed.errors import SeedError
from socialseed.infrastructure.pool import ConnectionPool
from socialseed.seed.abstract import SeedPlan, SeedReport
from socialseed.seed.generator import SeedData, generate
from socialseed.store.storage import Storage
from socialseed.utils.logging import get_logger

log = get_logger(__name__)


def _insert_all(
    conn: Any,
    entity: str,
    rows: Iterable[Any],
    create: Callable[[Any, Any], bool],
    report: SeedReport,
) -> None:
    for index, row in enumerate(rows):
        try:
            created = create(conn, row)
        except Exception as exc:
            raise SeedError(
                f"failed to create {entity} #{index}: {exc}", entity=entity, index=index
            ) from exc
        report.record(entity, created)

    counts = report.counts[entity]
    log.info(
        f"[SEED] {entity}: {counts.inserted} inserted, {counts.skipped} already present",
        extra={"entity": entity, "inserted": counts.inserted, "skipped": counts.skipped},
    )


def seed(
    storage: Storage,
    pool: ConnectionPool,
    plan: Optional[SeedPlan] = None,
    data: Optional[SeedData] = None,
) -> SeedReport:
    """
    Populate the store with baseline users, posts, comments and follow edges.

    Parameters
    ----------
    storage : Storage
        Store handle whose repositories perform the inserts.
    pool : ConnectionPool
        Pool the pass borrows one connection from for its transaction.
    plan : SeedPlan, optional
        Volumes and RNG seed. Defaults to SeedPlan().
    data : SeedData, optional
        Pre-generated entities; generated from ``plan`` when omitted.

    Raises
    ------
    SeedError
        If checking out the connection, any insert, or the commit fails.
        Nothing from the pass is kept.
    """
    plan = plan or SeedPlan()
    data = data or generate(plan)
    report = SeedReport()

    log.info(
        "[SEED START]",
        extra={
            "users": len(data.users),
            "posts": len(data.posts),
            "comments": len(data.comments),
            "follows": len(data.follows),
        },
    )

    try:
        with pool.connection() as conn:
            with conn.transaction():
                _insert_all(conn, "users", data.users, storage.users.create, report)
                _insert_all(conn, "posts", data.posts, storage.posts.create, report)
                _insert_all(conn, "comments", data.comments, storage.comments.create, report)
                _insert_all(conn, "follows", data.follows, storage.followers.create, report)
    except SeedError:
        log.error("[SEED ROLLED BACK] no rows from this pass were kept")
        raise
    except Exception as exc:
        raise SeedError(f"seed transaction failed: {exc}") from exc

    log.info(
        "[SEED COMPLETE]",
        extra={"inserted": report.inserted, "skipped": report.skipped},
    )
    return report


__all__ = ["seed"]
