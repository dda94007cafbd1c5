"""
Schema migration for the social-network tables the seed pass populates.

Statements are idempotent (IF NOT EXISTS), so `migrate` can run before every
seed without tracking applied versions.
"""

from __future__ import annotations

from typing import Tuple

import psycopg

from socialseed.errors import SchemaError
from socialseed.infrastructure.pool import ConnectionPool
from socialseed.utils.logging import get_logger

log = get_logger(__name__)

SCHEMA_STATEMENTS: Tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS users (
        id UUID PRIMARY KEY,
        username VARCHAR(100) NOT NULL UNIQUE,
        email VARCHAR(255) NOT NULL UNIQUE,
        password BYTEA NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS posts (
        id UUID PRIMARY KEY,
        user_id UUID NOT NULL REFERENCES users (id) ON DELETE CASCADE,
        title TEXT NOT NULL,
        content TEXT NOT NULL,
        tags TEXT[] NOT NULL DEFAULT '{}',
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS comments (
        id UUID PRIMARY KEY,
        post_id UUID NOT NULL REFERENCES posts (id) ON DELETE CASCADE,
        user_id UUID NOT NULL REFERENCES users (id) ON DELETE CASCADE,
        content TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS followers (
        user_id UUID NOT NULL REFERENCES users (id) ON DELETE CASCADE,
        follower_id UUID NOT NULL REFERENCES users (id) ON DELETE CASCADE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
        PRIMARY KEY (user_id, follower_id),
        CHECK (user_id <> follower_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_posts_user_id ON posts (user_id)",
    "CREATE INDEX IF NOT EXISTS idx_comments_post_id ON comments (post_id)",
)

# Children first, so TRUNCATE/DROP order never trips a foreign key.
TABLES: Tuple[str, ...] = ("followers", "comments", "posts", "users")


def apply_schema(pool: ConnectionPool) -> None:
    """
    Create the seed tables if they do not exist yet, in one transaction.

    Raises
    ------
    SchemaError
        If a statement fails or no connection could be checked out.
    """
    try:
        with pool.connection() as conn:
            with conn.transaction():
                for statement in SCHEMA_STATEMENTS:
                    conn.execute(statement)
    except (psycopg.Error, OSError) as exc:
        raise SchemaError(f"could not apply schema: {exc}") from exc
    log.info("Schema applied", extra={"tables": list(reversed(TABLES))})


__all__ = ["SCHEMA_STATEMENTS", "TABLES", "apply_schema"]
