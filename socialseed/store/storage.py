"""
Data-access layer for the social-network tables.

Each repository takes the connection to run on as an argument so the seed
driver can keep a whole pass inside one transaction. Inserts are written as
``ON CONFLICT DO NOTHING`` upserts keyed on natural keys: ``create`` returns
True when a row was written and False when it already existed.
"""

from __future__ import annotations

from typing import Any

from psycopg import Connection

from socialseed.domain.models import Comment, Follow, Post, User
from socialseed.infrastructure.pool import ConnectionPool


class _Repository:
    table: str

    def count(self, conn: Connection[Any]) -> int:
        row = conn.execute(f"SELECT COUNT(*) FROM {self.table}").fetchone()
        return int(row[0]) if row else 0


class UsersStore(_Repository):
    table = "users"

    def create(self, conn: Connection[Any], user: User) -> bool:
        cur = conn.execute(
            """
            INSERT INTO users (id, username, email, password, created_at)
            VALUES (%s, %s, %s, %s, %s)
            ON CONFLICT DO NOTHING
            """,
            (user.id, user.username, user.email, user.password_hash, user.created_at),
        )
        return cur.rowcount == 1


class PostsStore(_Repository):
    table = "posts"

    def create(self, conn: Connection[Any], post: Post) -> bool:
        cur = conn.execute(
            """
            INSERT INTO posts (id, user_id, title, content, tags, created_at)
            VALUES (%s, %s, %s, %s, %s, %s)
            ON CONFLICT (id) DO NOTHING
            """,
            (post.id, post.user_id, post.title, post.content, list(post.tags), post.created_at),
        )
        return cur.rowcount == 1


class CommentsStore(_Repository):
    table = "comments"

    def create(self, conn: Connection[Any], comment: Comment) -> bool:
        cur = conn.execute(
            """
            INSERT INTO comments (id, post_id, user_id, content, created_at)
            VALUES (%s, %s, %s, %s, %s)
            ON CONFLICT (id) DO NOTHING
            """,
            (comment.id, comment.post_id, comment.user_id, comment.content, comment.created_at),
        )
        return cur.rowcount == 1


class FollowersStore(_Repository):
    table = "followers"

    def create(self, conn: Connection[Any], follow: Follow) -> bool:
        cur = conn.execute(
            """
            INSERT INTO followers (user_id, follower_id, created_at)
            VALUES (%s, %s, %s)
            ON CONFLICT (user_id, follower_id) DO NOTHING
            """,
            (follow.user_id, follow.follower_id, follow.created_at),
        )
        return cur.rowcount == 1


class Storage:
    """
    Store handle bound to a connection pool.

    The pool is borrowed: Storage never closes it.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self.pool = pool
        self.users = UsersStore()
        self.posts = PostsStore()
        self.comments = CommentsStore()
        self.followers = FollowersStore()


def new_storage(pool: ConnectionPool) -> Storage:
    """Default StoreFactory: wrap a pool in a Storage handle."""
    return Storage(pool)


__all__ = [
    "CommentsStore",
    "FollowersStore",
    "PostsStore",
    "Storage",
    "UsersStore",
    "new_storage",
]
