"""
Store package for social-seed.

The Storage handle borrows a connection pool and exposes the per-table
operations the seed pass needs. It never closes the pool it was given.
"""

from socialseed.store.schema import apply_schema
from socialseed.store.storage import (
    CommentsStore,
    FollowersStore,
    PostsStore,
    Storage,
    UsersStore,
    new_storage,
)

__all__ = [
    "CommentsStore",
    "FollowersStore",
    "PostsStore",
    "Storage",
    "UsersStore",
    "apply_schema",
    "new_storage",
]
