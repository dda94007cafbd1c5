"""
Domain package for social-seed.

Exports the entities the seed pass writes. Keep this package focused on data
definitions and validation concerns.
"""

from socialseed.domain.models import Comment, Follow, Post, User

__all__ = [
    "Comment",
    "Follow",
    "Post",
    "User",
]
