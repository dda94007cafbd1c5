"""
Domain models for social-seed.

Defines the rows of the social-network schema created by
`socialseed.store.schema`. Identifiers are UUIDs derived from natural keys so
that repeated seed runs address the same rows.
"""
from __future__ import annotations

from datetime import datetime
from typing import List
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

_FROZEN = {
    "frozen": True,
    "populate_by_name": True,
    "arbitrary_types_allowed": False,
}


class User(BaseModel):
    """
    Representation of a single row in the `users` table.
    """

    id: UUID = Field(..., description="Primary key, derived from the username.")
    username: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    password_hash: bytes = Field(..., description="scrypt hash of the account password.")
    created_at: datetime

    model_config = _FROZEN


class Post(BaseModel):
    """
    Representation of a single row in the `posts` table.
    """

    id: UUID
    user_id: UUID = Field(..., description="Author; references users.id.")
    title: str = Field(..., min_length=1)
    content: str
    tags: List[str] = Field(default_factory=list)
    created_at: datetime

    model_config = _FROZEN


class Comment(BaseModel):
    """
    Representation of a single row in the `comments` table.
    """

    id: UUID
    post_id: UUID
    user_id: UUID
    content: str = Field(..., min_length=1)
    created_at: datetime

    model_config = _FROZEN


class Follow(BaseModel):
    """
    A follow edge: `follower_id` follows `user_id`.
    """

    user_id: UUID
    follower_id: UUID
    created_at: datetime

    model_config = _FROZEN

    @model_validator(mode="after")
    def no_self_follow(self) -> "Follow":
        if self.user_id == self.follower_id:
            raise ValueError("a user cannot follow themselves")
        return self


__all__ = ["Comment", "Follow", "Post", "User"]
