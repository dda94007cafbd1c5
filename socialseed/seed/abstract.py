"""
Seed contracts for social-seed.

The orchestrator depends only on the two narrow capabilities declared here,
StoreFactory and Seeder, so it can be exercised with fakes instead of a live
database. SeedPlan describes how much to generate; SeedReport is what a pass
returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from socialseed.config import Settings
from socialseed.errors import ConfigError

ENTITY_ORDER = ("users", "posts", "comments", "follows")


@dataclass(frozen=True)
class SeedPlan:
    """
    Volumes and RNG seed for one seed pass.

    Row identities depend only on the kind and position of each entity, so the
    same counts always address the same rows. ``random_seed`` shapes content
    (titles, tags, who follows whom) on first insert.
    """

    users: int = 100
    posts: int = 200
    comments: int = 500
    follows: int = 300
    random_seed: int = 42

    def __post_init__(self) -> None:
        for name in ENTITY_ORDER:
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be >= 0")
        if self.users == 0 and (self.posts or self.comments or self.follows):
            raise ConfigError("posts, comments and follows need at least one user")
        if self.posts == 0 and self.comments:
            raise ConfigError("comments need at least one post")
        if self.follows and self.users < 2:
            raise ConfigError("follows need at least two users")
        max_edges = self.users * (self.users - 1)
        if self.follows > max_edges:
            raise ConfigError(f"follows ({self.follows}) exceed possible edges ({max_edges})")

    @classmethod
    def from_settings(cls, settings: Settings) -> "SeedPlan":
        return cls(
            users=settings.seed_users,
            posts=settings.seed_posts,
            comments=settings.seed_comments,
            follows=settings.seed_follows,
            random_seed=settings.seed_random_seed,
        )


@dataclass
class EntityCounts:
    inserted: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        return self.inserted + self.skipped


@dataclass
class SeedReport:
    """
    Outcome of a completed seed pass.

    ``skipped`` rows already existed, which is what a re-run reports.
    """

    counts: Dict[str, EntityCounts] = field(
        default_factory=lambda: {name: EntityCounts() for name in ENTITY_ORDER}
    )
    profile: Optional[Dict[str, Any]] = None

    @property
    def inserted(self) -> int:
        return sum(c.inserted for c in self.counts.values())

    @property
    def skipped(self) -> int:
        return sum(c.skipped for c in self.counts.values())

    def record(self, entity: str, created: bool) -> None:
        counts = self.counts[entity]
        if created:
            counts.inserted += 1
        else:
            counts.skipped += 1

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            name: {"inserted": c.inserted, "skipped": c.skipped}
            for name, c in self.counts.items()
        }
        payload["inserted"] = self.inserted
        payload["skipped"] = self.skipped
        if self.profile is not None:
            payload["profile"] = self.profile
        return payload


@runtime_checkable
class StoreFactory(Protocol):
    """Turns a pool handle into a store handle that borrows it."""

    def __call__(self, pool: Any) -> Any:
        ...


@runtime_checkable
class Seeder(Protocol):
    """
    Runs one seed pass.

    Implementations must be idempotent and must raise SeedError on failure
    after leaving the store as it was before the pass.
    """

    def __call__(self, storage: Any, pool: Any, plan: Optional[SeedPlan] = None) -> SeedReport:
        ...


__all__ = [
    "ENTITY_ORDER",
    "EntityCounts",
    "SeedPlan",
    "SeedReport",
    "Seeder",
    "StoreFactory",
]
