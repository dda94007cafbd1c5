"""
Error taxonomy for social-seed.

Every failure surfaced by pool construction or the seed pass derives from
SocialSeedError so the CLI can map them to a non-zero exit status in one place.
"""

from __future__ import annotations

import builtins
from typing import Optional


class SocialSeedError(Exception):
    """Base class for all project errors."""


class ConfigError(SocialSeedError, ValueError):
    """Malformed address or out-of-range pool parameters. Raised before any I/O."""


class DatabaseConnectionError(SocialSeedError, builtins.ConnectionError):
    """The backing store could not be reached while constructing the pool."""


class SeedError(SocialSeedError):
    """
    The seed pass failed partway and was rolled back.

    Attributes
    ----------
    entity : str | None
        Kind of entity being inserted when the failure happened (e.g. "user").
    index : int | None
        Position of that entity in the generated batch.
    """

    def __init__(
        self,
        message: str,
        entity: Optional[str] = None,
        index: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.entity = entity
        self.index = index


class SchemaError(SocialSeedError):
    """The schema could not be applied; nothing from the migration was kept."""


class ClosedError(SocialSeedError, RuntimeError):
    """A pool was used after being closed. Indicates a lifecycle bug in the caller."""


class PoolTimeout(SocialSeedError, TimeoutError):
    """Waited longer than the configured acquire timeout for a pooled connection."""


__all__ = [
    "SocialSeedError",
    "ConfigError",
    "DatabaseConnectionError",
    "SeedError",
    "SchemaError",
    "ClosedError",
    "PoolTimeout",
]
