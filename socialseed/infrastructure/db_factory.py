"""
Database connection factory for social-seed.

Turns a PoolConfig into a live, verified ConnectionPool backed by psycopg.
Validation happens before any network I/O; reachability is checked once with a
short ping so an unreachable database fails the command immediately instead of
on the first insert.
"""

from __future__ import annotations

import functools
import math
from contextlib import contextmanager
from typing import Any, Callable, Generator, Optional, Union

import psycopg
from psycopg import Connection
from psycopg.conninfo import conninfo_to_dict
from psycopg.pq import TransactionStatus
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from socialseed.config import Settings
from socialseed.errors import ConfigError, DatabaseConnectionError
from socialseed.infrastructure.pool import ConnectionPool
from socialseed.utils.durations import parse_duration
from socialseed.utils.logging import get_logger

log = get_logger(__name__)


class PoolConfig(BaseModel):
    """
    Validated pool parameters.

    ``max_lifetime`` accepts seconds or a duration string such as "15m";
    0 means connections are never rotated.
    """

    addr: str = Field(..., description="PostgreSQL DSN (URI or key=value form).")
    max_open_conns: int = Field(..., ge=1)
    max_idle_conns: int = Field(..., ge=0)
    max_lifetime: float = Field(0.0, ge=0)
    connect_timeout: float = Field(5.0, gt=0)
    acquire_timeout: Optional[float] = Field(None, gt=0)

    model_config = {"frozen": True}

    @field_validator("addr")
    @classmethod
    def check_addr(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("database address is empty")
        try:
            conninfo_to_dict(value)
        except psycopg.ProgrammingError as exc:
            raise ValueError(f"malformed database address: {exc}") from None
        return value

    @field_validator("max_lifetime", mode="before")
    @classmethod
    def parse_lifetime(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_duration(value)
        return value

    @model_validator(mode="after")
    def idle_within_open(self) -> "PoolConfig":
        if self.max_idle_conns > self.max_open_conns:
            raise ValueError(
                f"max_idle_conns ({self.max_idle_conns}) must not exceed "
                f"max_open_conns ({self.max_open_conns})"
            )
        return self

    @classmethod
    def build(cls, **values: Any) -> "PoolConfig":
        """Construct a config, reporting every validation problem as ConfigError."""
        try:
            return cls(**values)
        except ValidationError as exc:
            raise ConfigError(_summarize(exc)) from exc

    @classmethod
    def from_settings(cls, settings: Settings) -> "PoolConfig":
        return cls.build(
            addr=settings.db_addr,
            max_open_conns=settings.db_max_open_conns,
            max_idle_conns=settings.db_max_idle_conns,
            max_lifetime=settings.db_max_lifetime,
            connect_timeout=settings.db_connect_timeout,
            acquire_timeout=settings.db_acquire_timeout,
        )

    def redacted_addr(self) -> str:
        """The address with any password masked, for logs and `info` output."""
        return redact_dsn(self.addr)


def _summarize(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "config"
        parts.append(f"{loc}: {err['msg']}")
    return "invalid pool configuration: " + "; ".join(parts)


def redact_dsn(addr: str) -> str:
    try:
        params = conninfo_to_dict(addr)
    except psycopg.ProgrammingError:
        return "<malformed>"
    user = params.get("user", "")
    host = params.get("host", "localhost")
    port = params.get("port")
    dbname = params.get("dbname", "")
    target = f"{host}:{port}" if port else str(host)
    return f"{user}:***@{target}/{dbname}" if user else f"{target}/{dbname}"


def _reset_connection(conn: Connection) -> None:
    """Leave a returned connection outside any transaction."""
    status = conn.info.transaction_status
    if status == TransactionStatus.IDLE:
        return
    if status in (TransactionStatus.INTRANS, TransactionStatus.INERROR):
        conn.rollback()
        return
    raise psycopg.OperationalError(f"connection in unexpected state {status.name}")


def _psycopg_connector(config: PoolConfig) -> Callable[[], Connection]:
    return functools.partial(
        psycopg.connect,
        config.addr,
        connect_timeout=max(1, math.ceil(config.connect_timeout)),
    )


def new_pool(
    config: Union[PoolConfig, str],
    max_open_conns: Optional[int] = None,
    max_idle_conns: Optional[int] = None,
    max_lifetime: Union[str, float, None] = None,
    *,
    connect: Optional[Callable[[], Any]] = None,
    reset: Optional[Callable[[Any], None]] = _reset_connection,
) -> ConnectionPool:
    """
    Create a verified connection pool.

    Accepts either a PoolConfig or the positional form
    ``new_pool(addr, max_open, max_idle, "15m")``.

    Parameters
    ----------
    connect : Callable[[], Any], optional
        Connection opener. Defaults to psycopg.connect against ``config.addr``.
    reset : Callable[[Any], None], optional
        Hook run on returned connections. Defaults to a psycopg rollback.

    Raises
    ------
    ConfigError
        If the address or pool parameters are invalid (before any I/O).
    DatabaseConnectionError
        If the database cannot be reached within ``connect_timeout``.
    """
    if not isinstance(config, PoolConfig):
        if max_open_conns is None or max_idle_conns is None:
            raise ConfigError("max_open_conns and max_idle_conns are required with an address")
        config = PoolConfig.build(
            addr=config,
            max_open_conns=max_open_conns,
            max_idle_conns=max_idle_conns,
            max_lifetime=max_lifetime if max_lifetime is not None else 0.0,
        )

    pool = ConnectionPool(
        connect or _psycopg_connector(config),
        max_open=config.max_open_conns,
        max_idle=config.max_idle_conns,
        max_lifetime=config.max_lifetime,
        acquire_timeout=config.acquire_timeout,
        reset=reset,
        name=f"pool[{config.redacted_addr()}]",
    )
    try:
        _ping(pool, config)
    except BaseException:
        pool.close()
        raise

    log.info(
        "Connection pool ready",
        extra={
            "addr": config.redacted_addr(),
            "max_open_conns": config.max_open_conns,
            "max_idle_conns": config.max_idle_conns,
            "max_lifetime_seconds": config.max_lifetime,
        },
    )
    return pool


def _ping(pool: ConnectionPool, config: PoolConfig) -> None:
    try:
        with pool.connection(timeout=config.connect_timeout) as conn:
            conn.execute("SELECT 1")
    except (psycopg.Error, OSError) as exc:
        raise DatabaseConnectionError(
            f"cannot reach database at {config.redacted_addr()}: {exc}"
        ) from exc


@contextmanager
def open_pool(config: PoolConfig, **kwargs: Any) -> Generator[ConnectionPool, None, None]:
    """
    Scoped pool acquisition: the pool is closed on every exit path.

    If construction fails there is nothing to release and the error propagates.
    """
    pool = new_pool(config, **kwargs)
    try:
        yield pool
    finally:
        pool.close()


__all__ = ["PoolConfig", "new_pool", "open_pool", "redact_dsn"]
