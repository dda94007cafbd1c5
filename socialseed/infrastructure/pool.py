"""
Bounded connection pool for social-seed.

The pool keeps at most ``max_open`` connections alive at once, at most
``max_idle`` of them parked between uses, and rotates connections that have
outlived ``max_lifetime``. Callers that find the pool saturated block until a
connection is returned (optionally bounded by an acquire timeout).

The pool is driver-agnostic: it receives a zero-argument ``connect`` callable
and an optional ``reset`` hook. ``db_factory.new_pool`` wires both to psycopg.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, Generator, Optional

from socialseed.errors import ClosedError, PoolTimeout
from socialseed.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class PoolStats:
    """Point-in-time snapshot of pool usage."""

    max_open: int
    open: int
    in_use: int
    idle: int
    wait_count: int
    max_idle_closed: int
    max_lifetime_closed: int


class _Slot:
    """A live connection plus the bookkeeping the pool needs for it."""

    __slots__ = ("conn", "created_at")

    def __init__(self, conn: Any, created_at: float) -> None:
        self.conn = conn
        self.created_at = created_at


class ConnectionPool:
    """
    Thread-safe pool of reusable database connections.

    Parameters
    ----------
    connect : Callable[[], Any]
        Opens a new connection. Called outside the pool lock.
    max_open : int
        Upper bound on connections open at once (idle plus checked out).
    max_idle : int
        Upper bound on idle connections kept for reuse. Returns beyond this
        count are closed.
    max_lifetime : float
        Seconds a connection may live before it is rotated. 0 disables rotation.
    acquire_timeout : float | None
        Seconds to wait for a free connection when saturated. None waits forever.
    reset : Callable[[Any], None] | None
        Called on every returned connection before it is parked. Exceptions
        raised here cause the connection to be discarded.
    clock : Callable[[], float]
        Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        connect: Callable[[], Any],
        *,
        max_open: int,
        max_idle: int,
        max_lifetime: float = 0.0,
        acquire_timeout: Optional[float] = None,
        reset: Optional[Callable[[Any], None]] = None,
        clock: Callable[[], float] = time.monotonic,
        name: str = "pool",
    ) -> None:
        if max_open < 1:
            raise ValueError("max_open must be >= 1")
        if not 0 <= max_idle <= max_open:
            raise ValueError("max_idle must be between 0 and max_open")
        if max_lifetime < 0:
            raise ValueError("max_lifetime must be >= 0")

        self.name = name
        self.max_open = max_open
        self.max_idle = max_idle
        self.max_lifetime = max_lifetime
        self.acquire_timeout = acquire_timeout
        self._connect = connect
        self._reset = reset
        self._clock = clock

        self._cond = threading.Condition()
        self._idle: Deque[_Slot] = deque()
        self._in_use: Dict[int, _Slot] = {}
        self._num_open = 0
        self._closed = False

        self._wait_count = 0
        self._max_idle_closed = 0
        self._max_lifetime_closed = 0

    # ------------------------------------------------------------------ checkout

    def getconn(self, timeout: Optional[float] = None) -> Any:
        """
        Check out a connection, blocking while the pool is saturated.

        Raises
        ------
        ClosedError
            If the pool is closed, including while this call was waiting.
        PoolTimeout
            If no connection became available within the timeout.
        """
        if timeout is None:
            timeout = self.acquire_timeout
        deadline = None if timeout is None else self._clock() + timeout
        expired: list[_Slot] = []

        try:
            with self._cond:
                waited = False
                while True:
                    if self._closed:
                        raise ClosedError(f"{self.name} is closed")

                    while self._idle:
                        slot = self._idle.pop()
                        if self._is_expired(slot):
                            self._num_open -= 1
                            self._max_lifetime_closed += 1
                            expired.append(slot)
                            continue
                        self._in_use[id(slot.conn)] = slot
                        return slot.conn

                    if self._num_open < self.max_open:
                        self._num_open += 1
                        break

                    if not waited:
                        self._wait_count += 1
                        waited = True
                    if deadline is None:
                        self._cond.wait()
                    else:
                        remaining = deadline - self._clock()
                        if remaining <= 0:
                            raise PoolTimeout(
                                f"could not acquire a connection from {self.name} "
                                f"within {timeout:.3f}s (max_open={self.max_open})"
                            )
                        self._cond.wait(remaining)
        finally:
            for slot in expired:
                self._close_quietly(slot.conn)

        # A slot was reserved above; open the connection without holding the lock.
        try:
            conn = self._connect()
        except BaseException:
            with self._cond:
                self._num_open -= 1
                self._cond.notify()
            raise

        slot = _Slot(conn, self._clock())
        with self._cond:
            if self._closed:
                self._num_open -= 1
                self._cond.notify_all()
                closed = True
            else:
                self._in_use[id(conn)] = slot
                closed = False
        if closed:
            self._close_quietly(conn)
            raise ClosedError(f"{self.name} is closed")
        log.debug("Opened new pooled connection", extra={"pool": self.name})
        return conn

    def putconn(self, conn: Any) -> None:
        """
        Return a connection to the pool.

        The connection is closed instead of parked when the pool is closed, the
        connection is broken or past its lifetime, or the idle set is full.
        """
        with self._cond:
            slot = self._in_use.pop(id(conn), None)
        if slot is None:
            raise ValueError(f"connection does not belong to {self.name}")

        healthy = not getattr(conn, "closed", False)
        if healthy and self._reset is not None:
            try:
                self._reset(conn)
            except Exception:  # noqa: BLE001 - any reset failure means the connection is unusable
                log.warning("Discarding connection that failed to reset", exc_info=True)
                healthy = False

        with self._cond:
            keep = False
            if self._closed or not healthy:
                pass
            elif self._is_expired(slot):
                self._max_lifetime_closed += 1
            elif len(self._idle) >= self.max_idle:
                self._max_idle_closed += 1
            else:
                keep = True

            if keep:
                self._idle.append(slot)
            else:
                self._num_open -= 1
            self._cond.notify()

        if not keep:
            self._close_quietly(conn)

    @contextmanager
    def connection(self, timeout: Optional[float] = None) -> Generator[Any, None, None]:
        """
        Context manager for a pooled connection, returned on every exit path.

        Example
        -------
            with pool.connection() as conn:
                conn.execute("SELECT 1")
        """
        conn = self.getconn(timeout=timeout)
        try:
            yield conn
        finally:
            self.putconn(conn)

    # ------------------------------------------------------------------ lifecycle

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """
        Close the pool and every idle connection.

        Waiters are woken and fail with ClosedError; connections still checked
        out are closed when they come back. Calling close() again is a no-op.
        """
        with self._cond:
            if self._closed:
                log.debug("Pool already closed", extra={"pool": self.name})
                return
            self._closed = True
            idle = list(self._idle)
            self._idle.clear()
            self._num_open -= len(idle)
            self._cond.notify_all()

        for slot in idle:
            self._close_quietly(slot.conn)
        log.info("Connection pool closed", extra={"pool": self.name, "closed_idle": len(idle)})

    def stats(self) -> PoolStats:
        with self._cond:
            return PoolStats(
                max_open=self.max_open,
                open=self._num_open,
                in_use=len(self._in_use),
                idle=len(self._idle),
                wait_count=self._wait_count,
                max_idle_closed=self._max_idle_closed,
                max_lifetime_closed=self._max_lifetime_closed,
            )

    def __enter__(self) -> "ConnectionPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------ helpers

    def _is_expired(self, slot: _Slot) -> bool:
        return self.max_lifetime > 0 and self._clock() - slot.created_at >= self.max_lifetime

    def _close_quietly(self, conn: Any) -> None:
        try:
            conn.close()
        except Exception:  # noqa: BLE001 - the connection is being dropped either way
            log.warning("Error while closing pooled connection", exc_info=True)


__all__ = ["ConnectionPool", "PoolStats"]
