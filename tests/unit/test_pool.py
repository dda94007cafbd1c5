from __future__ import annotations

import threading
import time

import pytest

from socialseed.errors import ClosedError, PoolTimeout
from socialseed.infrastructure.pool import ConnectionPool
from tests.fakes import FakeClock, FakeConnector

MAX_OPEN = 3
WORKERS = 12
LIFETIME_SECONDS = 900.0


def test_connection_is_reused_while_fresh(connector: FakeConnector) -> None:
    pool = ConnectionPool(connector, max_open=2, max_idle=2)

    with pool.connection() as first:
        pass
    with pool.connection() as second:
        pass

    assert first is second
    assert len(connector.opened) == 1
    assert pool.stats().idle == 1


def test_concurrent_checkouts_never_exceed_max_open(connector: FakeConnector) -> None:
    pool = ConnectionPool(connector, max_open=MAX_OPEN, max_idle=MAX_OPEN)
    lock = threading.Lock()
    active = 0
    peak = 0

    def worker() -> None:
        nonlocal active, peak
        with pool.connection():
            with lock:
                active += 1
                peak = max(peak, active)
            time.sleep(0.02)
            with lock:
                active -= 1

    threads = [threading.Thread(target=worker) for _ in range(WORKERS)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert peak <= MAX_OPEN
    assert len(connector.opened) <= MAX_OPEN
    assert pool.stats().in_use == 0
    pool.close()


def test_saturated_pool_blocks_until_a_connection_is_returned(connector: FakeConnector) -> None:
    pool = ConnectionPool(connector, max_open=1, max_idle=1)
    held = pool.getconn()
    acquired = threading.Event()
    got = []

    def waiter() -> None:
        got.append(pool.getconn())
        acquired.set()

    thread = threading.Thread(target=waiter)
    thread.start()

    assert not acquired.wait(timeout=0.1)
    assert pool.stats().wait_count == 1

    pool.putconn(held)
    assert acquired.wait(timeout=2)
    thread.join(timeout=2)

    assert got == [held]
    pool.putconn(got[0])
    pool.close()


def test_acquire_timeout_raises_pool_timeout(connector: FakeConnector) -> None:
    pool = ConnectionPool(connector, max_open=1, max_idle=1, acquire_timeout=0.05)
    held = pool.getconn()

    with pytest.raises(PoolTimeout):
        pool.getconn()

    pool.putconn(held)
    pool.close()


def test_returns_beyond_max_idle_are_closed(connector: FakeConnector) -> None:
    pool = ConnectionPool(connector, max_open=3, max_idle=1)
    conns = [pool.getconn() for _ in range(3)]

    for conn in conns:
        pool.putconn(conn)

    stats = pool.stats()
    assert stats.idle == 1
    assert stats.open == 1
    assert stats.max_idle_closed == 2
    assert [c.closed for c in conns] == [False, True, True]


def test_max_idle_zero_closes_every_return(connector: FakeConnector) -> None:
    pool = ConnectionPool(connector, max_open=2, max_idle=0)

    with pool.connection() as conn:
        pass

    assert conn.closed
    assert pool.stats().open == 0


def test_expired_connection_is_closed_on_return(connector: FakeConnector, clock: FakeClock) -> None:
    pool = ConnectionPool(
        connector, max_open=2, max_idle=2, max_lifetime=LIFETIME_SECONDS, clock=clock
    )
    conn = pool.getconn()
    clock.advance(LIFETIME_SECONDS + 1)

    pool.putconn(conn)

    assert conn.closed
    assert pool.stats().idle == 0
    assert pool.stats().max_lifetime_closed == 1


def test_expired_idle_connection_is_never_handed_out(
    connector: FakeConnector, clock: FakeClock
) -> None:
    pool = ConnectionPool(
        connector, max_open=2, max_idle=2, max_lifetime=LIFETIME_SECONDS, clock=clock
    )
    with pool.connection() as old:
        pass
    assert not old.closed

    clock.advance(LIFETIME_SECONDS)

    with pool.connection() as fresh:
        assert fresh is not old
    assert old.closed
    assert len(connector.opened) == 2


def test_zero_lifetime_never_rotates(connector: FakeConnector, clock: FakeClock) -> None:
    pool = ConnectionPool(connector, max_open=1, max_idle=1, max_lifetime=0, clock=clock)
    with pool.connection() as first:
        pass
    clock.advance(10 * 365 * 24 * 3600)
    with pool.connection() as second:
        pass

    assert first is second


def test_close_is_idempotent_and_rejects_further_use(connector: FakeConnector) -> None:
    pool = ConnectionPool(connector, max_open=2, max_idle=2)
    with pool.connection() as conn:
        pass

    pool.close()
    pool.close()

    assert pool.closed
    assert conn.closed
    assert conn.close_calls == 1
    with pytest.raises(ClosedError):
        pool.getconn()
    with pytest.raises(ClosedError):
        with pool.connection():
            pass


def test_connection_checked_out_during_close_is_closed_on_return(
    connector: FakeConnector,
) -> None:
    pool = ConnectionPool(connector, max_open=1, max_idle=1)
    conn = pool.getconn()

    pool.close()
    assert not conn.closed

    pool.putconn(conn)
    assert conn.closed
    assert pool.stats().open == 0


def test_close_wakes_blocked_waiters(connector: FakeConnector) -> None:
    pool = ConnectionPool(connector, max_open=1, max_idle=1)
    held = pool.getconn()
    errors = []

    def waiter() -> None:
        try:
            pool.getconn()
        except ClosedError as exc:
            errors.append(exc)

    thread = threading.Thread(target=waiter)
    thread.start()
    time.sleep(0.05)

    pool.close()
    thread.join(timeout=2)

    assert not thread.is_alive()
    assert len(errors) == 1
    pool.putconn(held)


def test_failed_connect_releases_its_slot(connector: FakeConnector) -> None:
    pool = ConnectionPool(connector, max_open=1, max_idle=1)
    connector.failures.append(OSError("connection refused"))

    with pytest.raises(OSError):
        pool.getconn()
    assert pool.stats().open == 0

    with pool.connection() as conn:
        assert conn is connector.opened[0]


def test_broken_connection_is_discarded(connector: FakeConnector) -> None:
    pool = ConnectionPool(connector, max_open=1, max_idle=1)
    with pool.connection() as conn:
        conn.closed = True

    assert pool.stats().idle == 0
    with pool.connection() as replacement:
        assert replacement is not conn


def test_reset_failure_discards_connection(connector: FakeConnector) -> None:
    def reset(conn) -> None:
        raise RuntimeError("cannot roll back")

    pool = ConnectionPool(connector, max_open=1, max_idle=1, reset=reset)
    with pool.connection() as conn:
        pass

    assert conn.closed
    assert pool.stats().idle == 0


def test_putconn_rejects_foreign_connection(fake_pool: ConnectionPool) -> None:
    other = FakeConnector()()
    with pytest.raises(ValueError):
        fake_pool.putconn(other)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_open": 0, "max_idle": 0},
        {"max_open": 2, "max_idle": 3},
        {"max_open": 2, "max_idle": -1},
        {"max_open": 2, "max_idle": 1, "max_lifetime": -1},
    ],
)
def test_invalid_bounds_are_rejected(connector: FakeConnector, kwargs: dict) -> None:
    with pytest.raises(ValueError):
        ConnectionPool(connector, **kwargs)


def test_pool_as_context_manager_closes(connector: FakeConnector) -> None:
    with ConnectionPool(connector, max_open=1, max_idle=1) as pool:
        with pool.connection():
            pass
    assert pool.closed
    assert connector.opened[0].closed
