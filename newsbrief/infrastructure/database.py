"""SQLite access for NewsBrief

All state lives in one SQLite file: newsbrief/data/newsbrief.db, or
NEWSBRIEF_DB_PATH when set. Repositories borrow pooled connections through
get_db_connection() and write through db_transaction().

Briefing jobs run on worker threads while the API keeps serving settings
writes, so connections are WAL-mode, shared across threads, and writes
retry briefly on SQLITE_BUSY.
"""

from __future__ import annotations

import atexit
import os
import random
import sqlite3
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from functools import lru_cache, wraps
from pathlib import Path
from queue import Empty, Full, Queue
from threading import Lock
from typing import Any, TypeVar

from newsbrief.config import (
    DB_CONNECT_TIMEOUT,
    DB_POOL_SIZE,
    DB_POOL_TIMEOUT,
    DB_RETRY_BASE_DELAY,
    DB_RETRY_JITTER,
    DB_RETRY_MAX,
    DB_RETRY_MAX_DELAY,
    DB_TEMP_CONN_MAX,
)
from newsbrief.observability.logging import get_logger
from newsbrief.observability.telemetry import counter

F = TypeVar("F", bound=Callable[..., Any])

DB_PATH = Path(__file__).parent.parent / "data" / "newsbrief.db"

logger = get_logger(__name__)


def _is_lock_error(error: sqlite3.OperationalError) -> bool:
    message = str(error).lower()
    return "locked" in message or "busy" in message


def retry_on_db_lock(
    max_retries: int = DB_RETRY_MAX,
    base_delay: float = DB_RETRY_BASE_DELAY,
    max_delay: float = DB_RETRY_MAX_DELAY,
) -> Callable[[F], F]:
    """
    Retry a write when SQLite reports the database as locked or busy.

    Backoff doubles per attempt up to max_delay, plus jitter. Any other
    OperationalError propagates immediately.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except sqlite3.OperationalError as e:
                    if not _is_lock_error(e):
                        raise
                    if attempt >= max_retries:
                        counter("database.lock_retries_exhausted")
                        logger.error("%s still locked after %d retries", func.__name__, attempt)
                        raise

                    delay = min(base_delay * (2**attempt), max_delay)
                    delay += random.uniform(0, delay * DB_RETRY_JITTER)
                    attempt += 1
                    logger.warning(
                        "Database locked in %s (retry %d/%d in %.2fs)",
                        func.__name__,
                        attempt,
                        max_retries,
                        delay,
                    )
                    time.sleep(delay)

        return wrapper  # type: ignore[return-value]

    return decorator


class DatabaseConnectionPool:
    """
    Fixed set of reusable connections, plus a bounded number of overflow
    connections that are closed on release.
    """

    def __init__(
        self,
        db_path: Path,
        pool_size: int = DB_POOL_SIZE,
        overflow_max: int = DB_TEMP_CONN_MAX,
    ):
        self.db_path = db_path
        self.pool_size = pool_size
        self.overflow_max = overflow_max
        self.closed = False
        self.pool: Queue[sqlite3.Connection] = Queue(maxsize=pool_size)
        self._overflow: set[int] = set()
        self._lock = Lock()

        for _ in range(pool_size):
            self.pool.put(self._connect())

        atexit.register(self.close_all)

    @property
    def temp_conn_count(self) -> int:
        return len(self._overflow)

    def _connect(self) -> sqlite3.Connection:
        """
        Raises:
            RuntimeError: If the integrity check fails
        """
        conn = sqlite3.connect(
            str(self.db_path),
            timeout=DB_CONNECT_TIMEOUT,
            check_same_thread=False,
        )
        try:
            status = conn.execute("PRAGMA quick_check(1)").fetchone()[0]
        except sqlite3.DatabaseError as e:
            conn.close()
            counter("database.corruption_detected")
            raise RuntimeError(f"Database integrity check failed: {e}") from e
        if status != "ok":
            conn.close()
            counter("database.corruption_detected")
            logger.critical("Database corruption detected: %s", status)
            raise RuntimeError(f"Database corruption detected: {status}")

        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA synchronous=NORMAL")
        conn.row_factory = sqlite3.Row
        return conn

    def acquire(self) -> sqlite3.Connection:
        """
        Raises:
            RuntimeError: If the pool is closed, or exhausted with no overflow left
        """
        if self.closed:
            raise RuntimeError("Connection pool has been closed")

        try:
            return self.pool.get(timeout=DB_POOL_TIMEOUT)
        except Empty:
            pass

        with self._lock:
            if len(self._overflow) >= self.overflow_max:
                raise RuntimeError(
                    f"Database pool exhausted (pool_size={self.pool_size}, "
                    f"overflow_max={self.overflow_max})"
                )
            conn = self._connect()
            self._overflow.add(id(conn))

        counter("database.pool_exhausted")
        logger.warning("Pool exhausted; opened overflow connection %d", self.temp_conn_count)
        return conn

    def release(self, conn: sqlite3.Connection) -> None:
        with self._lock:
            overflow = id(conn) in self._overflow
            self._overflow.discard(id(conn))

        if overflow or self.closed:
            conn.close()
            return
        try:
            self.pool.put_nowait(conn)
        except Full:
            conn.close()

    def close_all(self) -> None:
        self.closed = True
        while True:
            try:
                self.pool.get_nowait().close()
            except Empty:
                break

    def stats(self) -> dict[str, Any]:
        available = self.pool.qsize()
        in_use = self.pool_size - available
        return {
            "pool_size": self.pool_size,
            "available": available,
            "in_use": in_use,
            "usage_percent": round(in_use / self.pool_size * 100, 1) if self.pool_size else 0,
            "temp_connections": self.temp_conn_count,
            "closed": self.closed,
        }


def get_db_path() -> Path:
    """NEWSBRIEF_DB_PATH if set, else the packaged data directory."""
    if env_path := os.getenv("NEWSBRIEF_DB_PATH"):
        return Path(env_path)
    return DB_PATH


@lru_cache(maxsize=1)
def get_pool() -> DatabaseConnectionPool:
    return DatabaseConnectionPool(get_db_path())


def reset_pool() -> None:
    """Close and forget the process-wide pool (after NEWSBRIEF_DB_PATH changes)."""
    if get_pool.cache_info().currsize:
        get_pool().close_all()
    get_pool.cache_clear()


@contextmanager
def get_db_connection() -> Generator[sqlite3.Connection, None, None]:
    """
    Borrow a pooled connection.

    Raises:
        FileNotFoundError: If the database file does not exist (run init_database() first)
    """
    db_path = get_db_path()
    if not db_path.exists():
        raise FileNotFoundError(f"Database not found: {db_path}. Run init_database() first")

    pool = get_pool()
    conn = pool.acquire()
    try:
        yield conn
    finally:
        pool.release(conn)


@contextmanager
def db_transaction() -> Generator[sqlite3.Connection, None, None]:
    """Commit on success, roll back and re-raise on error."""
    with get_db_connection() as conn:
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise


def validate_schema() -> bool:
    """
    Raises:
        ValueError: If required tables are missing
    """
    from newsbrief.infrastructure.database_schema import validate_schema as _validate_schema

    with get_db_connection() as conn:
        return _validate_schema(conn)


def get_pool_stats() -> dict[str, Any]:
    return get_pool().stats()


def init_database() -> None:
    """Create the database file and tables if missing (idempotent)."""
    from newsbrief.infrastructure.database_schema import init_database as _init_database

    _init_database(get_db_path())
