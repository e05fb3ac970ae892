from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg_pool import ConnectionPool, PoolTimeout

from lexico.config.settings import Settings
from lexico.database.exceptions import StorageUnavailableError

_pool: ConnectionPool | None = None


def build_conninfo(settings: Settings) -> str:
    """libpq connection string; statements are cancelled after the storage timeout."""
    timeout_ms = int(settings.storage_timeout_seconds * 1000)
    return (
        f"host={settings.db_host} "
        f"port={settings.db_port} "
        f"dbname={settings.db_database} "
        f"user={settings.db_username} "
        f"password={settings.db_password} "
        f"connect_timeout={max(1, int(settings.storage_timeout_seconds))} "
        f"options='-c statement_timeout={timeout_ms}'"
    )


def init_pool(settings: Settings) -> None:
    """Initialize the global connection pool from settings.

    Waiting for a free connection is bounded by ``storage_timeout_seconds``
    so a saturated or unreachable database never blocks a caller forever.
    """
    global _pool  # noqa: PLW0603
    _pool = ConnectionPool(
        build_conninfo(settings),
        min_size=1,
        max_size=settings.db_pool_max_size,
        timeout=settings.storage_timeout_seconds,
        open=True,
    )


def close_pool() -> None:
    """Close the global connection pool."""
    global _pool  # noqa: PLW0603
    if _pool is not None:
        _pool.close()
        _pool = None


@contextmanager
def get_connection() -> Generator[psycopg.Connection[Any], None, None]:
    """Yield a connection from the pool. Caller manages commit/rollback.

    Raises:
        StorageUnavailableError: if no connection could be obtained in time.
    """
    if _pool is None:
        raise RuntimeError("Connection pool not initialized. Call init_pool() first.")
    try:
        with _pool.connection() as conn:
            yield conn
    except PoolTimeout as exc:
        raise StorageUnavailableError(f"Timed out waiting for a connection: {exc}") from exc
