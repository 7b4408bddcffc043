"""
Database connection factory utilities for the parcel tracker.

Opens a DB-API connection for the configured backend (SQLite file or
PostgreSQL through psycopg) inside a context manager so the composer owns its
lifecycle, and creates the ``parcel`` table when it is absent.

The PostgreSQL connect is retried for transient failures using tenacity.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Generator, Optional, Union

import psycopg
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from tracker.config import Settings, build_dsn, get_settings
from tracker.utils.logging import get_logger

log = get_logger(__name__)

DBConnection = Union[psycopg.Connection, sqlite3.Connection]

# Driver exceptions the store translates into StorageError.
DB_ERRORS = (psycopg.Error, sqlite3.Error)

_SQLITE_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS parcel (
        number INTEGER PRIMARY KEY AUTOINCREMENT,
        client INTEGER NOT NULL,
        status TEXT NOT NULL,
        address TEXT NOT NULL,
        created_at TEXT NOT NULL
    );
    """,
    "CREATE INDEX IF NOT EXISTS parcel_client_idx ON parcel (client);",
)

_POSTGRES_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS parcel (
        number BIGINT GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY,
        client BIGINT NOT NULL,
        status TEXT NOT NULL,
        address TEXT NOT NULL,
        created_at TEXT NOT NULL
    );
    """,
    "CREATE INDEX IF NOT EXISTS parcel_client_idx ON parcel (client);",
)


def placeholder_for(conn: DBConnection) -> str:
    """Return the bind-parameter marker the connection's driver expects."""
    return "?" if isinstance(conn, sqlite3.Connection) else "%s"


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_postgres_connection(settings: Optional[Settings] = None) -> psycopg.Connection:
    """
    Acquire a PostgreSQL connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection
    errors. The connection runs in autocommit mode so every store statement is
    its own transaction.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    settings = settings or get_settings()
    return psycopg.connect(
        build_dsn(settings),
        autocommit=True,
        connect_timeout=settings.db_connect_timeout,
    )


def get_sqlite_connection(path: str, timeout: float = 5.0) -> sqlite3.Connection:
    """Open a SQLite database file (``":memory:"`` for a private in-memory one)."""
    return sqlite3.connect(path, timeout=timeout)


@contextmanager
def open_connection(settings: Optional[Settings] = None) -> Generator[DBConnection, None, None]:
    """
    Context manager yielding a connection for the configured backend.

    The connection is closed when the block exits, whether or not it raised.

    Example
    -------
        with open_connection() as conn:
            ensure_schema(conn)
            store = ParcelStore(conn)
    """
    settings = settings or get_settings()
    if settings.db_backend == "postgres":
        conn: DBConnection = get_postgres_connection(settings)
        target = f"{settings.db_host}:{settings.db_port}/{settings.db_name}"
    else:
        conn = get_sqlite_connection(settings.db_path, timeout=settings.db_connect_timeout)
        target = settings.db_path

    log.debug("Database connection opened", extra={"backend": settings.db_backend, "target": target})
    try:
        yield conn
    finally:
        conn.close()
        log.debug("Database connection closed", extra={"backend": settings.db_backend})


def ensure_schema(conn: DBConnection) -> None:
    """Create the ``parcel`` table and its client index if they do not exist."""
    statements = _SQLITE_SCHEMA if isinstance(conn, sqlite3.Connection) else _POSTGRES_SCHEMA
    for statement in statements:
        conn.execute(statement)
    conn.commit()


__all__ = [
    "DBConnection",
    "DB_ERRORS",
    "ensure_schema",
    "get_postgres_connection",
    "get_sqlite_connection",
    "open_connection",
    "placeholder_for",
]
