"""
Pytest configuration for the parcel tracker.

Provides fixtures for:
- In-memory SQLite connections with the parcel schema
- Store and service instances (service output captured in a rich console)
- Settings override for PostgreSQL integration tests
"""

from __future__ import annotations

import io
import logging
import os
import sqlite3
from typing import Generator

import psycopg
import pytest
from rich.console import Console

from tracker.config import Settings, build_dsn, get_settings
from tracker.infrastructure.db_factory import ensure_schema
from tracker.service import TrackingService
from tracker.store import ParcelStore


@pytest.fixture(autouse=True)
def _clear_settings_cache() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _restore_root_logging() -> Generator[None, None, None]:
    """Undo configure_logging() calls so handlers never outlive captured streams."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler.get_name() == "default":
            root.removeHandler(handler)
    root.setLevel(level)


@pytest.fixture
def sqlite_conn() -> Generator[sqlite3.Connection, None, None]:
    """
    Private in-memory SQLite database with the parcel table created.
    """
    conn = sqlite3.connect(":memory:")
    ensure_schema(conn)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def store(sqlite_conn: sqlite3.Connection) -> ParcelStore:
    return ParcelStore(sqlite_conn)


@pytest.fixture
def output() -> io.StringIO:
    """Buffer receiving everything the service prints."""
    return io.StringIO()


@pytest.fixture
def service(store: ParcelStore, output: io.StringIO) -> TrackingService:
    console = Console(file=output, width=200, color_system=None)
    return TrackingService(store, console=console)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    PostgreSQL settings with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_backend="postgres",
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "tracker"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def db_connection_available(test_settings: Settings) -> bool:
    """
    Check if PostgreSQL is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(build_dsn(test_settings), connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def pg_connection(
    test_settings: Settings, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Session-scoped autocommit PostgreSQL connection with the schema in place.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(build_dsn(test_settings), autocommit=True)
    ensure_schema(conn)
    try:
        yield conn
    finally:
        conn.close()
