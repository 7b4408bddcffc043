"""
Infrastructure package for the parcel tracker.

Centralizes database connectivity concerns (backend selection, connection
lifecycle, schema bootstrap). Keep this layer focused on I/O and resource
management, decoupled from parcel rules.
"""

from tracker.infrastructure.db_factory import (
    DB_ERRORS,
    DBConnection,
    ensure_schema,
    open_connection,
    placeholder_for,
)

__all__ = [
    "DB_ERRORS",
    "DBConnection",
    "ensure_schema",
    "open_connection",
    "placeholder_for",
]
