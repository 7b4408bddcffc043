"""
Parcel tracker - follows parcels through registered → sent → delivered.

The package is split into:

- a domain layer (parcel model, status chain, errors)
- a record store issuing guarded, parameterized SQL against SQLite or PostgreSQL
- a tracking service applying the lifecycle rules and printing notices
- infrastructure for connection lifecycle and schema bootstrap, and a typer CLI
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from tracker.config import Settings, get_settings
from tracker.domain import (
    NotFoundError,
    Parcel,
    ParcelStatus,
    StorageError,
    TrackerError,
)
from tracker.infrastructure import ensure_schema, open_connection
from tracker.service import TrackingService
from tracker.store import ParcelStore
from tracker.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "NotFoundError",
    "Parcel",
    "ParcelStatus",
    "StorageError",
    "TrackerError",
    # Persistence and rules
    "ParcelStore",
    "TrackingService",
    "ensure_schema",
    "open_connection",
    # Logging
    "configure_logging",
    "get_logger",
]
