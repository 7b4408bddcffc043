"""
Domain package for the parcel tracker.

Exports the parcel model, its status enumeration and the error types shared by
the store and the service. Keep this package free of database concerns.
"""

from tracker.domain.errors import NotFoundError, StorageError, TrackerError
from tracker.domain.models import Parcel, ParcelStatus, utc_timestamp

__all__ = [
    "NotFoundError",
    "Parcel",
    "ParcelStatus",
    "StorageError",
    "TrackerError",
    "utc_timestamp",
]
