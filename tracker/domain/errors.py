"""
Error types raised by the parcel store and surfaced through the service.

A guard predicate that matches no rows is not an error: only a missing
identity on lookup and driver-level failures are reported.
"""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for every error the tracker raises."""


class NotFoundError(TrackerError, LookupError):
    """No parcel exists with the requested number."""

    def __init__(self, number: int) -> None:
        super().__init__(f"parcel {number} not found")
        self.number = number


class StorageError(TrackerError):
    """
    The underlying database read or write failed, or a stored row could not
    be decoded into a parcel. The driver exception is chained as ``__cause__``.
    """


__all__ = ["NotFoundError", "StorageError", "TrackerError"]
