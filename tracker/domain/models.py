"""
Domain models for the parcel tracker.

Defines the parcel record aligned with the ``parcel`` table and the closed
status enumeration with its forward-only chain.
"""
from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from pydantic import BaseModel, Field

# RFC 3339, UTC, second precision. Lexicographic order matches time order.
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class ParcelStatus(str, enum.Enum):
    """
    Delivery status of a parcel.

    Status flow:
        REGISTERED → SENT → DELIVERED
    DELIVERED is terminal.
    """

    REGISTERED = "registered"
    SENT = "sent"
    DELIVERED = "delivered"

    def next(self) -> Optional["ParcelStatus"]:
        """Return the following status, or None when this one is terminal."""
        return _NEXT_STATUS[self]

    @property
    def is_terminal(self) -> bool:
        return self.next() is None


_NEXT_STATUS = {
    ParcelStatus.REGISTERED: ParcelStatus.SENT,
    ParcelStatus.SENT: ParcelStatus.DELIVERED,
    ParcelStatus.DELIVERED: None,
}


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """Format ``moment`` (default: now) as a UTC RFC 3339 string."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).strftime(TIMESTAMP_FORMAT)


class Parcel(BaseModel):
    """
    Representation of a single row in the ``parcel`` table.
    """

    number: Optional[int] = Field(None, description="Store-assigned identity; None until persisted.")
    client: int = Field(..., description="Identifier of the owning client.")
    status: ParcelStatus = Field(ParcelStatus.REGISTERED, description="Current delivery status.")
    address: str = Field(..., description="Delivery address.")
    created_at: str = Field(..., description="Registration time, RFC 3339 UTC.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "Parcel":
        """Build a parcel from a ``(number, client, status, address, created_at)`` row."""
        number, client, status, address, created_at = row
        return cls(
            number=number,
            client=client,
            status=status,
            address=address,
            created_at=created_at,
        )


__all__ = ["Parcel", "ParcelStatus", "TIMESTAMP_FORMAT", "utc_timestamp"]
