"""
Tracking service: parcel lifecycle rules on top of the record store.

Registration stamps the creation time and the initial status; ``next_status``
reads the current status and writes the next one in the chain. Address changes
and deletes are passed straight to the store, whose guarded writes decide
whether anything changes.

Human-readable notices are printed to a rich console; diagnostics go through
the logger.
"""

from __future__ import annotations

from typing import List, Optional

from rich.console import Console

from tracker.domain.models import Parcel, ParcelStatus, utc_timestamp
from tracker.store import ParcelStore
from tracker.utils.logging import get_logger

log = get_logger(__name__)


class TrackingService:
    def __init__(self, store: ParcelStore, console: Optional[Console] = None) -> None:
        self._store = store
        self._console = console or Console()

    def _notify(self, line: str = "") -> None:
        self._console.print(line, markup=False, highlight=False, emoji=False, soft_wrap=True)

    def register(self, client: int, address: str) -> Parcel:
        """
        Register a new parcel for ``client`` and persist it.

        Returns the parcel carrying its store-assigned number. Store errors
        propagate and no notice is printed.
        """
        parcel = Parcel(
            client=client,
            status=ParcelStatus.REGISTERED,
            address=address,
            created_at=utc_timestamp(),
        )
        number = self._store.add(parcel)
        parcel = parcel.model_copy(update={"number": number})

        log.info("Parcel registered", extra={"number": number, "client": client})
        self._notify(
            f"New parcel № {parcel.number} to address {parcel.address} "
            f"from client {parcel.client} registered at {parcel.created_at}"
        )
        return parcel

    def next_status(self, number: int) -> ParcelStatus:
        """
        Advance the parcel one step along registered → sent → delivered.

        A delivered parcel is left alone. Returns the status the parcel has
        after the call.
        """
        parcel = self._store.get(number)
        next_status = parcel.status.next()
        if next_status is None:
            log.debug("Parcel already in terminal status", extra={"number": number})
            return parcel.status

        self._store.set_status(number, next_status)
        log.info(
            "Parcel status advanced",
            extra={"number": number, "from_status": parcel.status.value, "to_status": next_status.value},
        )
        self._notify(f"Parcel № {number} has new status: {next_status.value}")
        return next_status

    def change_address(self, number: int, address: str) -> None:
        """Change the delivery address; has no effect once the parcel has left."""
        self._store.set_address(number, address)
        log.debug("Address change requested", extra={"number": number})

    def delete(self, number: int) -> None:
        """Delete the parcel; has no effect once the parcel has left."""
        self._store.delete(number)
        log.debug("Delete requested", extra={"number": number})

    def print_client_parcels(self, client: int) -> List[Parcel]:
        """Print one line per parcel of ``client`` and return the parcels."""
        parcels = self._store.get_by_client(client)

        self._notify(f"Parcels of client {client}:")
        for parcel in parcels:
            self._notify(
                f"Parcel № {parcel.number} to address {parcel.address} "
                f"from client {parcel.client} registered at {parcel.created_at}, "
                f"status {parcel.status.value}"
            )
        self._notify()

        log.debug("Client parcels listed", extra={"client": client, "count": len(parcels)})
        return parcels


__all__ = ["TrackingService"]
