"""
Parcel record store: every read and write against the ``parcel`` table.

The store knows nothing about status progression. The only rule it enforces is
the ``status = 'registered'`` guard on address changes and deletes, and that
guard is part of the statement's WHERE clause: a row that fails it is simply
not matched, and the call still succeeds.

Works with any connection produced by ``tracker.infrastructure.open_connection``
(sqlite3 or psycopg); the bind-parameter marker is picked from the connection.
"""

from __future__ import annotations

from contextlib import closing, contextmanager
from typing import Any, Generator, List, Sequence

from tracker.domain.errors import NotFoundError, StorageError
from tracker.domain.models import Parcel, ParcelStatus
from tracker.infrastructure.db_factory import DB_ERRORS, DBConnection, placeholder_for
from tracker.utils.logging import get_logger

log = get_logger(__name__)

_COLUMNS = "number, client, status, address, created_at"

_INSERT = "INSERT INTO parcel (client, status, address, created_at) VALUES ({p}, {p}, {p}, {p}) RETURNING number"
_SELECT_BY_NUMBER = f"SELECT {_COLUMNS} FROM parcel WHERE number = {{p}}"
_SELECT_BY_CLIENT = f"SELECT {_COLUMNS} FROM parcel WHERE client = {{p}}"
_UPDATE_STATUS = "UPDATE parcel SET status = {p} WHERE number = {p}"
_UPDATE_ADDRESS = "UPDATE parcel SET address = {p} WHERE number = {p} AND status = {p}"
_DELETE = "DELETE FROM parcel WHERE number = {p} AND status = {p}"


def _decode(row: Sequence[Any]) -> Parcel:
    try:
        return Parcel.from_row(row)
    except ValueError as exc:  # includes pydantic ValidationError
        raise StorageError(f"malformed parcel row {tuple(row)!r}: {exc}") from exc


class ParcelStore:
    """
    Persistence for parcels over a caller-owned DB-API connection.

    Each write is committed on its own; nothing spans more than one statement.
    A failed write is rolled back so the connection stays usable, whether or
    not it runs in autocommit mode.
    """

    def __init__(self, conn: DBConnection) -> None:
        self._conn = conn
        self._placeholder = placeholder_for(conn)

    def _sql(self, template: str) -> str:
        return template.format(p=self._placeholder)

    @contextmanager
    def _write(self, operation: str) -> Generator[Any, None, None]:
        """
        Yield a cursor for one write and commit it. On a driver error the
        transaction is rolled back and a StorageError is raised.
        """
        try:
            with closing(self._conn.cursor()) as cur:
                yield cur
            self._conn.commit()
        except DB_ERRORS as exc:
            self._rollback(operation)
            raise StorageError(f"{operation} failed: {exc}") from exc

    def _rollback(self, operation: str) -> None:
        try:
            self._conn.rollback()
        except DB_ERRORS as exc:
            # The write error is what gets reported; this one is only logged.
            log.warning("Rollback failed", extra={"operation": operation, "error": str(exc)})

    def add(self, parcel: Parcel) -> int:
        """Insert ``parcel`` and return the number the database assigned to it."""
        with self._write("add") as cur:
            cur.execute(
                self._sql(_INSERT),
                (parcel.client, parcel.status.value, parcel.address, parcel.created_at),
            )
            row = cur.fetchone()
        if row is None or not row[0]:
            raise StorageError("add failed: database returned no parcel number")

        number = int(row[0])
        log.debug("Parcel row inserted", extra={"number": number, "client": parcel.client})
        return number

    def get(self, number: int) -> Parcel:
        """
        Fetch one parcel by number.

        Raises NotFoundError when no row matches and StorageError when the read
        fails or the row cannot be decoded.
        """
        try:
            with closing(self._conn.cursor()) as cur:
                cur.execute(self._sql(_SELECT_BY_NUMBER), (number,))
                row = cur.fetchone()
        except DB_ERRORS as exc:
            raise StorageError(f"get failed: {exc}") from exc

        if row is None:
            raise NotFoundError(number)
        return _decode(row)

    def get_by_client(self, client: int) -> List[Parcel]:
        """
        Fetch every parcel owned by ``client``, in no particular order.

        Returns an empty list when the client has none. A failure while
        iterating or decoding any row fails the whole call.
        """
        parcels: List[Parcel] = []
        try:
            with closing(self._conn.cursor()) as cur:
                cur.execute(self._sql(_SELECT_BY_CLIENT), (client,))
                for row in cur:
                    parcels.append(_decode(row))
        except DB_ERRORS as exc:
            raise StorageError(f"get_by_client failed: {exc}") from exc
        return parcels

    def set_status(self, number: int, status: ParcelStatus) -> None:
        """Overwrite the status. A number with no row is silently ignored."""
        with self._write("set_status") as cur:
            cur.execute(self._sql(_UPDATE_STATUS), (status.value, number))

    def set_address(self, number: int, address: str) -> None:
        """Overwrite the address, only while the parcel is still registered."""
        with self._write("set_address") as cur:
            cur.execute(
                self._sql(_UPDATE_ADDRESS),
                (address, number, ParcelStatus.REGISTERED.value),
            )

    def delete(self, number: int) -> None:
        """Remove the parcel, only while it is still registered."""
        with self._write("delete") as cur:
            cur.execute(self._sql(_DELETE), (number, ParcelStatus.REGISTERED.value))


__all__ = ["ParcelStore"]
