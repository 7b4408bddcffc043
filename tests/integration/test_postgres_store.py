"""
Store and service behaviour against a real PostgreSQL server.

Skipped automatically when the database configured through DB_* variables is
not reachable.
"""

from __future__ import annotations

import io
import random
from typing import Generator

import psycopg
import pytest
from rich.console import Console

from tracker.domain.errors import NotFoundError
from tracker.domain.models import Parcel, ParcelStatus, utc_timestamp
from tracker.service import TrackingService
from tracker.store import ParcelStore

pytestmark = pytest.mark.integration


@pytest.fixture
def client(pg_connection: psycopg.Connection) -> Generator[int, None, None]:
    """A random client id whose parcels are removed after the test."""
    client = random.randint(1, 10_000_000)
    yield client
    pg_connection.execute("DELETE FROM parcel WHERE client = %s", (client,))


@pytest.fixture
def pg_store(pg_connection: psycopg.Connection) -> ParcelStore:
    return ParcelStore(pg_connection)


def _test_parcel(client: int) -> Parcel:
    return Parcel(
        client=client,
        status=ParcelStatus.REGISTERED,
        address="test",
        created_at=utc_timestamp(),
    )


def test_add_get_delete(pg_store: ParcelStore, client: int) -> None:
    parcel = _test_parcel(client)

    number = pg_store.add(parcel)
    assert number > 0
    assert pg_store.get(number) == parcel.model_copy(update={"number": number})

    pg_store.delete(number)
    with pytest.raises(NotFoundError):
        pg_store.get(number)


def test_client_ids_beyond_32_bits_round_trip(pg_store: ParcelStore, pg_connection: psycopg.Connection) -> None:
    client = 2**40 + random.randint(1, 10_000_000)
    try:
        number = pg_store.add(_test_parcel(client))

        assert pg_store.get(number).client == client
        assert [parcel.number for parcel in pg_store.get_by_client(client)] == [number]
    finally:
        pg_connection.execute("DELETE FROM parcel WHERE client = %s", (client,))


def test_guarded_writes_are_silent_after_registration(pg_store: ParcelStore, client: int) -> None:
    number = pg_store.add(_test_parcel(client))
    pg_store.set_status(number, ParcelStatus.SENT)

    pg_store.set_address(number, "new test address")
    pg_store.delete(number)

    stored = pg_store.get(number)
    assert stored.address == "test"
    assert stored.status == ParcelStatus.SENT


def test_get_by_client(pg_store: ParcelStore, client: int) -> None:
    numbers = {pg_store.add(_test_parcel(client)) for _ in range(3)}

    stored = pg_store.get_by_client(client)

    assert {parcel.number for parcel in stored} == numbers
    assert all(parcel.client == client for parcel in stored)


def test_service_lifecycle(pg_store: ParcelStore, client: int) -> None:
    service = TrackingService(pg_store, console=Console(file=io.StringIO()))

    number = service.register(client, "A").number
    service.change_address(number, "B")

    assert service.next_status(number) == ParcelStatus.SENT
    assert service.next_status(number) == ParcelStatus.DELIVERED
    assert service.next_status(number) == ParcelStatus.DELIVERED

    service.change_address(number, "C")
    service.delete(number)
    assert pg_store.get(number).address == "B"
