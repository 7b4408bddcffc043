from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Generator

import typer

from tracker.config import get_settings
from tracker.domain.errors import TrackerError
from tracker.infrastructure.db_factory import DB_ERRORS, ensure_schema, open_connection
from tracker.service import TrackingService
from tracker.store import ParcelStore
from tracker.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Parcel tracker CLI.")
log = get_logger(__name__)

DEMO_CLIENT = 1
DEMO_ADDRESS = "Pskov, Pushkin village, Kolotushkin st., 5"
DEMO_NEW_ADDRESS = "Saratov, Verkhnie Zori village, Kozlov st., 25"


@contextmanager
def tracking_service() -> Generator[TrackingService, None, None]:
    """
    Open the configured database, make sure the schema exists and yield a
    service bound to it. Domain and driver errors end the command with exit
    code 1.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    try:
        with open_connection(settings) as conn:
            ensure_schema(conn)
            yield TrackingService(ParcelStore(conn))
    except (TrackerError, *DB_ERRORS) as exc:
        log.error("Command failed", extra={"error": str(exc), "error_type": type(exc).__name__})
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    if settings.db_backend == "postgres":
        target = f"{settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    else:
        target = settings.db_path
    typer.echo(f"backend={settings.db_backend} | DB={target} | env={settings.app_env} | log={settings.log_level}")


@app.command("init-db")
def init_db() -> None:
    """
    Create the parcel table if it does not exist.
    """
    with tracking_service():
        typer.echo("Schema ready.")


@app.command()
def register(
    client: int = typer.Argument(..., help="Client identifier."),
    address: str = typer.Argument(..., help="Delivery address."),
) -> None:
    """
    Register a new parcel.
    """
    with tracking_service() as service:
        service.register(client, address)


@app.command("next-status")
def next_status(number: int = typer.Argument(..., help="Parcel number.")) -> None:
    """
    Move a parcel to its next status (registered → sent → delivered).
    """
    with tracking_service() as service:
        service.next_status(number)


@app.command("change-address")
def change_address(
    number: int = typer.Argument(..., help="Parcel number."),
    address: str = typer.Argument(..., help="New delivery address."),
) -> None:
    """
    Change the address of a parcel that is still registered.
    """
    with tracking_service() as service:
        service.change_address(number, address)


@app.command()
def delete(number: int = typer.Argument(..., help="Parcel number.")) -> None:
    """
    Delete a parcel that is still registered.
    """
    with tracking_service() as service:
        service.delete(number)


@app.command("list")
def list_parcels(client: int = typer.Argument(..., help="Client identifier.")) -> None:
    """
    Print every parcel of a client.
    """
    with tracking_service() as service:
        service.print_client_parcels(client)


@app.command()
def demo() -> None:
    """
    Walk one client through the full lifecycle, stopping at the first error.
    """
    with tracking_service() as service:
        parcel = service.register(DEMO_CLIENT, DEMO_ADDRESS)
        service.change_address(parcel.number, DEMO_NEW_ADDRESS)
        service.next_status(parcel.number)
        service.print_client_parcels(DEMO_CLIENT)

        # Sent parcels cannot be deleted: it must still be listed afterwards.
        service.delete(parcel.number)
        service.print_client_parcels(DEMO_CLIENT)

        parcel = service.register(DEMO_CLIENT, DEMO_ADDRESS)
        service.delete(parcel.number)
        service.print_client_parcels(DEMO_CLIENT)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
