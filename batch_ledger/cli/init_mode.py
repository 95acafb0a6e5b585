"""init-db: create the ledger schema, optionally loading the demo batches."""

import typer

from batch_ledger.config import DATABASE_URL
from batch_ledger.db import create_store
from batch_ledger.db.seed_data import seed_demo_batches

from .shared import console, logger, report_ledger_errors


def init_db(
    database_url: str = typer.Option(DATABASE_URL, "--database-url", "-d", help="SQLAlchemy database URL"),
    seed: bool = typer.Option(False, "--seed", help="Load the demo batches if the ledger is empty"),
) -> None:
    """Create tables and append-only triggers; with --seed, load demo batches."""
    log = logger.bind(command="init-db")
    with report_ledger_errors(log):
        store = create_store(database_url, seed=False)
        try:
            inserted = seed_demo_batches(store) if seed else 0
        finally:
            store.dispose()
    console.print(f"[green]Ledger ready at {database_url}[/green]")
    if seed:
        console.print(f"[dim]Seeded {inserted} demo batches.[/dim]")
    log.info("init_db.ok", seeded=inserted)
