"""validate: active-batch summary with the integrity checksum."""

import typer
from rich.table import Table

from batch_ledger.config import DATABASE_URL

from .shared import build_engine, console, logger, report_ledger_errors


def validate(
    database_url: str = typer.Option(DATABASE_URL, "--database-url", "-d", help="SQLAlchemy database URL"),
) -> None:
    """Count and total ACTIVE batches and print the checksum over them."""
    log = logger.bind(command="validate")
    with report_ledger_errors(log):
        engine = build_engine(database_url)
        try:
            report = engine.validate_system()
        finally:
            engine.store.dispose()

    table = Table(title="System validation")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("status", f"[green]{report.status}[/green]")
    table.add_row("active_batches", str(report.active_batches))
    table.add_row("total_units", f"{report.total_units:,}")
    table.add_row("integrity_checksum", report.integrity_checksum)
    console.print(table)
    log.info("validate.ok", active_batches=report.active_batches, total_units=report.total_units)
