"""Ledger commands: add, dispatch, recall, list, audit."""

from typing import Optional

import typer

from batch_ledger.config import DATABASE_URL
from batch_ledger.models.domain import AuditAction

from .shared import (
    build_engine,
    console,
    logger,
    print_audit_entries,
    print_batches,
    report_ledger_errors,
)

DATABASE_URL_OPTION = typer.Option(DATABASE_URL, "--database-url", "-d", help="SQLAlchemy database URL")


def add(
    name: str = typer.Argument(..., help="Drug/product name"),
    mfg: str = typer.Option(..., "--mfg", help="Manufacturing date (YYYY-MM-DD)"),
    exp: str = typer.Option(..., "--exp", help="Expiry date (YYYY-MM-DD)"),
    quantity: int = typer.Option(..., "--quantity", "-q", help="Unit count"),
    location: Optional[str] = typer.Option(None, "--location", "-l", help="Storage location"),
    line: Optional[str] = typer.Option(None, "--line", help="Production line"),
    database_url: str = DATABASE_URL_OPTION,
) -> None:
    """Create a batch in ACTIVE."""
    log = logger.bind(command="add", name=name)
    with report_ledger_errors(log):
        engine = build_engine(database_url)
        try:
            result = engine.add_batch(name, mfg, exp, quantity, location, line)
        finally:
            engine.store.dispose()
    console.print(
        f"[green]Batch #{result.id} created: {result.status.value}, grade {result.quality_grade.value}[/green]"
    )


def dispatch(
    batch_id: int = typer.Argument(..., help="Batch id"),
    database_url: str = DATABASE_URL_OPTION,
) -> None:
    """Release an ACTIVE batch for distribution."""
    log = logger.bind(command="dispatch", batch_id=batch_id)
    with report_ledger_errors(log):
        engine = build_engine(database_url)
        try:
            result = engine.dispatch_batch(batch_id)
        finally:
            engine.store.dispose()
    console.print(f"[green]{result.message}[/green]")


def recall(
    drug_name: str = typer.Argument(..., help="Drug name; every ACTIVE batch with it is recalled"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
    database_url: str = DATABASE_URL_OPTION,
) -> None:
    """Recall all ACTIVE batches of a drug into quarantine."""
    log = logger.bind(command="recall", drug_name=drug_name)
    if not yes:
        typer.confirm(f"Recall every ACTIVE batch of {drug_name!r}?", abort=True)
    with report_ledger_errors(log):
        engine = build_engine(database_url)
        try:
            result = engine.process_recall(drug_name)
        finally:
            engine.store.dispose()
    color = "yellow" if result.affected_count else "dim"
    console.print(f"[{color}]{result.message}[/{color}]")


def list_batches(
    database_url: str = DATABASE_URL_OPTION,
) -> None:
    """Show every batch, newest first."""
    log = logger.bind(command="list")
    with report_ledger_errors(log):
        engine = build_engine(database_url)
        try:
            batches = engine.list_batches()
        finally:
            engine.store.dispose()
    print_batches(batches)


def audit(
    batch_id: Optional[int] = typer.Option(None, "--batch-id", "-b", help="Only entries for this batch"),
    action: Optional[AuditAction] = typer.Option(None, "--action", "-a", help="Filter by action"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", min=1, help="At most this many entries"),
    database_url: str = DATABASE_URL_OPTION,
) -> None:
    """Show the audit trail in commit order."""
    log = logger.bind(command="audit")
    with report_ledger_errors(log):
        engine = build_engine(database_url)
        try:
            entries = engine.list_audit_entries(batch_id=batch_id, action=action, limit=limit)
        finally:
            engine.store.dispose()
    print_audit_entries(entries)
