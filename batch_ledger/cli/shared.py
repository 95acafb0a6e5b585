"""Shared CLI helpers: console, logger, engine construction, table rendering, error reporting."""

from contextlib import contextmanager
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.table import Table

from batch_ledger.db import create_store
from batch_ledger.exceptions import BatchLedgerError, ValidationError
from batch_ledger.models.outputs import AuditEntryRecord, BatchRecord
from batch_ledger.services.lifecycle import LifecycleEngine
from batch_ledger.utils.logger import BoundLogger, get_logger

console = Console()
logger = get_logger("batch_ledger.cli")

_STATUS_STYLES = {
    "ACTIVE": "green",
    "DISPATCHED": "cyan",
    "RECALLED": "red",
    "EXPIRED": "yellow",
}


def build_engine(database_url: Optional[str], seed: bool = False) -> LifecycleEngine:
    """Open the ledger at database_url (schema created if missing) and wrap it in an engine."""
    return LifecycleEngine(create_store(database_url, seed=seed))


@contextmanager
def report_ledger_errors(log: BoundLogger) -> Iterator[None]:
    """Print domain errors in red and exit 1 instead of dumping a traceback."""
    try:
        yield
    except ValidationError as e:
        for violation in e.violations:
            console.print(f"[red]Validation error: {violation}[/red]")
        log.warning("cli.validation_error", code=e.code, violations=e.violations)
        raise typer.Exit(1) from e
    except BatchLedgerError as e:
        console.print(f"[red]{e.code}: {e.reason}[/red]")
        log.error("cli.ledger_error", code=e.code, error=e.reason)
        raise typer.Exit(1) from e


def print_batches(batches: list[BatchRecord], title: str = "Batches") -> None:
    table = Table(title=title)
    table.add_column("ID", justify="right", style="bold")
    table.add_column("Name")
    table.add_column("MFG")
    table.add_column("EXP")
    table.add_column("Qty", justify="right")
    table.add_column("Location")
    table.add_column("Status")
    table.add_column("Grade", justify="center")
    table.add_column("Line", style="dim")
    for b in batches:
        style = _STATUS_STYLES.get(b.status.value, "white")
        table.add_row(
            str(b.id),
            b.name,
            b.manufacturing_date.isoformat(),
            b.expiry_date.isoformat(),
            f"{b.quantity:,}",
            b.location or "",
            f"[{style}]{b.status.value}[/{style}]",
            b.quality_grade.value,
            b.production_line or "",
        )
    console.print(table)


def print_audit_entries(entries: list[AuditEntryRecord]) -> None:
    table = Table(title="Audit trail")
    table.add_column("Log ID", justify="right", style="bold")
    table.add_column("Timestamp")
    table.add_column("Action", style="cyan")
    table.add_column("Batch", justify="right")
    table.add_column("Details")
    for e in entries:
        table.add_row(
            str(e.log_id),
            e.timestamp.isoformat(timespec="seconds"),
            e.action.value,
            "" if e.batch_id is None else str(e.batch_id),
            e.details or "",
        )
    console.print(table)
