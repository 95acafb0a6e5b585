"""CLI commands: one module per mode (init-db, serve, ledger commands, validate)."""

from typer import Typer

from batch_ledger.cli import init_mode, ledger_commands, serve_mode, validate_mode

app = Typer(help="Pharmaceutical batch lifecycle and audit ledger")


def register_commands() -> None:
    """Register all CLI commands on the global app."""
    app.command(name="init-db")(init_mode.init_db)
    app.command()(serve_mode.serve)
    app.command()(ledger_commands.add)
    app.command()(ledger_commands.dispatch)
    app.command()(ledger_commands.recall)
    app.command(name="list")(ledger_commands.list_batches)
    app.command()(ledger_commands.audit)
    app.command()(validate_mode.validate)


register_commands()
