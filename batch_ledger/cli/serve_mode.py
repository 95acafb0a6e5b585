"""serve: run the HTTP API with uvicorn."""

import typer
import uvicorn

from batch_ledger.api.server import create_app
from batch_ledger.config import API_HOST, API_PORT, DATABASE_URL, SEED_DEMO_DATA

from .shared import console, logger


def serve(
    port: int = typer.Option(API_PORT, "--port", "-p", help="Port for the API server"),
    host: str = typer.Option(API_HOST, "--host", "-h", help="Bind host"),
    database_url: str = typer.Option(DATABASE_URL, "--database-url", "-d", help="SQLAlchemy database URL"),
    seed: bool = typer.Option(SEED_DEMO_DATA, "--seed/--no-seed", help="Load demo batches into an empty ledger"),
) -> None:
    """Start the batch ledger API."""
    log = logger.bind(command="serve", port=port)
    log.info("serve.start")
    app = create_app(database_url=database_url, seed=seed)

    console.print(f"[green]Starting batch ledger API on http://{host}:{port}[/green]")
    console.print("[dim]Endpoints: /api/batches, /api/recall, /api/validate, /api/audit-logs, /health[/dim]")
    try:
        uvicorn.run(
            app,
            host=host,
            port=port,
            log_level="info",
            timeout_graceful_shutdown=15,
        )
    except KeyboardInterrupt:
        console.print("\n[dim]Shutting down...[/dim]")
