"""HTTP adapter for the batch ledger."""

from batch_ledger.api.server import create_app

__all__ = ["create_app"]
