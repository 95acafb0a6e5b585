"""Database package: LedgerStore and create_store()."""

from typing import Optional

from batch_ledger.config import DATABASE_URL, SEED_DEMO_DATA
from batch_ledger.db.store import LedgerSession, LedgerStore


def create_store(database_url: Optional[str] = None, seed: Optional[bool] = None) -> LedgerStore:
    """Build a store, create the schema if missing, and optionally seed demo batches."""
    store = LedgerStore(database_url or DATABASE_URL)
    store.init_schema()
    if SEED_DEMO_DATA if seed is None else seed:
        from batch_ledger.db.seed_data import seed_demo_batches

        seed_demo_batches(store)
    return store


__all__ = [
    "LedgerSession",
    "LedgerStore",
    "create_store",
]
