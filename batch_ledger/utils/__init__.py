"""Utility modules."""

from batch_ledger.utils.csv_loader import load_seed_batches
from batch_ledger.utils.hashing import canonicalize_json, hash_payload
from batch_ledger.utils.logger import get_logger

__all__ = [
    "load_seed_batches",
    "canonicalize_json",
    "hash_payload",
    "get_logger",
]
