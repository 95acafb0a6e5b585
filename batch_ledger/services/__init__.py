"""Business services over the ledger store."""

from batch_ledger.services.lifecycle import LifecycleEngine

__all__ = ["LifecycleEngine"]
