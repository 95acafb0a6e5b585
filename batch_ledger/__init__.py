"""Pharmaceutical batch lifecycle and audit ledger."""

__version__ = "1.0.0"
