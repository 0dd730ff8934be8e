"""Storage module for ledger records and state snapshots."""

from .json_store import LedgerStore, StateFile

__all__ = ["LedgerStore", "StateFile"]
