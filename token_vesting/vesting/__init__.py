"""Vesting account creation and claims."""

from .addresses import LedgerAddresses
from .claim import ClaimEngine
from .factory import AccountFactory

__all__ = ["LedgerAddresses", "ClaimEngine", "AccountFactory"]
