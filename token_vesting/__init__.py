"""Token Vesting Ledger.

Custody-backed token vesting: employers fund a treasury and define
per-employee release schedules, beneficiaries claim what has vested.
"""

__version__ = "0.1.0"
