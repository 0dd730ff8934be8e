"""
Record storage for the vesting ledger.

LedgerStore keeps records in memory, keyed by their derived address.
StateFile persists a complete ledger snapshot (records, token balances,
clock override and audit trail) as a single JSON file.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

from ..core.exceptions import AccountNotFoundError, AlreadyExistsError, ValidationError
from ..core.models import EmployeeVestingAccount, VestingAccount
from ..core.types import Address, RecordKind

logger = logging.getLogger(__name__)

Record = Union[VestingAccount, EmployeeVestingAccount]

_RECORD_TYPES: dict[RecordKind, type] = {
    RecordKind.VESTING_ACCOUNT: VestingAccount,
    RecordKind.EMPLOYEE_ACCOUNT: EmployeeVestingAccount,
}


def _kind_of(record: Record) -> RecordKind:
    for kind, record_type in _RECORD_TYPES.items():
        if isinstance(record, record_type):
            return kind
    raise ValidationError("record", type(record).__name__, "unsupported record type")


class LedgerStore:
    """
    In-memory record store.

    Usage:
        store = LedgerStore()
        store.insert(account)
        account = store.get_vesting_account(address)
        snapshot = store.snapshot()
        ...
        store.restore(snapshot)
    """

    def __init__(self) -> None:
        self._records: dict[Address, Record] = {}

    def exists(self, address: Address) -> bool:
        return address in self._records

    def get(self, address: Address) -> Optional[Record]:
        return self._records.get(address)

    def get_vesting_account(self, address: Address) -> VestingAccount:
        record = self._records.get(address)
        if not isinstance(record, VestingAccount):
            raise AccountNotFoundError("Vesting account", address)
        return record

    def get_employee_account(self, address: Address) -> EmployeeVestingAccount:
        record = self._records.get(address)
        if not isinstance(record, EmployeeVestingAccount):
            raise AccountNotFoundError("Employee vesting account", address)
        return record

    def insert(self, record: Record) -> None:
        """Store a new record. Fails if its address is taken."""
        if record.address in self._records:
            raise AlreadyExistsError(type(self._records[record.address]).__name__, record.address)
        self._records[record.address] = record

    def update(self, record: Record) -> None:
        """Replace an existing record of the same kind."""
        current = self._records.get(record.address)
        if current is None:
            raise AccountNotFoundError(type(record).__name__, record.address)
        if _kind_of(current) != _kind_of(record):
            raise ValidationError("record", record.address, "cannot change record kind")
        self._records[record.address] = record

    def list_vesting_accounts(self) -> list[VestingAccount]:
        return [r for r in self._records.values() if isinstance(r, VestingAccount)]

    def list_employee_accounts(self, vesting_account: Optional[Address] = None) -> list[EmployeeVestingAccount]:
        return [
            r
            for r in self._records.values()
            if isinstance(r, EmployeeVestingAccount)
            and (vesting_account is None or r.vesting_account == vesting_account)
        ]

    def snapshot(self) -> dict[Address, Record]:
        # Records are frozen, a shallow copy is a full snapshot
        return dict(self._records)

    def restore(self, snapshot: dict[Address, Record]) -> None:
        self._records = dict(snapshot)

    def to_dict(self) -> list[dict[str, Any]]:
        """Convert to a JSON-serializable list."""
        return [
            {"kind": _kind_of(r).value, "data": r.model_dump(mode="json")}
            for r in self._records.values()
        ]

    @classmethod
    def from_dict(cls, data: list[dict[str, Any]]) -> "LedgerStore":
        """Create from the output of ``to_dict``."""
        store = cls()
        for entry in data:
            record_type = _RECORD_TYPES[RecordKind(entry["kind"])]
            store.insert(record_type.model_validate(entry["data"]))
        return store


class StateFile:
    """
    JSON file holding a full ledger snapshot.

    Writes go to a uniquely named temporary sibling first and are moved into
    place, so a crash mid-write leaves the previous state intact.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Optional[dict[str, Any]]:
        """
        Load the snapshot.

        Returns None if the file doesn't exist.
        """
        if not self.path.exists():
            return None

        with open(self.path, "r", encoding="utf-8") as f:
            try:
                return json.load(f)
            except json.JSONDecodeError as e:
                raise ValidationError("state_file", str(self.path), f"invalid JSON: {e}")

    def save(self, data: dict[str, Any]) -> Path:
        """
        Save the snapshot.

        Returns the path to the saved file.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)

        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_path = Path(f.name)
            json.dump(data, f, indent=2, ensure_ascii=False)
        try:
            os.replace(tmp_path, self.path)
        except OSError:
            tmp_path.unlink(missing_ok=True)
            raise

        logger.debug(f"Saved ledger state to {self.path}")
        return self.path
