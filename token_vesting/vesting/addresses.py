"""Seed layout of every ledger record."""

from ..core.exceptions import ValidationError
from ..core.types import MAX_LABEL_BYTES, Address, Identity
from ..providers.addressing import key_bytes
from ..providers.base import AddressProvider

VESTING_SEED = "vesting"
TREASURY_SEED = "vesting_treasury"
EMPLOYEE_SEED = "employee_vesting"
HOLDING_SEED = "holding"


def validate_label(label: str) -> str:
    """Check an employer label is usable as a seed."""
    if not isinstance(label, str) or not label:
        raise ValidationError("label", label, "must be a non-empty string")
    if len(label.encode("utf-8")) > MAX_LABEL_BYTES:
        raise ValidationError("label", label, f"must be at most {MAX_LABEL_BYTES} bytes")
    return label


class LedgerAddresses:
    """Maps ledger records to the seeds that locate them."""

    def __init__(self, provider: AddressProvider):
        self.provider = provider

    def vesting_account(self, label: str) -> tuple[Address, int]:
        return self.provider.find_address(VESTING_SEED, validate_label(label))

    def treasury(self, label: str) -> tuple[Address, int]:
        return self.provider.find_address(TREASURY_SEED, validate_label(label))

    def employee_account(self, beneficiary: Identity, vesting_account: Address) -> tuple[Address, int]:
        return self.provider.find_address(
            EMPLOYEE_SEED,
            key_bytes(beneficiary, "beneficiary"),
            key_bytes(vesting_account, "vesting_account"),
        )

    def beneficiary_holding(self, owner: Identity, mint: Address) -> Address:
        address, _ = self.provider.find_address(
            HOLDING_SEED,
            key_bytes(owner, "owner"),
            key_bytes(mint, "mint"),
        )
        return address
