"""Tests for ledger data models."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from token_vesting.core.exceptions import ArithmeticOverflowError
from token_vesting.core.models import EmployeeVestingAccount, LedgerEvent, VestingAccount
from token_vesting.core.types import I64_MAX, U64_MAX, CommandAction, VestingPhase


def employee(**overrides) -> EmployeeVestingAccount:
    values = dict(
        address="01" * 32,
        beneficiary="02" * 32,
        vesting_account="03" * 32,
        start_time=0,
        cliff_duration=0,
        total_duration=100,
        total_allocated=100,
    )
    values.update(overrides)
    return EmployeeVestingAccount(**values)


class TestVestingAccount:
    """Tests for VestingAccount."""

    def base(self, **overrides) -> dict:
        values = dict(
            address="0a" * 32,
            owner="0b" * 32,
            token_mint="0c" * 32,
            custody_balance_handle="0d" * 32,
            label="acme",
            treasury_bump=255,
            account_bump=255,
        )
        values.update(overrides)
        return values

    def test_valid(self):
        """Test a well-formed account."""
        account = VestingAccount(**self.base())
        assert account.label == "acme"

    def test_label_limits(self):
        """Test empty and over-long labels are rejected."""
        with pytest.raises(PydanticValidationError):
            VestingAccount(**self.base(label=""))
        with pytest.raises(PydanticValidationError):
            VestingAccount(**self.base(label="x" * 33))
        assert VestingAccount(**self.base(label="x" * 32)).label == "x" * 32

    def test_immutable(self):
        """Test records cannot be mutated in place."""
        account = VestingAccount(**self.base())
        with pytest.raises(PydanticValidationError):
            account.owner = "ff" * 32


class TestEmployeeVestingAccount:
    """Tests for EmployeeVestingAccount invariants."""

    def test_derived_times(self):
        """Test cliff and end times."""
        account = employee(start_time=1_000, cliff_duration=10, total_duration=100)
        assert account.cliff_time == 1_010
        assert account.end_time == 1_100

    def test_cliff_exceeds_duration(self):
        """Test cliff_duration > total_duration is rejected."""
        with pytest.raises(PydanticValidationError):
            employee(cliff_duration=101)

    def test_zero_duration(self):
        """Test total_duration must be positive."""
        with pytest.raises(PydanticValidationError):
            employee(total_duration=0)

    def test_withdrawn_exceeds_allocated(self):
        """Test total_withdrawn > total_allocated is rejected."""
        with pytest.raises(PydanticValidationError):
            employee(total_withdrawn=101)

    def test_allocation_range(self):
        """Test allocations must fit u64."""
        assert employee(total_allocated=U64_MAX).total_allocated == U64_MAX
        with pytest.raises(PydanticValidationError):
            employee(total_allocated=U64_MAX + 1)
        with pytest.raises(PydanticValidationError):
            employee(total_allocated=-1)

    def test_end_outside_timestamp_range(self):
        """Test schedules ending beyond i64 are rejected."""
        with pytest.raises(PydanticValidationError):
            employee(start_time=I64_MAX - 10)

    def test_with_withdrawal(self):
        """Test with_withdrawal returns an updated copy."""
        account = employee()
        updated = account.with_withdrawal(40)

        assert updated.total_withdrawn == 40
        assert account.total_withdrawn == 0
        assert updated.address == account.address

    def test_with_withdrawal_cannot_exceed_allocation(self):
        """Test withdrawing past the allocation fails."""
        account = employee(total_withdrawn=90)
        with pytest.raises(ArithmeticOverflowError):
            account.with_withdrawal(11)

    def test_with_withdrawal_requires_positive_amount(self):
        """Test zero and negative withdrawals are rejected."""
        with pytest.raises(ValueError):
            employee().with_withdrawal(0)

    def test_phase(self):
        """Test the derived lifecycle phase."""
        assert employee().phase == VestingPhase.CREATED
        assert employee(total_withdrawn=1).phase == VestingPhase.PARTIALLY_VESTED
        assert employee(total_withdrawn=100).phase == VestingPhase.FULLY_VESTED
        assert employee(total_allocated=0).phase == VestingPhase.FULLY_VESTED

    def test_remaining(self):
        """Test remaining allocation."""
        assert employee(total_withdrawn=30).remaining == 70


class TestLedgerEvent:
    """Tests for LedgerEvent."""

    def test_defaults(self):
        """Test events default to success with a UTC timestamp."""
        event = LedgerEvent(action=CommandAction.CLAIM)
        assert event.success
        assert event.timestamp.tzinfo is not None

    def test_json_round_trip(self):
        """Test events survive JSON serialization."""
        event = LedgerEvent(action=CommandAction.CLAIM, amount=5, ledger_time=10, success=False, error_kind="Unauthorized")
        restored = LedgerEvent.model_validate(event.model_dump(mode="json"))
        assert restored == event
