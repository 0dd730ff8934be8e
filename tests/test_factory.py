"""Tests for vesting and employee account creation."""

import pytest

from token_vesting.core.exceptions import (
    AccountNotFoundError,
    AlreadyExistsError,
    InvalidScheduleError,
    UnauthorizedError,
    ValidationError,
)
from token_vesting.core.types import U64_MAX, ErrorKind
from token_vesting.providers.identity import Keypair
from token_vesting.vesting.factory import validate_schedule

LABEL = "acme"


class TestCreateVestingAccount:
    """Tests for create-vesting-account."""

    def test_creates_account_and_custody(self, runtime, employer, mint):
        """Test the account is stored with an empty custody holding."""
        account = runtime.create_vesting_account(employer, LABEL, mint.address)

        assert account.owner == employer.identity
        assert account.token_mint == mint.address
        assert runtime.vesting_account(LABEL) == account
        custody = runtime.token_program.get_holding(account.custody_balance_handle)
        assert custody.balance == 0
        assert custody.mint == mint.address
        assert custody.authority == account.custody_balance_handle

    def test_address_is_deterministic(self, runtime, employer, mint):
        """Test the account lives at the address derived from its label."""
        account = runtime.create_vesting_account(employer, LABEL, mint.address)
        address, bump = runtime.addresses.vesting_account(LABEL)
        treasury, treasury_bump = runtime.addresses.treasury(LABEL)

        assert account.address == address
        assert account.account_bump == bump
        assert account.custody_balance_handle == treasury
        assert account.treasury_bump == treasury_bump

    def test_duplicate_label(self, runtime, employer, bob, mint):
        """Test a label can be taken only once, by anyone."""
        first = runtime.create_vesting_account(employer, LABEL, mint.address)

        with pytest.raises(AlreadyExistsError) as exc_info:
            runtime.create_vesting_account(bob, LABEL, mint.address)

        assert exc_info.value.kind == ErrorKind.ALREADY_EXISTS
        assert runtime.vesting_account(LABEL) == first

    def test_unknown_mint(self, runtime, employer):
        """Test the mint must exist."""
        with pytest.raises(AccountNotFoundError):
            runtime.create_vesting_account(employer, LABEL, "99" * 32)
        assert runtime.store.list_vesting_accounts() == []

    def test_label_too_long(self, runtime, employer, mint):
        """Test labels are limited to 32 bytes."""
        with pytest.raises(ValidationError):
            runtime.create_vesting_account(employer, "x" * 33, mint.address)

    def test_unverified_signer(self, runtime, employer, mint):
        """Test a signer whose secret does not match is rejected."""
        forged = Keypair(identity=employer.identity, secret=b"wrong")
        with pytest.raises(UnauthorizedError):
            runtime.create_vesting_account(forged, LABEL, mint.address)


class TestCreateEmployeeAccount:
    """Tests for create-employee-account."""

    def test_creates_account(self, runtime, employer, alice, vesting_account):
        """Test a new employee account starts with nothing withdrawn."""
        account = runtime.create_employee_account(employer, LABEL, alice.identity, 0, 10, 100, 1_000)

        assert account.beneficiary == alice.identity
        assert account.vesting_account == vesting_account.address
        assert account.total_withdrawn == 0
        assert runtime.employee_account(LABEL, alice.identity) == account

    def test_does_not_check_custody(self, runtime, employer, alice, vesting_account):
        """Test allocations may exceed the custody balance."""
        account = runtime.create_employee_account(employer, LABEL, alice.identity, 0, 0, 100, 1_000_000)
        assert account.total_allocated == 1_000_000
        assert runtime.custody_balance(LABEL) == 0

    def test_duplicate_beneficiary(self, runtime, employer, alice, vesting_account):
        """Test a beneficiary is bound to a vesting account once."""
        runtime.create_employee_account(employer, LABEL, alice.identity, 0, 0, 100, 100)
        with pytest.raises(AlreadyExistsError):
            runtime.create_employee_account(employer, LABEL, alice.identity, 50, 0, 200, 500)

        assert runtime.employee_account(LABEL, alice.identity).total_allocated == 100

    def test_only_owner(self, runtime, alice, bob, vesting_account):
        """Test only the vesting account owner can add employees."""
        with pytest.raises(UnauthorizedError):
            runtime.create_employee_account(bob, LABEL, alice.identity, 0, 0, 100, 100)
        assert runtime.store.list_employee_accounts() == []

    @pytest.mark.parametrize(
        "start,cliff,duration,amount",
        [
            (0, 0, 0, 100),
            (0, 0, -5, 100),
            (0, 101, 100, 100),
            (0, -1, 100, 100),
            (0, 0, 100, U64_MAX + 1),
            (0, 0, 100, -1),
        ],
    )
    def test_invalid_schedule(self, runtime, employer, alice, vesting_account, start, cliff, duration, amount):
        """Test malformed schedules are rejected and nothing is stored."""
        with pytest.raises(InvalidScheduleError) as exc_info:
            runtime.create_employee_account(employer, LABEL, alice.identity, start, cliff, duration, amount)

        assert exc_info.value.kind == ErrorKind.INVALID_SCHEDULE
        assert runtime.store.list_employee_accounts() == []

    def test_unknown_vesting_account(self, runtime, employer, alice):
        """Test the parent account must exist."""
        with pytest.raises(AccountNotFoundError):
            runtime.create_employee_account(employer, "nobody", alice.identity, 0, 0, 100, 100)

    def test_malformed_beneficiary(self, runtime, employer, vesting_account):
        """Test beneficiaries must be hex identities."""
        with pytest.raises(ValidationError):
            runtime.create_employee_account(employer, LABEL, "alice", 0, 0, 100, 100)


class TestValidateSchedule:
    """Tests for validate_schedule."""

    def test_accepts_valid(self):
        """Test a well-formed schedule passes."""
        validate_schedule(0, 0, 1, 0)
        validate_schedule(-1_000, 100, 100, U64_MAX)

    def test_reason_in_details(self):
        """Test the failing rule is reported."""
        with pytest.raises(InvalidScheduleError) as exc_info:
            validate_schedule(0, 200, 100, 10)
        assert "cliff_duration" in exc_info.value.reason
        assert exc_info.value.details["total_duration"] == 100
