"""Tests for the vesting schedule calculator."""

import pytest

from token_vesting.calculator.schedule import ScheduleCalculator, releasable_amount, vested_amount
from token_vesting.core.arithmetic import checked_add, checked_mul, checked_sub
from token_vesting.core.exceptions import ArithmeticOverflowError, InvalidScheduleError
from token_vesting.core.models import EmployeeVestingAccount
from token_vesting.core.types import I64_MAX, U64_MAX, U128_MAX, ErrorKind, VestingPhase

BENEFICIARY = "ab" * 32
PARENT = "cd" * 32


def make_account(**overrides) -> EmployeeVestingAccount:
    values = dict(
        address="ef" * 32,
        beneficiary=BENEFICIARY,
        vesting_account=PARENT,
        start_time=1_000,
        cliff_duration=100,
        total_duration=1_000,
        total_allocated=10_000,
    )
    values.update(overrides)
    return EmployeeVestingAccount(**values)


class TestVestedAmount:
    """Tests for the vested_amount formula."""

    def test_linear_release(self):
        """Test vesting is proportional to elapsed time."""
        # vested = 100 × elapsed // 100
        assert vested_amount(0, 0, 0, 100, 100) == 0
        assert vested_amount(25, 0, 0, 100, 100) == 25
        assert vested_amount(50, 0, 0, 100, 100) == 50
        assert vested_amount(99, 0, 0, 100, 100) == 99

    def test_capped_at_allocation(self):
        """Test nothing beyond the allocation ever vests."""
        assert vested_amount(100, 0, 0, 100, 100) == 100
        assert vested_amount(1_000, 0, 0, 100, 100) == 100
        assert vested_amount(I64_MAX, 0, 0, 100, 100) == 100

    def test_before_cliff(self):
        """Test nothing vests before start + cliff."""
        assert vested_amount(1_000, 1_000, 100, 1_000, 10_000) == 0
        assert vested_amount(1_099, 1_000, 100, 1_000, 10_000) == 0

    def test_at_cliff_releases_accrued(self):
        """Test the cliff releases everything accrued since start at once."""
        # 10,000 × 100 // 1,000 = 1,000
        assert vested_amount(1_100, 1_000, 100, 1_000, 10_000) == 1_000

    def test_before_start(self):
        """Test a query before the schedule starts vests nothing."""
        assert vested_amount(-500, 0, 0, 100, 100) == 0

    def test_truncates_toward_zero(self):
        """Test fractional amounts are floored."""
        # 10 × 1 // 3 = 3
        assert vested_amount(1, 0, 0, 3, 10) == 3
        assert vested_amount(2, 0, 0, 3, 10) == 6
        assert vested_amount(1, 0, 0, 7, 1) == 0

    def test_cliff_equal_to_duration(self):
        """Test a cliff covering the whole schedule is all-or-nothing."""
        assert vested_amount(99, 0, 100, 100, 500) == 0
        assert vested_amount(100, 0, 100, 100, 500) == 500

    def test_zero_allocation(self):
        """Test a zero allocation never vests anything."""
        assert vested_amount(50, 0, 0, 100, 0) == 0
        assert vested_amount(500, 0, 0, 100, 0) == 0

    def test_monotonic(self):
        """Test vested never decreases as time advances."""
        previous = 0
        for now in range(-10, 1_200, 7):
            current = vested_amount(now, 0, 37, 1_000, 9_999)
            assert current >= previous
            previous = current

    def test_large_values_do_not_overflow(self):
        """Test the widened intermediate holds u64 amount × long durations."""
        duration = 10 * 365 * 24 * 3600
        vested = vested_amount(duration // 2, 0, 0, duration, U64_MAX)
        assert vested == U64_MAX * (duration // 2) // duration

    def test_end_time_overflow(self):
        """Test a schedule ending past the timestamp range is rejected."""
        with pytest.raises(ArithmeticOverflowError) as exc_info:
            vested_amount(I64_MAX, I64_MAX - 10, 0, 100, 100)
        assert exc_info.value.kind == ErrorKind.ARITHMETIC_OVERFLOW

    def test_zero_duration(self):
        """Test zero duration is rejected."""
        with pytest.raises(InvalidScheduleError):
            vested_amount(10, 0, 0, 0, 100)

    def test_cliff_exceeds_duration(self):
        """Test a cliff beyond the duration is rejected."""
        with pytest.raises(InvalidScheduleError):
            vested_amount(10, 0, 101, 100, 100)

    def test_negative_cliff(self):
        """Test a negative cliff is rejected."""
        with pytest.raises(InvalidScheduleError):
            vested_amount(10, 0, -1, 100, 100)

    def test_allocation_out_of_range(self):
        """Test an allocation beyond u64 is rejected."""
        with pytest.raises(InvalidScheduleError):
            vested_amount(10, 0, 0, 100, U64_MAX + 1)


class TestCheckedArithmetic:
    """Tests for checked integer helpers."""

    def test_checked_add(self):
        """Test addition within and beyond bounds."""
        assert checked_add(1, 2) == 3
        assert checked_add(U64_MAX - 1, 1) == U64_MAX
        with pytest.raises(ArithmeticOverflowError):
            checked_add(U64_MAX, 1)

    def test_checked_sub(self):
        """Test subtraction never goes below the floor."""
        assert checked_sub(5, 5) == 0
        with pytest.raises(ArithmeticOverflowError):
            checked_sub(4, 5)

    def test_checked_mul(self):
        """Test multiplication within the 128-bit range."""
        assert checked_mul(U64_MAX, U64_MAX) == U64_MAX * U64_MAX
        with pytest.raises(ArithmeticOverflowError):
            checked_mul(U128_MAX, 2)
        with pytest.raises(ArithmeticOverflowError):
            checked_mul(-1, 2)

    def test_overflow_details(self):
        """Test overflow errors name the operation."""
        with pytest.raises(ArithmeticOverflowError) as exc_info:
            checked_add(U64_MAX, 1, operation="total_withdrawn")
        assert exc_info.value.operation == "total_withdrawn"
        assert exc_info.value.details["operands"] == [U64_MAX, 1]


class TestReleasableAmount:
    """Tests for releasable_amount."""

    def test_subtracts_withdrawn(self):
        """Test releasable is vested minus withdrawn."""
        account = make_account(total_withdrawn=1_000)
        # vested at 1,500 = 10,000 × 500 // 1,000 = 5,000
        assert releasable_amount(1_500, account) == 4_000

    def test_never_negative(self):
        """Test releasable floors at zero."""
        account = make_account(total_withdrawn=5_000)
        assert releasable_amount(1_200, account) == 0


class TestScheduleCalculator:
    """Tests for ScheduleCalculator.status."""

    def test_status_fields(self):
        """Test status carries the schedule boundaries and amounts."""
        status = ScheduleCalculator().status(make_account(total_withdrawn=500), 1_500)

        assert status.as_of == 1_500
        assert status.cliff_time == 1_100
        assert status.end_time == 2_000
        assert status.vested == 5_000
        assert status.releasable == 4_500
        assert status.phase == VestingPhase.PARTIALLY_VESTED

    def test_status_before_cliff(self):
        """Test a fresh account before its cliff."""
        status = ScheduleCalculator().status(make_account(), 1_050)

        assert status.vested == 0
        assert status.releasable == 0
        assert status.phase == VestingPhase.CREATED
