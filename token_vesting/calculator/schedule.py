"""Vesting schedule calculator.

All calculations use explicit formulas:
- before the cliff: vested = 0
- after the end:    vested = total_allocated
- in between:       vested = total_allocated × (now − start) // total_duration

The functions are pure: same inputs, same output, no hidden state.
"""

import logging

from ..core.arithmetic import checked_add, checked_mul, checked_sub
from ..core.exceptions import InvalidScheduleError
from ..core.models import EmployeeStatus, EmployeeVestingAccount
from ..core.types import I64_MAX, I64_MIN, U64_MAX, Timestamp, TokenAmount

logger = logging.getLogger(__name__)


def vested_amount(
    now: Timestamp,
    start_time: Timestamp,
    cliff_duration: int,
    total_duration: int,
    total_allocated: TokenAmount,
) -> TokenAmount:
    """
    Calculate the cumulative vested amount at ``now``.

    Formula: vested = total_allocated × (now − start_time) // total_duration,
    zero before ``start_time + cliff_duration`` and capped at
    ``total_allocated`` from ``start_time + total_duration`` on.

    Args:
        now: Query time (Unix seconds)
        start_time: Schedule epoch
        cliff_duration: Seconds after start before anything vests
        total_duration: Seconds after start at which everything has vested
        total_allocated: Total amount the beneficiary may ever claim

    Returns:
        Vested amount, truncated toward zero

    Raises:
        InvalidScheduleError: if the parameters cannot describe a schedule
        ArithmeticOverflowError: if an intermediate leaves its range
    """
    if total_duration <= 0:
        raise InvalidScheduleError("total_duration must be positive", total_duration=total_duration)
    if cliff_duration < 0 or cliff_duration > total_duration:
        raise InvalidScheduleError(
            "cliff_duration must be between 0 and total_duration",
            cliff_duration=cliff_duration,
            total_duration=total_duration,
        )
    if total_allocated < 0 or total_allocated > U64_MAX:
        raise InvalidScheduleError("total_allocated out of range", total_allocated=total_allocated)

    cliff_time = checked_add(
        start_time, cliff_duration, floor=I64_MIN, ceiling=I64_MAX, operation="cliff_time"
    )
    if now < cliff_time:
        return 0

    end_time = checked_add(
        start_time, total_duration, floor=I64_MIN, ceiling=I64_MAX, operation="end_time"
    )
    if now >= end_time:
        return total_allocated

    elapsed = checked_sub(now, start_time, ceiling=I64_MAX, operation="elapsed")
    product = checked_mul(total_allocated, elapsed, operation="allocated_x_elapsed")
    return product // total_duration


def releasable_amount(now: Timestamp, account: EmployeeVestingAccount) -> TokenAmount:
    """
    Calculate what a claim at ``now`` would release.

    Formula: releasable = vested(now) − total_withdrawn, floored at zero
    """
    vested = vested_amount(
        now,
        account.start_time,
        account.cliff_duration,
        account.total_duration,
        account.total_allocated,
    )
    return max(vested - account.total_withdrawn, 0)


class ScheduleCalculator:
    """Builds point-in-time status views of employee accounts."""

    def status(self, account: EmployeeVestingAccount, now: Timestamp) -> EmployeeStatus:
        """
        Calculate the status of an employee account.

        Args:
            account: The employee vesting record
            now: Query time (Unix seconds)

        Returns:
            EmployeeStatus with vested and releasable amounts
        """
        vested = vested_amount(
            now,
            account.start_time,
            account.cliff_duration,
            account.total_duration,
            account.total_allocated,
        )
        releasable = max(vested - account.total_withdrawn, 0)

        logger.debug(
            f"Status {account.address[:12]} at {now}: vested={vested} "
            f"withdrawn={account.total_withdrawn} releasable={releasable}"
        )

        return EmployeeStatus(
            address=account.address,
            beneficiary=account.beneficiary,
            vesting_account=account.vesting_account,
            as_of=now,
            start_time=account.start_time,
            cliff_time=account.cliff_time,
            end_time=account.end_time,
            total_allocated=account.total_allocated,
            total_withdrawn=account.total_withdrawn,
            vested=vested,
            releasable=releasable,
            phase=account.phase,
        )
