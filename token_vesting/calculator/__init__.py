"""Vesting schedule calculation module."""

from .schedule import ScheduleCalculator, releasable_amount, vested_amount

__all__ = ["ScheduleCalculator", "releasable_amount", "vested_amount"]
