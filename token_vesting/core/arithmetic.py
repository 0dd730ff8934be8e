"""Checked integer arithmetic.

Python integers never wrap, so bounds are enforced explicitly: every
result must fit the range it will be stored in, otherwise
ArithmeticOverflowError is raised.
"""

from .exceptions import ArithmeticOverflowError
from .types import U64_MAX, U128_MAX


def checked_add(
    a: int,
    b: int,
    *,
    floor: int = 0,
    ceiling: int = U64_MAX,
    operation: str = "add",
) -> int:
    """Return ``a + b`` if it lies within ``[floor, ceiling]``."""
    result = a + b
    if result < floor or result > ceiling:
        raise ArithmeticOverflowError(operation, a, b)
    return result


def checked_sub(
    a: int,
    b: int,
    *,
    floor: int = 0,
    ceiling: int = U64_MAX,
    operation: str = "sub",
) -> int:
    """Return ``a - b`` if it lies within ``[floor, ceiling]``."""
    result = a - b
    if result < floor or result > ceiling:
        raise ArithmeticOverflowError(operation, a, b)
    return result


def checked_mul(
    a: int,
    b: int,
    *,
    ceiling: int = U128_MAX,
    operation: str = "mul",
) -> int:
    """
    Return ``a * b`` for non-negative operands.

    The default ceiling is the 128-bit range used as the widened
    intermediate for 64-bit amount times 64-bit elapsed seconds.
    """
    if a < 0 or b < 0:
        raise ArithmeticOverflowError(operation, a, b)
    result = a * b
    if result > ceiling:
        raise ArithmeticOverflowError(operation, a, b)
    return result
