"""Core module - data models, types, and exceptions."""

from .models import (
    VestingAccount,
    EmployeeVestingAccount,
    TokenMint,
    TokenHolding,
    ClaimResult,
    EmployeeStatus,
    LedgerEvent,
)
from .types import (
    ErrorKind,
    VestingPhase,
    ClaimStatus,
    RecordKind,
    CommandAction,
)
from .exceptions import (
    VestingError,
    UnauthorizedError,
    AlreadyExistsError,
    InvalidScheduleError,
    NothingToClaimError,
    InsufficientCustodyError,
    ArithmeticOverflowError,
    ClockUnavailableError,
    AccountNotFoundError,
    ValidationError,
    ConfigurationError,
    TokenProgramError,
    AuthorizationDenied,
    InsufficientFunds,
    MintMismatch,
)

__all__ = [
    # Models
    "VestingAccount",
    "EmployeeVestingAccount",
    "TokenMint",
    "TokenHolding",
    "ClaimResult",
    "EmployeeStatus",
    "LedgerEvent",
    # Types
    "ErrorKind",
    "VestingPhase",
    "ClaimStatus",
    "RecordKind",
    "CommandAction",
    # Exceptions
    "VestingError",
    "UnauthorizedError",
    "AlreadyExistsError",
    "InvalidScheduleError",
    "NothingToClaimError",
    "InsufficientCustodyError",
    "ArithmeticOverflowError",
    "ClockUnavailableError",
    "AccountNotFoundError",
    "ValidationError",
    "ConfigurationError",
    "TokenProgramError",
    "AuthorizationDenied",
    "InsufficientFunds",
    "MintMismatch",
]
