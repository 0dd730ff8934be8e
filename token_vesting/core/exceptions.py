"""Custom exceptions for the vesting ledger.

Every exception carries a stable ``kind`` so callers can react to the
category of failure without parsing messages.
"""

from typing import Any

from .types import ErrorKind


class VestingError(Exception):
    """Base exception for all vesting ledger errors."""

    kind: ErrorKind = ErrorKind.VALIDATION
    is_fault: bool = True

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UnauthorizedError(VestingError):
    """Raised when the caller does not control the identity an operation requires."""

    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, identity: str | None, required: str | None = None, reason: str | None = None):
        message = f"Unauthorized signer: {identity or '<unverified>'}"
        if required:
            message += f" (requires {required})"
        if reason:
            message += f": {reason}"
        super().__init__(message, {"identity": identity, "required": required})
        self.identity = identity
        self.required = required


class AlreadyExistsError(VestingError):
    """Raised when a one-time record is created a second time."""

    kind = ErrorKind.ALREADY_EXISTS

    def __init__(self, record: str, address: str):
        super().__init__(f"{record} already exists at {address}", {"record": record, "address": address})
        self.record = record
        self.address = address


class InvalidScheduleError(VestingError):
    """Raised when vesting schedule parameters are inconsistent."""

    kind = ErrorKind.INVALID_SCHEDULE

    def __init__(self, reason: str, **fields: Any):
        super().__init__(f"Invalid schedule: {reason}", {"reason": reason, **fields})
        self.reason = reason


class NothingToClaimError(VestingError):
    """Signals that nothing is releasable right now. Not a fault."""

    kind = ErrorKind.NOTHING_TO_CLAIM
    is_fault = False

    def __init__(self, address: str, vested: int, withdrawn: int):
        super().__init__(
            f"Nothing to claim for {address} (vested={vested}, withdrawn={withdrawn})",
            {"address": address, "vested": vested, "withdrawn": withdrawn},
        )
        self.address = address
        self.vested = vested
        self.withdrawn = withdrawn


class InsufficientCustodyError(VestingError):
    """Raised when the employer's custody balance cannot cover a claim."""

    kind = ErrorKind.INSUFFICIENT_CUSTODY

    def __init__(self, custody: str, balance: int, required: int):
        super().__init__(
            f"Custody {custody} holds {balance}, claim requires {required}",
            {"custody": custody, "balance": balance, "required": required},
        )
        self.custody = custody
        self.balance = balance
        self.required = required


class ArithmeticOverflowError(VestingError):
    """Raised when checked arithmetic leaves its representable range."""

    kind = ErrorKind.ARITHMETIC_OVERFLOW

    def __init__(self, operation: str, *operands: int):
        super().__init__(
            f"Arithmetic overflow in {operation}: {operands}",
            {"operation": operation, "operands": list(operands)},
        )
        self.operation = operation
        self.operands = operands


class ClockUnavailableError(VestingError):
    """Raised when no trustworthy current time can be obtained."""

    kind = ErrorKind.CLOCK_UNAVAILABLE

    def __init__(self, reason: str, now: int | None = None):
        super().__init__(f"Clock unavailable: {reason}", {"reason": reason, "now": now})
        self.reason = reason
        self.now = now


class AccountNotFoundError(VestingError):
    """Raised when a record lookup finds nothing at an address."""

    kind = ErrorKind.ACCOUNT_NOT_FOUND

    def __init__(self, record: str, address: str):
        super().__init__(f"{record} not found at {address}", {"record": record, "address": address})
        self.record = record
        self.address = address


class ValidationError(VestingError):
    """Raised when command input is malformed."""

    kind = ErrorKind.VALIDATION

    def __init__(self, field: str, value: Any, reason: str):
        message = f"Validation failed for {field}={value}: {reason}"
        super().__init__(message, {"field": field, "value": value, "reason": reason})
        self.field = field
        self.value = value
        self.reason = reason

    @classmethod
    def from_model_error(cls, error: Any) -> "ValidationError":
        """Wrap a pydantic validation error, keeping its first failing field."""
        errors = error.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ())) or error.title
        return cls(field, first.get("input"), first.get("msg", str(error)))


class ConfigurationError(VestingError):
    """Raised when configuration is invalid or missing."""

    kind = ErrorKind.CONFIGURATION

    def __init__(self, config_key: str, message: str):
        full_message = f"Configuration error [{config_key}]: {message}"
        super().__init__(full_message, {"config_key": config_key})
        self.config_key = config_key


class TokenProgramError(VestingError):
    """Raised when the token program rejects an operation."""

    kind = ErrorKind.TOKEN_PROGRAM

    def __init__(self, message: str, holding: str | None = None):
        super().__init__(f"[token] {message}", {"holding": holding})
        self.holding = holding


class AuthorizationDenied(TokenProgramError):
    """Raised when a transfer authority does not control the source holding."""

    kind = ErrorKind.AUTHORIZATION_DENIED

    def __init__(self, holding: str, authority: str):
        super().__init__(f"{authority} is not the authority of {holding}", holding=holding)
        self.authority = authority


class InsufficientFunds(TokenProgramError):
    """Raised when a holding cannot cover a debit."""

    kind = ErrorKind.INSUFFICIENT_FUNDS

    def __init__(self, holding: str, balance: int, amount: int):
        super().__init__(f"{holding} holds {balance}, cannot debit {amount}", holding=holding)
        self.balance = balance
        self.amount = amount


class MintMismatch(TokenProgramError):
    """Raised when holdings or decimals disagree on the token type."""

    kind = ErrorKind.MINT_MISMATCH

    def __init__(self, holding: str, expected: str, actual: str):
        super().__init__(f"{holding} expected {expected}, got {actual}", holding=holding)
        self.expected = expected
        self.actual = actual
