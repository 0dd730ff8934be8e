"""Type definitions and enums for the vesting ledger."""

from enum import Enum


class ErrorKind(str, Enum):
    """Stable error kinds surfaced to callers."""

    UNAUTHORIZED = "Unauthorized"
    ALREADY_EXISTS = "AlreadyExists"
    INVALID_SCHEDULE = "InvalidSchedule"
    NOTHING_TO_CLAIM = "NothingToClaim"
    INSUFFICIENT_CUSTODY = "InsufficientCustody"
    ARITHMETIC_OVERFLOW = "ArithmeticOverflow"
    CLOCK_UNAVAILABLE = "ClockUnavailable"
    ACCOUNT_NOT_FOUND = "AccountNotFound"
    VALIDATION = "ValidationError"
    CONFIGURATION = "ConfigurationError"
    TOKEN_PROGRAM = "TokenProgramError"
    AUTHORIZATION_DENIED = "AuthorizationDenied"
    INSUFFICIENT_FUNDS = "InsufficientFunds"
    MINT_MISMATCH = "MintMismatch"


class VestingPhase(str, Enum):
    """Lifecycle phase of an employee account, derived from its withdrawals."""

    CREATED = "created"                    # Nothing withdrawn yet
    PARTIALLY_VESTED = "partially_vested"  # Some of the allocation withdrawn
    FULLY_VESTED = "fully_vested"          # Whole allocation withdrawn (terminal)

    @property
    def display_name(self) -> str:
        """Human-readable display name."""
        names = {
            self.CREATED: "Created",
            self.PARTIALLY_VESTED: "Partially vested",
            self.FULLY_VESTED: "Fully vested",
        }
        return names.get(self, self.value)


class ClaimStatus(str, Enum):
    """Outcome of a claim command."""

    CLAIMED = "claimed"
    NOTHING_TO_CLAIM = "nothing_to_claim"


class RecordKind(str, Enum):
    """Kinds of persisted ledger records."""

    VESTING_ACCOUNT = "vesting_account"
    EMPLOYEE_ACCOUNT = "employee_account"


class CommandAction(str, Enum):
    """Commands recorded in the audit trail."""

    CREATE_MINT = "create_mint"
    FUND_CUSTODY = "fund_custody"
    CREATE_VESTING_ACCOUNT = "create_vesting_account"
    CREATE_EMPLOYEE_ACCOUNT = "create_employee_account"
    CLAIM = "claim"


# Type aliases for common patterns
Address = str     # Hex-encoded derived storage location
Identity = str    # Hex-encoded public identity of a signer
TokenAmount = int  # Smallest indivisible token units
Timestamp = int   # Unix timestamp in seconds
Duration = int    # Seconds

# Integer bounds of the persisted representation
U64_MAX = 2**64 - 1
I64_MIN = -(2**63)
I64_MAX = 2**63 - 1
U128_MAX = 2**128 - 1

# Seeds are limited to 32 bytes each
MAX_LABEL_BYTES = 32
