"""Pydantic data models for the vesting ledger.

Records are immutable (frozen) after creation. A mutation produces a new,
fully re-validated instance, so a record that violates its invariants can
never be observed.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from .arithmetic import checked_add
from .types import (
    I64_MAX,
    I64_MIN,
    MAX_LABEL_BYTES,
    U64_MAX,
    Address,
    ClaimStatus,
    CommandAction,
    Duration,
    Identity,
    Timestamp,
    TokenAmount,
    VestingPhase,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VestingAccount(BaseModel):
    """Per-employer vesting program bound to one token type and one custody holding."""

    address: Address
    owner: Identity
    token_mint: Address
    custody_balance_handle: Address
    label: str
    treasury_bump: int = Field(ge=0, le=255)
    account_bump: int = Field(ge=0, le=255)

    model_config = {"frozen": True}

    @field_validator("label")
    @classmethod
    def validate_label(cls, v: str) -> str:
        if not v:
            raise ValueError("label must not be empty")
        if len(v.encode("utf-8")) > MAX_LABEL_BYTES:
            raise ValueError(f"label must be at most {MAX_LABEL_BYTES} bytes")
        return v


class EmployeeVestingAccount(BaseModel):
    """Per-beneficiary schedule and withdrawal bookkeeping."""

    address: Address
    beneficiary: Identity
    vesting_account: Address
    start_time: Timestamp = Field(ge=I64_MIN, le=I64_MAX)
    cliff_duration: Duration = Field(ge=0, le=I64_MAX)
    total_duration: Duration = Field(gt=0, le=I64_MAX)
    total_allocated: TokenAmount = Field(ge=0, le=U64_MAX)
    total_withdrawn: TokenAmount = Field(default=0, ge=0, le=U64_MAX)
    bump: int = Field(default=255, ge=0, le=255)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_invariants(self) -> "EmployeeVestingAccount":
        if self.cliff_duration > self.total_duration:
            raise ValueError("cliff_duration must not exceed total_duration")
        if self.total_withdrawn > self.total_allocated:
            raise ValueError("total_withdrawn must not exceed total_allocated")
        if self.start_time + self.total_duration > I64_MAX:
            raise ValueError("schedule end lies outside the timestamp range")
        return self

    @property
    def cliff_time(self) -> Timestamp:
        """First second at which anything vests."""
        return self.start_time + self.cliff_duration

    @property
    def end_time(self) -> Timestamp:
        """First second at which the whole allocation has vested."""
        return self.start_time + self.total_duration

    @property
    def remaining(self) -> TokenAmount:
        """Allocation not yet withdrawn."""
        return self.total_allocated - self.total_withdrawn

    @property
    def phase(self) -> VestingPhase:
        """Derived lifecycle phase."""
        if self.total_withdrawn >= self.total_allocated:
            return VestingPhase.FULLY_VESTED
        if self.total_withdrawn == 0:
            return VestingPhase.CREATED
        return VestingPhase.PARTIALLY_VESTED

    def with_withdrawal(self, amount: TokenAmount) -> "EmployeeVestingAccount":
        """Return a copy with ``amount`` added to ``total_withdrawn``."""
        if amount <= 0:
            raise ValueError(f"withdrawal amount must be positive, got {amount}")
        withdrawn = checked_add(
            self.total_withdrawn,
            amount,
            ceiling=self.total_allocated,
            operation="total_withdrawn",
        )
        # model_copy skips validation; rebuild instead
        return type(self).model_validate({**self.model_dump(), "total_withdrawn": withdrawn})


class TokenMint(BaseModel):
    """A fungible token type managed by the token program."""

    address: Address
    decimals: int = Field(ge=0, le=18)
    mint_authority: Identity
    supply: TokenAmount = Field(default=0, ge=0, le=U64_MAX)

    model_config = {"frozen": True}


class TokenHolding(BaseModel):
    """A balance of one mint under the transfer authority of one identity."""

    address: Address
    mint: Address
    authority: Identity
    balance: TokenAmount = Field(default=0, ge=0, le=U64_MAX)

    model_config = {"frozen": True}


class ClaimResult(BaseModel):
    """Structured result of a claim command."""

    status: ClaimStatus
    amount: TokenAmount = 0
    employee_account: Address
    beneficiary: Identity
    vested: TokenAmount
    total_withdrawn: TokenAmount
    claimed_at: Timestamp

    model_config = {"frozen": True}

    @property
    def claimed(self) -> bool:
        """True when tokens actually moved."""
        return self.status == ClaimStatus.CLAIMED


class EmployeeStatus(BaseModel):
    """Point-in-time view of an employee account."""

    address: Address
    beneficiary: Identity
    vesting_account: Address
    as_of: Timestamp
    start_time: Timestamp
    cliff_time: Timestamp
    end_time: Timestamp
    total_allocated: TokenAmount
    total_withdrawn: TokenAmount
    vested: TokenAmount
    releasable: TokenAmount
    phase: VestingPhase

    model_config = {"frozen": True}


class LedgerEvent(BaseModel):
    """Audit trail entry for one command."""

    timestamp: datetime = Field(default_factory=_utcnow)
    action: CommandAction
    actor: Identity | None = None
    address: Address | None = None
    amount: TokenAmount | None = None
    ledger_time: Timestamp | None = None
    success: bool = True
    error_kind: str | None = None
    error_message: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}
