"""Claim engine.

A claim runs in a fixed order:

1. authorization and record linkage
2. clock sanity
3. vested and releasable amounts
4. custody sufficiency
5. ledger update staged, then the custody transfer

The transfer is the only irreversible side effect and it happens last, after
every check has passed and the matching ledger update is already in place.
"""

import logging
from typing import Any

from ..calculator.schedule import vested_amount
from ..core.exceptions import (
    ClockUnavailableError,
    InsufficientCustodyError,
    MintMismatch,
    NothingToClaimError,
    UnauthorizedError,
)
from ..core.models import EmployeeVestingAccount, VestingAccount
from ..core.types import Address, Timestamp, TokenAmount
from ..providers.base import IdentityVerifier, TokenProgram
from ..storage.json_store import LedgerStore
from .addresses import LedgerAddresses

logger = logging.getLogger(__name__)


class ClaimEngine:
    """Releases vested tokens from custody to beneficiaries."""

    def __init__(
        self,
        store: LedgerStore,
        addresses: LedgerAddresses,
        token_program: TokenProgram,
        verifier: IdentityVerifier,
        clock_skew_tolerance: int = 300,
    ):
        """
        Initialize the claim engine.

        Args:
            store: Record store holding vesting and employee accounts
            addresses: Seed layout used to check record linkage
            token_program: Custody and beneficiary balances
            verifier: Signer verification
            clock_skew_tolerance: Seconds before start_time still treated
                                  as zero-vested rather than a clock fault
        """
        self.store = store
        self.addresses = addresses
        self.token_program = token_program
        self.verifier = verifier
        self.clock_skew_tolerance = clock_skew_tolerance

    def _load_accounts(
        self, signer: Any, employee_address: Address
    ) -> tuple[EmployeeVestingAccount, VestingAccount]:
        """Load the employee record and its parent, checking every ownership link."""
        employee = self.store.get_employee_account(employee_address)

        caller = self.verifier.require(signer)
        if caller != employee.beneficiary:
            logger.warning(f"Rejected claim on {employee_address[:12]} by {caller[:12]}")
            raise UnauthorizedError(caller, required=employee.beneficiary, reason="only the beneficiary may claim")

        parent = self.store.get_vesting_account(employee.vesting_account)

        expected, _ = self.addresses.employee_account(employee.beneficiary, parent.address)
        if expected != employee.address:
            raise UnauthorizedError(caller, reason="employee account is not bound to this vesting account")

        custody = self.token_program.get_holding(parent.custody_balance_handle)
        if custody.mint != parent.token_mint:
            raise MintMismatch(custody.address, parent.token_mint, custody.mint)

        return employee, parent

    def _check_clock(self, employee: EmployeeVestingAccount, now: Timestamp | None) -> Timestamp:
        if now is None:
            raise ClockUnavailableError("no timestamp available")
        earliest = employee.start_time - self.clock_skew_tolerance
        if now < earliest:
            raise ClockUnavailableError(
                f"timestamp {now} precedes schedule start {employee.start_time} "
                f"by more than {self.clock_skew_tolerance}s",
                now=now,
            )
        return now

    def claim(self, signer: Any, employee_address: Address, now: Timestamp | None) -> TokenAmount:
        """
        Release everything vested but not yet withdrawn.

        Args:
            signer: Beneficiary keypair
            employee_address: Address of the employee vesting account
            now: Current ledger time, or None if the clock failed

        Returns:
            The amount transferred to the beneficiary

        Raises:
            UnauthorizedError: signer is not the beneficiary
            ClockUnavailableError: no usable timestamp
            NothingToClaimError: nothing releasable (benign)
            InsufficientCustodyError: custody cannot cover the claim
            ArithmeticOverflowError: checked arithmetic failed
        """
        employee, parent = self._load_accounts(signer, employee_address)
        now = self._check_clock(employee, now)

        vested = vested_amount(
            now,
            employee.start_time,
            employee.cliff_duration,
            employee.total_duration,
            employee.total_allocated,
        )
        releasable = vested - employee.total_withdrawn
        if releasable <= 0:
            logger.debug(f"Nothing to claim on {employee.address[:12]} at {now}")
            raise NothingToClaimError(employee.address, vested, employee.total_withdrawn)

        custody = parent.custody_balance_handle
        balance = self.token_program.balance_of(custody)
        if balance < releasable:
            logger.warning(
                f"Custody of '{parent.label}' holds {balance}, claim on {employee.address[:12]} needs {releasable}"
            )
            raise InsufficientCustodyError(custody, balance, releasable)

        destination = self.addresses.beneficiary_holding(employee.beneficiary, parent.token_mint)
        if not self.token_program.has_holding(destination):
            self.token_program.create_holding(destination, parent.token_mint, authority=employee.beneficiary)

        decimals = self.token_program.get_mint(parent.token_mint).decimals
        updated = employee.with_withdrawal(releasable)

        self.store.update(updated)
        try:
            self.token_program.transfer(
                custody,
                destination,
                releasable,
                authority=custody,
                mint=parent.token_mint,
                decimals=decimals,
            )
        except Exception:
            # Ledger and balances move together or not at all
            self.store.update(employee)
            raise

        logger.info(
            f"Claimed {releasable} for {employee.beneficiary[:12]} from '{parent.label}' "
            f"(withdrawn {updated.total_withdrawn}/{updated.total_allocated})"
        )
        return releasable
