"""Account factory.

Creates vesting and employee accounts exactly once each. Creation checks run
before any record or holding is written.
"""

import logging
from typing import Any

from ..core.exceptions import AlreadyExistsError, InvalidScheduleError, UnauthorizedError
from ..core.models import EmployeeVestingAccount, VestingAccount
from ..core.types import I64_MAX, I64_MIN, U64_MAX, Address, Identity, Timestamp, TokenAmount
from ..providers.addressing import key_bytes
from ..providers.base import IdentityVerifier, TokenProgram
from ..storage.json_store import LedgerStore
from .addresses import LedgerAddresses, validate_label

logger = logging.getLogger(__name__)


def validate_schedule(
    start_time: Timestamp,
    cliff_duration: int,
    total_duration: int,
    total_allocated: TokenAmount,
) -> None:
    """
    Reject schedule parameters that cannot describe a vesting schedule.

    Raises:
        InvalidScheduleError: naming the first violated rule
    """
    if total_duration <= 0:
        raise InvalidScheduleError("total_duration must be positive", total_duration=total_duration)
    if cliff_duration < 0:
        raise InvalidScheduleError("cliff_duration must not be negative", cliff_duration=cliff_duration)
    if cliff_duration > total_duration:
        raise InvalidScheduleError(
            "cliff_duration exceeds total_duration",
            cliff_duration=cliff_duration,
            total_duration=total_duration,
        )
    if not 0 <= total_allocated <= U64_MAX:
        raise InvalidScheduleError("total_allocated out of range", total_allocated=total_allocated)
    if not I64_MIN <= start_time <= I64_MAX or start_time + total_duration > I64_MAX:
        raise InvalidScheduleError(
            "schedule lies outside the timestamp range",
            start_time=start_time,
            total_duration=total_duration,
        )


class AccountFactory:
    """Creates VestingAccount and EmployeeVestingAccount records."""

    def __init__(
        self,
        store: LedgerStore,
        addresses: LedgerAddresses,
        token_program: TokenProgram,
        verifier: IdentityVerifier,
    ):
        self.store = store
        self.addresses = addresses
        self.token_program = token_program
        self.verifier = verifier

    def create_vesting_account(self, signer: Any, label: str, token_mint: Address) -> VestingAccount:
        """
        Create the vesting account and its empty custody holding for ``label``.

        Args:
            signer: Employer keypair; becomes the account owner
            label: Employer-chosen label, unique across the ledger
            token_mint: Mint of the token held in custody

        Returns:
            The persisted VestingAccount
        """
        owner = self.verifier.require(signer)
        validate_label(label)

        address, account_bump = self.addresses.vesting_account(label)
        treasury, treasury_bump = self.addresses.treasury(label)

        if self.store.exists(address):
            raise AlreadyExistsError("Vesting account", address)
        if self.token_program.has_holding(treasury):
            raise AlreadyExistsError("Custody holding", treasury)

        # Fails with AccountNotFoundError for an unknown mint
        self.token_program.get_mint(token_mint)

        account = VestingAccount(
            address=address,
            owner=owner,
            token_mint=token_mint,
            custody_balance_handle=treasury,
            label=label,
            treasury_bump=treasury_bump,
            account_bump=account_bump,
        )

        # The custody holding is its own transfer authority
        self.token_program.create_holding(treasury, token_mint, authority=treasury)
        self.store.insert(account)

        logger.info(f"Created vesting account '{label}' ({address[:12]}) owned by {owner[:12]}")
        return account

    def create_employee_account(
        self,
        signer: Any,
        vesting_account: Address,
        beneficiary: Identity,
        start_time: Timestamp,
        cliff_duration: int,
        total_duration: int,
        total_allocated: TokenAmount,
    ) -> EmployeeVestingAccount:
        """
        Bind a beneficiary to a vesting schedule under ``vesting_account``.

        Custody is not checked here: an allocation is a promise, not a
        reservation. Under-funding surfaces at claim time.

        Returns:
            The persisted EmployeeVestingAccount
        """
        validate_schedule(start_time, cliff_duration, total_duration, total_allocated)
        key_bytes(beneficiary, "beneficiary")

        caller = self.verifier.require(signer)
        parent = self.store.get_vesting_account(vesting_account)
        if caller != parent.owner:
            logger.warning(f"Rejected employee account creation by {caller[:12]} on {parent.label}")
            raise UnauthorizedError(caller, required=parent.owner, reason="only the owner may add employees")

        address, bump = self.addresses.employee_account(beneficiary, parent.address)
        if self.store.exists(address):
            raise AlreadyExistsError("Employee vesting account", address)

        account = EmployeeVestingAccount(
            address=address,
            beneficiary=beneficiary,
            vesting_account=parent.address,
            start_time=start_time,
            cliff_duration=cliff_duration,
            total_duration=total_duration,
            total_allocated=total_allocated,
            total_withdrawn=0,
            bump=bump,
        )
        self.store.insert(account)

        logger.info(
            f"Created employee account {address[:12]} for {beneficiary[:12]} on '{parent.label}': "
            f"{total_allocated} over {total_duration}s, cliff {cliff_duration}s from {start_time}"
        )
        return account
