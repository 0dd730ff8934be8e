"""Ledger runtime.

Wires the record store, the collaborators, the account factory and the claim
engine together, and runs every command as one atomic unit: either all of
its record mutations and token movements commit, or none do.
"""

import logging
import secrets
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, TypeVar

from pydantic import ValidationError as ModelValidationError

from .calculator.schedule import ScheduleCalculator
from .core.config import LedgerConfig, get_config
from .core.exceptions import ClockUnavailableError, NothingToClaimError, ValidationError, VestingError
from .core.models import (
    ClaimResult,
    EmployeeStatus,
    EmployeeVestingAccount,
    LedgerEvent,
    TokenHolding,
    TokenMint,
    VestingAccount,
)
from .core.types import Address, ClaimStatus, CommandAction, Identity, Timestamp, TokenAmount
from .providers.addressing import SeedAddressProvider, key_bytes
from .providers.base import AddressProvider, ClockProvider, IdentityVerifier
from .providers.clock import FixedClock, SystemClock
from .providers.identity import KeypairVerifier
from .providers.token_program import InMemoryTokenProgram
from .storage.json_store import LedgerStore, StateFile
from .vesting.addresses import LedgerAddresses
from .vesting.claim import ClaimEngine
from .vesting.factory import AccountFactory

logger = logging.getLogger(__name__)

T = TypeVar("T")

MINT_SEED = "mint"


class VestingRuntime:
    """Executes ledger commands atomically and keeps the audit trail."""

    def __init__(
        self,
        config: LedgerConfig | None = None,
        clock: ClockProvider | None = None,
        token_program: InMemoryTokenProgram | None = None,
        address_provider: AddressProvider | None = None,
        verifier: IdentityVerifier | None = None,
        store: LedgerStore | None = None,
        state_file: StateFile | None = None,
    ):
        """
        Initialize the runtime.

        Args:
            config: Ledger configuration (global config if not provided)
            clock: Clock source (host clock if not provided)
            token_program: Token balances (empty in-memory program if not provided)
            address_provider: Seed addressing (derived from config.program_id if not provided)
            verifier: Signer verification (keypair verifier if not provided)
            store: Record store (empty if not provided)
            state_file: Where to persist state after each command (none by default)
        """
        self.config = config or get_config()
        self.clock = clock or SystemClock()
        self.token_program = token_program or InMemoryTokenProgram()
        self.addresses = LedgerAddresses(address_provider or SeedAddressProvider(self.config.program_id))
        self.verifier = verifier or KeypairVerifier()
        self.store = store or LedgerStore()
        self.state_file = state_file

        self.factory = AccountFactory(self.store, self.addresses, self.token_program, self.verifier)
        self.claim_engine = ClaimEngine(
            self.store,
            self.addresses,
            self.token_program,
            self.verifier,
            clock_skew_tolerance=self.config.clock_skew_tolerance,
        )
        self.calculator = ScheduleCalculator()

        self._events: list[LedgerEvent] = []
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @classmethod
    def open(cls, config: LedgerConfig | None = None, state_path: Path | None = None) -> "VestingRuntime":
        """
        Load a runtime from its state file, or start an empty one.

        A persisted clock override replaces the host clock.
        """
        config = config or get_config()
        state_file = StateFile(state_path or config.state_file)
        data = state_file.load()

        if data is None:
            return cls(config=config, state_file=state_file)

        clock: ClockProvider = SystemClock()
        if data.get("clock") is not None:
            clock = FixedClock(int(data["clock"]))

        runtime = cls(
            config=config,
            clock=clock,
            token_program=InMemoryTokenProgram.from_dict(data.get("token_program", {})),
            store=LedgerStore.from_dict(data.get("records", [])),
            state_file=state_file,
        )
        runtime._events = [LedgerEvent.model_validate(e) for e in data.get("events", [])]
        logger.debug(f"Loaded ledger state from {state_file.path}")
        return runtime

    def to_dict(self) -> dict[str, Any]:
        """Convert the full ledger state to a JSON-serializable dictionary."""
        return {
            "program_id": self.config.program_id,
            "clock": self.clock.now() if isinstance(self.clock, FixedClock) else None,
            "records": self.store.to_dict(),
            "token_program": self.token_program.to_dict(),
            "events": [e.model_dump(mode="json") for e in self._events],
        }

    def save(self) -> Path | None:
        """Persist state if a state file is configured."""
        if self.state_file is None:
            return None
        return self.state_file.save(self.to_dict())

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Run the enclosed block as one unit against records and balances."""
        with self._lock:
            records = self.store.snapshot()
            balances = self.token_program.snapshot()
            try:
                yield
            except BaseException:
                self.store.restore(records)
                self.token_program.restore(balances)
                raise

    def _now(self) -> Timestamp | None:
        try:
            return self.clock.now()
        except OSError as e:
            logger.warning(f"Clock read failed: {e}")
            return None

    def _execute(
        self,
        action: CommandAction,
        actor: Identity | None,
        operation: Callable[[], T],
        address: Address | None = None,
        amount: TokenAmount | None = None,
    ) -> T:
        """
        Run ``operation`` atomically, then record and persist the outcome.

        The lock is held until the state file is written, so a command's
        result is only returned once it is durable.
        """
        with self._lock:
            ledger_time = self._now()
            try:
                with self.atomic():
                    try:
                        result = operation()
                    except ModelValidationError as e:
                        raise ValidationError.from_model_error(e) from e
            except NothingToClaimError as e:
                self._add_event(action, actor, address, ledger_time, amount=0, error=e, success=True)
                self.save()
                raise
            except VestingError as e:
                logger.warning(f"{action.value} failed: [{e.kind.value}] {e.message}")
                self._add_event(action, actor, address, ledger_time, amount=amount, error=e, success=False)
                self.save()
                raise

            if amount is None and isinstance(result, int):
                amount = result
            if address is None:
                address = getattr(result, "address", None)
            self._add_event(action, actor, address, ledger_time, amount=amount)
            self.save()
            return result

    def _add_event(
        self,
        action: CommandAction,
        actor: Identity | None,
        address: Address | None,
        ledger_time: Timestamp | None,
        amount: TokenAmount | None = None,
        error: VestingError | None = None,
        success: bool = True,
    ) -> None:
        """Add an audit entry."""
        self._events.append(
            LedgerEvent(
                action=action,
                actor=actor,
                address=address,
                amount=amount,
                ledger_time=ledger_time,
                success=success,
                error_kind=error.kind.value if error else None,
                error_message=error.message if error else None,
            )
        )

    @property
    def events(self) -> list[LedgerEvent]:
        """Return all audit entries recorded so far."""
        with self._lock:
            return self._events.copy()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_mint(self, signer: Any, decimals: int | None = None, seed: str | None = None) -> TokenMint:
        """
        Create a token mint whose mint authority is the signer.

        Bootstrap helper for the local token program. With a ``seed`` the
        mint address is derived from (authority, seed), otherwise it is
        random.
        """
        decimals = self.config.default_decimals if decimals is None else decimals

        def create() -> TokenMint:
            authority = self.verifier.require(signer)
            if seed:
                address, _ = self.addresses.provider.find_address(
                    MINT_SEED, key_bytes(authority, "authority"), seed
                )
            else:
                address = secrets.token_hex(32)
            return self.token_program.create_mint(address, decimals, mint_authority=authority)

        return self._execute(CommandAction.CREATE_MINT, getattr(signer, "identity", None), create)

    def fund_custody(self, signer: Any, label: str, amount: TokenAmount) -> TokenHolding:
        """Mint ``amount`` into the custody holding of ``label``. Signer must be the mint authority."""

        def fund() -> TokenHolding:
            authority = self.verifier.require(signer)
            account = self.vesting_account(label)
            return self.token_program.mint_to(
                account.token_mint, account.custody_balance_handle, amount, authority=authority
            )

        return self._execute(CommandAction.FUND_CUSTODY, getattr(signer, "identity", None), fund, amount=amount)

    def create_vesting_account(self, signer: Any, label: str, token_mint: Address) -> VestingAccount:
        """Create the vesting account for ``label``; the signer becomes its owner."""
        return self._execute(
            CommandAction.CREATE_VESTING_ACCOUNT,
            getattr(signer, "identity", None),
            lambda: self.factory.create_vesting_account(signer, label, token_mint),
        )

    def create_employee_account(
        self,
        signer: Any,
        label: str,
        beneficiary: Identity,
        start_time: Timestamp,
        cliff_duration: int,
        total_duration: int,
        total_allocated: TokenAmount,
    ) -> EmployeeVestingAccount:
        """Bind ``beneficiary`` to a schedule under the vesting account of ``label``."""

        def create() -> EmployeeVestingAccount:
            vesting_address, _ = self.addresses.vesting_account(label)
            return self.factory.create_employee_account(
                signer,
                vesting_address,
                beneficiary,
                start_time,
                cliff_duration,
                total_duration,
                total_allocated,
            )

        return self._execute(CommandAction.CREATE_EMPLOYEE_ACCOUNT, getattr(signer, "identity", None), create)

    def claim(self, signer: Any, label: str) -> ClaimResult:
        """
        Claim everything vested but not yet withdrawn.

        The employee account is located from the label and the signer's
        identity. NothingToClaim comes back as a structured result; every
        other failure raises.
        """
        identity = getattr(signer, "identity", None)

        with self._lock:
            now = self._now()
            try:
                employee_address = self.employee_address(label, identity)
            except VestingError:
                employee_address = None

            def run() -> TokenAmount:
                # Re-derive so a malformed label fails inside the recorded command
                return self.claim_engine.claim(signer, self.employee_address(label, identity), now)

            try:
                amount = self._execute(CommandAction.CLAIM, identity, run, address=employee_address)
                status = ClaimStatus.CLAIMED
            except NothingToClaimError:
                amount = 0
                status = ClaimStatus.NOTHING_TO_CLAIM

            employee = self.store.get_employee_account(employee_address)
            return ClaimResult(
                status=status,
                amount=amount,
                employee_account=employee_address,
                beneficiary=employee.beneficiary,
                vested=self._vested(employee, now),
                total_withdrawn=employee.total_withdrawn,
                claimed_at=now,
            )

    def set_clock(self, timestamp: Timestamp) -> None:
        """
        Pin the ledger clock to ``timestamp`` (local clock override).

        Raises:
            ClockUnavailableError: if ``timestamp`` is earlier than the current override
        """
        with self._lock:
            if isinstance(self.clock, FixedClock):
                self.clock.set(timestamp)
            else:
                self.clock = FixedClock(timestamp)
            self.save()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def vesting_account(self, label: str) -> VestingAccount:
        address, _ = self.addresses.vesting_account(label)
        return self.store.get_vesting_account(address)

    def employee_address(self, label: str, beneficiary: Identity) -> Address:
        vesting_address, _ = self.addresses.vesting_account(label)
        address, _ = self.addresses.employee_account(beneficiary, vesting_address)
        return address

    def employee_account(self, label: str, beneficiary: Identity) -> EmployeeVestingAccount:
        return self.store.get_employee_account(self.employee_address(label, beneficiary))

    def custody_balance(self, label: str) -> TokenAmount:
        return self.token_program.balance_of(self.vesting_account(label).custody_balance_handle)

    def holding_balance(self, owner: Identity, mint: Address) -> TokenAmount:
        """Balance of ``owner``'s holding of ``mint`` (0 if it was never created)."""
        address = self.addresses.beneficiary_holding(owner, mint)
        if not self.token_program.has_holding(address):
            return 0
        return self.token_program.balance_of(address)

    def status(self, label: str, beneficiary: Identity, now: Timestamp | None = None) -> EmployeeStatus:
        """Point-in-time status of one employee account."""
        account = self.employee_account(label, beneficiary)
        if now is None:
            now = self._now()
        if now is None:
            raise ClockUnavailableError("no timestamp available")
        return self.calculator.status(account, now)

    def statuses(self, label: str, now: Timestamp | None = None) -> list[EmployeeStatus]:
        """Status of every employee account under ``label``."""
        account = self.vesting_account(label)
        if now is None:
            now = self._now()
        if now is None:
            raise ClockUnavailableError("no timestamp available")
        with self._lock:
            employees = self.store.list_employee_accounts(account.address)
        return [self.calculator.status(employee, now) for employee in employees]

    def _vested(self, employee: EmployeeVestingAccount, now: Timestamp | None) -> TokenAmount:
        if now is None:
            return 0
        return self.calculator.status(employee, now).vested
