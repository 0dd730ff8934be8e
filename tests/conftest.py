"""Pytest configuration and fixtures for vesting ledger tests."""

import pytest

from token_vesting.core.config import LedgerConfig
from token_vesting.core.models import TokenMint, VestingAccount
from token_vesting.providers.clock import FixedClock
from token_vesting.providers.identity import Keypair
from token_vesting.runtime import VestingRuntime

LABEL = "acme"


@pytest.fixture
def config(tmp_path) -> LedgerConfig:
    """Config with a throwaway data directory."""
    return LedgerConfig(program_id="tokenvesting-test", data_dir=tmp_path / "data")


@pytest.fixture
def clock() -> FixedClock:
    """Ledger clock starting at 0."""
    return FixedClock(0)


@pytest.fixture
def runtime(config: LedgerConfig, clock: FixedClock) -> VestingRuntime:
    """Runtime with in-memory state and no state file."""
    return VestingRuntime(config=config, clock=clock)


@pytest.fixture
def employer() -> Keypair:
    """Employer keypair (mint authority and vesting account owner)."""
    return Keypair.from_secret(b"employer-secret".ljust(32, b"\x00"))


@pytest.fixture
def alice() -> Keypair:
    """First beneficiary."""
    return Keypair.from_secret(b"alice-secret".ljust(32, b"\x00"))


@pytest.fixture
def bob() -> Keypair:
    """Second beneficiary."""
    return Keypair.from_secret(b"bob-secret".ljust(32, b"\x00"))


@pytest.fixture
def mint(runtime: VestingRuntime, employer: Keypair) -> TokenMint:
    """Mint with 6 decimals controlled by the employer."""
    return runtime.create_mint(employer, decimals=6, seed="test-token")


@pytest.fixture
def vesting_account(runtime: VestingRuntime, employer: Keypair, mint: TokenMint) -> VestingAccount:
    """Vesting account 'acme' with an empty custody holding."""
    return runtime.create_vesting_account(employer, LABEL, mint.address)


@pytest.fixture
def funded_account(runtime: VestingRuntime, employer: Keypair, vesting_account: VestingAccount) -> VestingAccount:
    """Vesting account 'acme' whose custody holds 10,000 tokens."""
    runtime.fund_custody(employer, LABEL, 10_000)
    return vesting_account
