"""Base classes for the ledger's external collaborators.

The core only talks to these interfaces: it asks for addresses, balances,
transfers, the current time and identity checks, and never implements any
of them itself.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from ..core.exceptions import UnauthorizedError
from ..core.models import TokenHolding, TokenMint
from ..core.types import Address, Identity, Timestamp, TokenAmount

logger = logging.getLogger(__name__)


class AddressProvider(ABC):
    """Locates storage from stable seeds."""

    def __init__(self, program_id: str):
        self.program_id = program_id

    @abstractmethod
    def find_address(self, *seeds: str | bytes) -> tuple[Address, int]:
        """Return the address for ``seeds`` and the bump that produced it."""
        pass


class TokenProgram(ABC):
    """Holds token balances and moves them between holdings."""

    @abstractmethod
    def create_mint(self, address: Address, decimals: int, mint_authority: Identity) -> TokenMint:
        pass

    @abstractmethod
    def get_mint(self, address: Address) -> TokenMint:
        pass

    @abstractmethod
    def create_holding(self, address: Address, mint: Address, authority: Identity) -> TokenHolding:
        pass

    @abstractmethod
    def get_holding(self, address: Address) -> TokenHolding:
        pass

    @abstractmethod
    def has_holding(self, address: Address) -> bool:
        pass

    @abstractmethod
    def balance_of(self, address: Address) -> TokenAmount:
        pass

    @abstractmethod
    def mint_to(
        self, mint: Address, destination: Address, amount: TokenAmount, authority: Identity
    ) -> TokenHolding:
        pass

    @abstractmethod
    def transfer(
        self,
        source: Address,
        destination: Address,
        amount: TokenAmount,
        authority: Identity,
        mint: Address | None = None,
        decimals: int | None = None,
    ) -> None:
        """
        Move ``amount`` from ``source`` to ``destination``.

        All-or-nothing: either both balances change or neither does.
        Raises AuthorizationDenied or InsufficientFunds.
        """
        pass

    @abstractmethod
    def snapshot(self) -> Any:
        """Capture state for a later ``restore``."""
        pass

    @abstractmethod
    def restore(self, snapshot: Any) -> None:
        pass


class ClockProvider(ABC):
    """Source of the current ledger time."""

    @abstractmethod
    def now(self) -> Timestamp | None:
        """Current Unix time in seconds, or None if it cannot be obtained."""
        pass


class IdentityVerifier(ABC):
    """Confirms that a signer controls the identity it declares."""

    @abstractmethod
    def verify(self, signer: Any) -> bool:
        pass

    def require(self, signer: Any) -> Identity:
        """Return the signer's verified identity or raise UnauthorizedError."""
        identity = getattr(signer, "identity", None)
        if signer is None or not self.verify(signer):
            logger.warning(f"Rejected unverified signer {identity}")
            raise UnauthorizedError(identity, reason="signature verification failed")
        return identity
