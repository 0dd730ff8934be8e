"""In-process token program.

Keeps mints and holdings in memory. Every operation validates fully before
touching any balance, so a failed call leaves no trace.
"""

import logging
from typing import Any

from ..core.arithmetic import checked_add, checked_sub
from ..core.exceptions import (
    AccountNotFoundError,
    AlreadyExistsError,
    AuthorizationDenied,
    InsufficientFunds,
    MintMismatch,
    ValidationError,
)
from ..core.models import TokenHolding, TokenMint
from ..core.types import Address, Identity, TokenAmount
from .base import TokenProgram

logger = logging.getLogger(__name__)

MAX_DECIMALS = 18


class InMemoryTokenProgram(TokenProgram):
    """
    Token program backed by dictionaries.

    Usage:
        tokens = InMemoryTokenProgram()
        mint = tokens.create_mint(mint_address, decimals=9, mint_authority=employer)
        tokens.create_holding(treasury, mint.address, authority=treasury)
        tokens.mint_to(mint.address, treasury, 1_000, authority=employer)
    """

    def __init__(self) -> None:
        self._mints: dict[Address, TokenMint] = {}
        self._holdings: dict[Address, TokenHolding] = {}

    def create_mint(self, address: Address, decimals: int, mint_authority: Identity) -> TokenMint:
        if not isinstance(decimals, int) or not 0 <= decimals <= MAX_DECIMALS:
            raise ValidationError("decimals", decimals, f"must be between 0 and {MAX_DECIMALS}")
        if address in self._mints:
            raise AlreadyExistsError("Mint", address)
        mint = TokenMint(address=address, decimals=decimals, mint_authority=mint_authority)
        self._mints[address] = mint
        logger.debug(f"Created mint {address[:12]} decimals={decimals}")
        return mint

    def get_mint(self, address: Address) -> TokenMint:
        mint = self._mints.get(address)
        if mint is None:
            raise AccountNotFoundError("Mint", address)
        return mint

    def create_holding(self, address: Address, mint: Address, authority: Identity) -> TokenHolding:
        if address in self._holdings:
            raise AlreadyExistsError("Token holding", address)
        self.get_mint(mint)
        holding = TokenHolding(address=address, mint=mint, authority=authority)
        self._holdings[address] = holding
        logger.debug(f"Created holding {address[:12]} for mint {mint[:12]}")
        return holding

    def get_holding(self, address: Address) -> TokenHolding:
        holding = self._holdings.get(address)
        if holding is None:
            raise AccountNotFoundError("Token holding", address)
        return holding

    def has_holding(self, address: Address) -> bool:
        return address in self._holdings

    def balance_of(self, address: Address) -> TokenAmount:
        return self.get_holding(address).balance

    def mint_to(
        self, mint: Address, destination: Address, amount: TokenAmount, authority: Identity
    ) -> TokenHolding:
        """Create ``amount`` new tokens in ``destination``."""
        if amount <= 0:
            raise ValidationError("amount", amount, "must be positive")

        token_mint = self.get_mint(mint)
        holding = self.get_holding(destination)
        if token_mint.mint_authority != authority:
            raise AuthorizationDenied(mint, authority)
        if holding.mint != mint:
            raise MintMismatch(destination, mint, holding.mint)

        supply = checked_add(token_mint.supply, amount, operation="mint_supply")
        balance = checked_add(holding.balance, amount, operation="holding_balance")

        self._mints[mint] = token_mint.model_copy(update={"supply": supply})
        self._holdings[destination] = holding.model_copy(update={"balance": balance})
        logger.debug(f"Minted {amount} into {destination[:12]}")
        return self._holdings[destination]

    def transfer(
        self,
        source: Address,
        destination: Address,
        amount: TokenAmount,
        authority: Identity,
        mint: Address | None = None,
        decimals: int | None = None,
    ) -> None:
        if amount <= 0:
            raise ValidationError("amount", amount, "must be positive")

        src = self.get_holding(source)
        dst = self.get_holding(destination)

        if src.authority != authority:
            raise AuthorizationDenied(source, authority)
        if dst.mint != src.mint:
            raise MintMismatch(destination, src.mint, dst.mint)
        if mint is not None and src.mint != mint:
            raise MintMismatch(source, mint, src.mint)
        if decimals is not None:
            actual = self.get_mint(src.mint).decimals
            if actual != decimals:
                raise MintMismatch(source, f"decimals={decimals}", f"decimals={actual}")
        if src.balance < amount:
            raise InsufficientFunds(source, src.balance, amount)

        if source == destination:
            return

        debited = checked_sub(src.balance, amount, operation="transfer_debit")
        credited = checked_add(dst.balance, amount, operation="transfer_credit")

        self._holdings[source] = src.model_copy(update={"balance": debited})
        self._holdings[destination] = dst.model_copy(update={"balance": credited})
        logger.debug(f"Transferred {amount} {source[:12]} -> {destination[:12]}")

    def snapshot(self) -> tuple[dict[Address, TokenMint], dict[Address, TokenHolding]]:
        # Models are frozen, shallow copies are enough
        return dict(self._mints), dict(self._holdings)

    def restore(self, snapshot: tuple[dict[Address, TokenMint], dict[Address, TokenHolding]]) -> None:
        mints, holdings = snapshot
        self._mints = dict(mints)
        self._holdings = dict(holdings)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "mints": [m.model_dump(mode="json") for m in self._mints.values()],
            "holdings": [h.model_dump(mode="json") for h in self._holdings.values()],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InMemoryTokenProgram":
        """Create from dictionary."""
        program = cls()
        for raw in data.get("mints", []):
            mint = TokenMint.model_validate(raw)
            program._mints[mint.address] = mint
        for raw in data.get("holdings", []):
            holding = TokenHolding.model_validate(raw)
            program._holdings[holding.address] = holding
        return program
