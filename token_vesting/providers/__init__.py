"""External collaborators: addressing, token program, clock and identity."""

from .base import AddressProvider, ClockProvider, IdentityVerifier, TokenProgram
from .addressing import SeedAddressProvider, key_bytes
from .clock import FixedClock, SystemClock
from .identity import Keypair, KeypairVerifier
from .token_program import InMemoryTokenProgram

__all__ = [
    "AddressProvider",
    "ClockProvider",
    "IdentityVerifier",
    "TokenProgram",
    "SeedAddressProvider",
    "key_bytes",
    "FixedClock",
    "SystemClock",
    "Keypair",
    "KeypairVerifier",
    "InMemoryTokenProgram",
]
