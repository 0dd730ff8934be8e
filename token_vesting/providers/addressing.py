"""Seed-derived addressing.

Addresses are SHA-256 digests of the seeds, a bump byte and the program
identity, so the same seeds always locate the same record.
"""

import hashlib

from ..core.exceptions import ValidationError
from ..core.types import MAX_LABEL_BYTES, Address
from .base import AddressProvider

CANONICAL_BUMP = 255
DERIVATION_MARKER = b"ProgramDerivedAddress"


def _seed_bytes(seed: str | bytes) -> bytes:
    """Encode a seed, enforcing the per-seed length limit."""
    raw = seed.encode("utf-8") if isinstance(seed, str) else bytes(seed)
    if len(raw) > MAX_LABEL_BYTES:
        raise ValidationError("seed", seed, f"longer than {MAX_LABEL_BYTES} bytes")
    return raw


def key_bytes(key: str, field: str = "key") -> bytes:
    """Decode a hex identity or address into its 32 raw bytes for use as a seed."""
    try:
        raw = bytes.fromhex(key)
    except (TypeError, ValueError):
        raise ValidationError(field, key, "not a hex-encoded key")
    if len(raw) != 32:
        raise ValidationError(field, key, "must encode exactly 32 bytes")
    return raw


class SeedAddressProvider(AddressProvider):
    """Derives addresses from ``(program_id, seeds...)``."""

    def create_address(self, seeds: tuple[str | bytes, ...], bump: int) -> Address:
        """Derive the address for ``seeds`` with an explicit bump."""
        if not 0 <= bump <= 255:
            raise ValidationError("bump", bump, "must fit in one byte")

        digest = hashlib.sha256()
        for seed in seeds:
            raw = _seed_bytes(seed)
            # Length prefix keeps ("ab", "c") and ("a", "bc") apart
            digest.update(len(raw).to_bytes(1, "big"))
            digest.update(raw)
        digest.update(bytes([bump]))
        digest.update(self.program_id.encode("utf-8"))
        digest.update(DERIVATION_MARKER)
        return digest.hexdigest()

    def find_address(self, *seeds: str | bytes) -> tuple[Address, int]:
        """Derive the address for ``seeds`` using the canonical bump."""
        return self.create_address(seeds, CANONICAL_BUMP), CANONICAL_BUMP
