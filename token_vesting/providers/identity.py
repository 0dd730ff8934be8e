"""Keypair identities and their verification.

An identity is the SHA-256 digest of a secret. Holding the secret is the
proof of control; the verifier recomputes the digest and compares.
"""

import hashlib
import hmac
import json
import secrets
from dataclasses import dataclass
from pathlib import Path

from ..core.exceptions import ValidationError
from ..core.types import Identity
from .base import IdentityVerifier

SECRET_BYTES = 32


def identity_from_secret(secret: bytes) -> Identity:
    """Derive the public identity of a secret."""
    return hashlib.sha256(secret).hexdigest()


@dataclass(frozen=True)
class Keypair:
    """A signer: declared identity plus the secret proving it."""

    identity: Identity
    secret: bytes

    @classmethod
    def generate(cls) -> "Keypair":
        secret = secrets.token_bytes(SECRET_BYTES)
        return cls(identity=identity_from_secret(secret), secret=secret)

    @classmethod
    def from_secret(cls, secret: bytes) -> "Keypair":
        return cls(identity=identity_from_secret(secret), secret=secret)

    def save(self, path: Path) -> Path:
        """Write the keypair to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"identity": self.identity, "secret": self.secret.hex()}, f, indent=2)
        return path

    @classmethod
    def load(cls, path: Path) -> "Keypair":
        """Read a keypair JSON file written by ``save``."""
        path = Path(path)
        if not path.exists():
            raise ValidationError("keypair", str(path), "file not found")

        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValidationError("keypair", str(path), f"invalid JSON: {e}")

        try:
            secret = bytes.fromhex(data["secret"])
        except (KeyError, TypeError, ValueError):
            raise ValidationError("keypair", str(path), "missing or malformed secret")

        # The declared identity is kept as-is; verification decides if it holds
        return cls(identity=data.get("identity") or identity_from_secret(secret), secret=secret)


class KeypairVerifier(IdentityVerifier):
    """Accepts a keypair only if its secret derives its declared identity."""

    def verify(self, signer: Keypair) -> bool:
        if not isinstance(signer, Keypair) or not isinstance(signer.identity, str):
            return False
        expected = identity_from_secret(signer.secret)
        return hmac.compare_digest(expected.encode("utf-8"), signer.identity.encode("utf-8"))
