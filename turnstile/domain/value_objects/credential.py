"""Credential value object.

A credential is a secret proof of identity. Only password hashes exist today;
a user has zero (federated-only) or one password credential at a time.
"""

from dataclasses import dataclass
from enum import Enum


class CredentialKind(str, Enum):
    """Supported credential kinds."""

    PASSWORD = "password"


@dataclass(frozen=True, slots=True, kw_only=True)
class Credential:
    """Hashed credential.

    Attributes:
        kind: Credential kind.
        secret: Hash of the secret (never plaintext).
    """

    kind: CredentialKind
    secret: str

    @classmethod
    def password(cls, password_hash: str) -> "Credential":
        """Wrap an already-hashed password."""
        return cls(kind=CredentialKind.PASSWORD, secret=password_hash)
