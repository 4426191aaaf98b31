"""Identifier value object.

An Identifier is a typed handle naming a user. It is a closed variant over
email, phone, username and federated identities; equality is structural.
Federated identifiers also carry the issuing provider, so the pair
``(provider, value)`` is unique per external identity.

Usage:
    email = Identifier.email("User@Example.com")
    assert email.value == "user@example.com"

    google = Identifier.federated("google", "1093847")
"""

from dataclasses import dataclass
from enum import Enum


class IdentifierKind(str, Enum):
    """Kinds of identifier a user can be found by."""

    EMAIL = "email"
    PHONE = "phone"
    USERNAME = "username"
    FEDERATED = "federated"


@dataclass(frozen=True, slots=True, kw_only=True)
class Identifier:
    """Typed user identifier.

    Attributes:
        kind: Which identifier variant this is.
        value: Normalized identifier value (subject id for federated).
        provider: Issuing provider name, only set for federated identifiers.

    Raises:
        ValueError: If the value is empty, or the provider is missing on a
            federated identifier or present on any other kind.
    """

    kind: IdentifierKind
    value: str
    provider: str | None = None

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError(f"{self.kind.value} identifier value must not be empty")
        if self.kind is IdentifierKind.FEDERATED and not self.provider:
            raise ValueError("Federated identifier requires a provider")
        if self.kind is not IdentifierKind.FEDERATED and self.provider is not None:
            raise ValueError(f"{self.kind.value} identifier cannot carry a provider")

    @classmethod
    def email(cls, value: str) -> "Identifier":
        """Build an email identifier (trimmed, lowercased)."""
        return cls(kind=IdentifierKind.EMAIL, value=value.strip().lower())

    @classmethod
    def phone(cls, value: str) -> "Identifier":
        """Build a phone identifier (whitespace removed)."""
        return cls(kind=IdentifierKind.PHONE, value="".join(value.split()))

    @classmethod
    def username(cls, value: str) -> "Identifier":
        """Build a username identifier (trimmed)."""
        return cls(kind=IdentifierKind.USERNAME, value=value.strip())

    @classmethod
    def federated(cls, provider: str, subject_id: str) -> "Identifier":
        """Build a federated identifier for a provider-scoped subject id."""
        return cls(kind=IdentifierKind.FEDERATED, value=subject_id, provider=provider)

    @property
    def is_verifiable(self) -> bool:
        """Email and phone identifiers can be verified with a one-time code."""
        return self.kind in (IdentifierKind.EMAIL, IdentifierKind.PHONE)

    def __str__(self) -> str:
        if self.provider is not None:
            return f"{self.kind.value}:{self.provider}:{self.value}"
        return f"{self.kind.value}:{self.value}"
