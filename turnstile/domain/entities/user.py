"""User capability surface.

The host application owns user storage; the core only reads the attributes
below and mutates users through ``UserStore`` hooks. Any object exposing
these attributes satisfies the protocol (structural typing).
"""

from typing import Protocol
from uuid import UUID

from turnstile.domain.value_objects import Identifier, IdentifierKind


class User(Protocol):
    """Read-only view of a host user."""

    @property
    def id(self) -> UUID | None: ...

    @property
    def email(self) -> str | None: ...

    @property
    def phone(self) -> str | None: ...

    @property
    def username(self) -> str | None: ...

    @property
    def password_hash(self) -> str | None: ...

    @property
    def is_anonymous(self) -> bool: ...

    @property
    def is_email_verified(self) -> bool: ...

    @property
    def is_phone_verified(self) -> bool: ...


def require_user_id(user: User) -> UUID:
    """Return the id of a persisted user.

    Raises:
        ValueError: If the user has not been persisted yet.
    """
    if user.id is None:
        raise ValueError("User must be persisted before tokens or codes reference it")
    return user.id


def identifier_of(user: User, kind: IdentifierKind) -> Identifier | None:
    """Return the user's identifier of the given kind, if set."""
    match kind:
        case IdentifierKind.EMAIL:
            return Identifier.email(user.email) if user.email else None
        case IdentifierKind.PHONE:
            return Identifier.phone(user.phone) if user.phone else None
        case IdentifierKind.USERNAME:
            return Identifier.username(user.username) if user.username else None
        case _:
            return None
