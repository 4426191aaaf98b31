"""Authentication domain events.

Published by the application services after the state change they describe
has been committed to the stores. The LoggingEventHandler records all of
them; hosts may subscribe audit or notification handlers.
"""

from dataclasses import dataclass
from uuid import UUID

from turnstile.domain.events.base_event import DomainEvent

# ═══════════════════════════════════════════════════════════════
# Identity
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class UserRegistered(DomainEvent):
    """A user registered with a password.

    Attributes:
        user_id: New user.
        identifier_kind: Kind of identifier registered with.
    """

    user_id: UUID
    identifier_kind: str


@dataclass(frozen=True, kw_only=True)
class UserLoggedIn(DomainEvent):
    """Tokens were issued to a user.

    Attributes:
        user_id: Authenticated user.
        method: How the user authenticated (password, magic_link, federated).
    """

    user_id: UUID
    method: str


@dataclass(frozen=True, kw_only=True)
class UserLoggedOut(DomainEvent):
    """A user logged out."""

    user_id: UUID


# ═══════════════════════════════════════════════════════════════
# Refresh Tokens
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class RefreshTokenRotated(DomainEvent):
    """A refresh token was exchanged for its successor.

    Attributes:
        user_id: Token owner.
        token_id: Rotated-out token.
        successor_id: Newly created token.
    """

    user_id: UUID
    token_id: UUID
    successor_id: UUID


@dataclass(frozen=True, kw_only=True)
class RefreshTokenReuseDetected(DomainEvent):
    """An invalid refresh token was presented; its family was revoked.

    Attributes:
        user_id: Token owner.
        token_id: Presented token.
    """

    user_id: UUID
    token_id: UUID


@dataclass(frozen=True, kw_only=True)
class RefreshTokensRevoked(DomainEvent):
    """All refresh tokens of a user were revoked.

    Attributes:
        user_id: Token owner.
        reason: Why (login, logout, password_reset).
    """

    user_id: UUID
    reason: str


# ═══════════════════════════════════════════════════════════════
# One-Time Codes
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class OneTimeCodeIssued(DomainEvent):
    """A one-time code was created and handed to delivery.

    Attributes:
        code_id: Code record.
        kind: Code kind value.
        identifier: Target identifier (email or phone).
    """

    code_id: UUID
    kind: str
    identifier: str


@dataclass(frozen=True, kw_only=True)
class OneTimeCodeVerified(DomainEvent):
    """A one-time code was verified and consumed."""

    code_id: UUID
    kind: str
    identifier: str


@dataclass(frozen=True, kw_only=True)
class OneTimeCodeRejected(DomainEvent):
    """A one-time code verification failed.

    Attributes:
        kind: Code kind value.
        identifier: Target identifier, None when looked up by token only.
        reason: Error code value.
    """

    kind: str
    identifier: str | None
    reason: str


@dataclass(frozen=True, kw_only=True)
class PasswordRestored(DomainEvent):
    """A user set a new password through a reset code."""

    user_id: UUID
    channel: str


# ═══════════════════════════════════════════════════════════════
# Federated Login
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class FederatedLoginSucceeded(DomainEvent):
    """A federated identity resolved to a user.

    Attributes:
        user_id: Resolved user.
        provider: Identity provider.
        resolution: returning, linked or created.
    """

    user_id: UUID
    provider: str
    resolution: str


@dataclass(frozen=True, kw_only=True)
class AccountLinked(DomainEvent):
    """A federated identifier was attached to an existing user."""

    user_id: UUID
    provider: str


@dataclass(frozen=True, kw_only=True)
class AccountLinkingDeferred(DomainEvent):
    """A federated login awaits manual account selection.

    Attributes:
        provider: Identity provider.
        candidate_count: Number of linkable local users.
    """

    provider: str
    candidate_count: int
