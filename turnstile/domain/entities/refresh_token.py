"""Refresh token domain entity.

Only the hash of an opaque refresh token is stored. Rotation links each
token to its single successor through ``replaced_by``, forming a chain
(token family) that starts at the originally issued token.

Invariants:
    - Valid iff not revoked and ``now < expires_at``
    - At most one direct successor per token
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from uuid_extensions import uuid7


@dataclass(slots=True, kw_only=True)
class RefreshToken:
    """Persisted refresh token.

    Attributes:
        id: Token record identifier.
        user_id: Owner of the token.
        token_hash: One-way hash of the opaque token.
        expires_at: Absolute expiry (UTC).
        created_at: Creation timestamp (UTC).
        revoked_at: When the token was revoked or rotated out.
        replaced_by: Id of the successor created by rotation.
    """

    user_id: UUID
    token_hash: str
    expires_at: datetime
    id: UUID = field(default_factory=uuid7)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    revoked_at: datetime | None = None
    replaced_by: UUID | None = None

    @property
    def is_revoked(self) -> bool:
        return self.revoked_at is not None

    @property
    def is_replaced(self) -> bool:
        return self.replaced_by is not None

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the token is past its expiry."""
        return (now or datetime.now(UTC)) >= self.expires_at

    def is_valid(self, now: datetime | None = None) -> bool:
        """Check the token can still be exchanged."""
        return not self.is_revoked and not self.is_expired(now)

    def revoke(self, now: datetime | None = None) -> None:
        """Mark the token revoked. Idempotent."""
        if self.revoked_at is None:
            self.revoked_at = now or datetime.now(UTC)
