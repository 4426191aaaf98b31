"""One-time code domain entity.

Generalizes email/phone verification codes, email/phone password reset
codes and magic-link tokens. Only the hash of the code is stored.

Invariants:
    - At most one live code per (kind, identifier)
    - Valid iff not expired and ``failed_attempts < max_attempts``
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from uuid import UUID

from uuid_extensions import uuid7

from turnstile.domain.value_objects import Identifier


class CodeKind(str, Enum):
    """Flows driven by the one-time code engine."""

    EMAIL_VERIFICATION = "email_verification"
    PHONE_VERIFICATION = "phone_verification"
    EMAIL_RESET = "email_reset"
    PHONE_RESET = "phone_reset"
    MAGIC_LINK = "magic_link"


@dataclass(slots=True, kw_only=True)
class OneTimeCode:
    """Persisted one-time code.

    Attributes:
        id: Code record identifier.
        kind: Flow this code belongs to.
        identifier: Email or phone the code was sent to.
        user_id: Owning user, None for magic links to not-yet-created users.
        code_hash: One-way hash of the code.
        expires_at: Absolute expiry (UTC).
        failed_attempts: Wrong verifications recorded against this code.
        session_token_hash: Hash of the browser binding token (magic links).
        created_at: Creation timestamp (UTC).
        invalidated_at: When the code was consumed or superseded.
    """

    kind: CodeKind
    identifier: Identifier
    code_hash: str
    expires_at: datetime
    user_id: UUID | None = None
    failed_attempts: int = 0
    session_token_hash: str | None = None
    id: UUID = field(default_factory=uuid7)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    invalidated_at: datetime | None = None

    @property
    def is_invalidated(self) -> bool:
        return self.invalidated_at is not None

    def is_expired(self, now: datetime | None = None) -> bool:
        """Expired once the clock has moved past ``expires_at``."""
        return (now or datetime.now(UTC)) > self.expires_at

    def is_exhausted(self, max_attempts: int) -> bool:
        return self.failed_attempts >= max_attempts

    def is_valid(self, max_attempts: int, now: datetime | None = None) -> bool:
        return not self.is_expired(now) and not self.is_exhausted(max_attempts)
