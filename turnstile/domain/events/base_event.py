"""Base domain event class.

Domain events represent "things that happened" and are always named in past
tense (e.g. RefreshTokenRotated, OneTimeCodeVerified).

Architecture:
    - Frozen dataclass (immutable after creation)
    - Auto-generated event_id (UUID v7, time-ordered) for event tracking
    - occurred_at timestamp (UTC) for event ordering
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from uuid_extensions import uuid7


@dataclass(frozen=True, kw_only=True, slots=True)
class DomainEvent:
    """Base class for all domain events.

    All domain events MUST:
        1. Inherit from this base class
        2. Use past tense naming
        3. Be frozen, keyword-only dataclasses
        4. Never carry plaintext secrets (codes, tokens, passwords)

    Attributes:
        event_id: Unique identifier for this event instance.
        occurred_at: Timestamp when the event occurred (UTC).
    """

    event_id: UUID = field(default_factory=uuid7)
    occurred_at: datetime = field(default_factory=lambda: datetime.now(UTC))
