"""CodeStore protocol for one-time code persistence.

One surface serves every code kind; each call is scoped by ``CodeKind``.
Lookups only return codes that have not been invalidated.
"""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from turnstile.domain.entities.one_time_code import CodeKind, OneTimeCode
from turnstile.domain.value_objects import Identifier


class CodeStore(Protocol):
    """One-time code store protocol (port)."""

    async def create_code(
        self,
        kind: CodeKind,
        identifier: Identifier,
        code_hash: str,
        expires_at: datetime,
        *,
        user_id: UUID | None = None,
        session_token_hash: str | None = None,
    ) -> OneTimeCode:
        """Persist a new code with zero failed attempts."""
        ...

    async def find_code(
        self, kind: CodeKind, identifier: Identifier, code_hash: str
    ) -> OneTimeCode | None:
        """Find a non-invalidated code by identifier and hash."""
        ...

    async def find_code_by_hash(
        self, kind: CodeKind, code_hash: str
    ) -> OneTimeCode | None:
        """Find a non-invalidated code by hash alone (magic-link tokens)."""
        ...

    async def find_live_code(
        self, kind: CodeKind, identifier: Identifier
    ) -> OneTimeCode | None:
        """Return the newest non-invalidated code of an identifier."""
        ...

    async def invalidate_codes(
        self, kind: CodeKind, identifier: Identifier, *, keep: UUID | None = None
    ) -> int:
        """Invalidate the identifier's codes except ``keep``. Idempotent.

        Returns:
            Number of codes newly invalidated.
        """
        ...

    async def consume_code(self, code: OneTimeCode) -> bool:
        """Invalidate ``code`` and its siblings if ``code`` is still live.

        The check and the invalidation are atomic, so of two concurrent
        redemptions of one code only the first wins.

        Returns:
            True if this call consumed the code, False if it was already
            invalidated.
        """
        ...

    async def increment_failed_attempts(self, code: OneTimeCode) -> int:
        """Atomically add one failed attempt. Returns the new count."""
        ...
