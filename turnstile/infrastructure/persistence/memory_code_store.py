"""In-memory one-time code store."""

import asyncio
from datetime import UTC, datetime
from uuid import UUID

from turnstile.domain.entities.one_time_code import CodeKind, OneTimeCode
from turnstile.domain.value_objects import Identifier


class InMemoryCodeStore:
    """Dict-backed CodeStore.

    Invalidated codes are kept (soft delete) but never returned by lookups.
    """

    def __init__(self) -> None:
        self._codes: dict[UUID, OneTimeCode] = {}
        self._lock = asyncio.Lock()

    def _live(self, kind: CodeKind) -> list[OneTimeCode]:
        return [c for c in self._codes.values() if c.kind is kind and not c.is_invalidated]

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
        async with self._lock:
            code = OneTimeCode(
                kind=kind,
                identifier=identifier,
                code_hash=code_hash,
                expires_at=expires_at,
                user_id=user_id,
                session_token_hash=session_token_hash,
            )
            self._codes[code.id] = code
            return code

    async def find_code(
        self, kind: CodeKind, identifier: Identifier, code_hash: str
    ) -> OneTimeCode | None:
        return next(
            (
                c
                for c in self._live(kind)
                if c.identifier == identifier and c.code_hash == code_hash
            ),
            None,
        )

    async def find_code_by_hash(
        self, kind: CodeKind, code_hash: str
    ) -> OneTimeCode | None:
        return next((c for c in self._live(kind) if c.code_hash == code_hash), None)

    async def find_live_code(
        self, kind: CodeKind, identifier: Identifier
    ) -> OneTimeCode | None:
        candidates = [c for c in self._live(kind) if c.identifier == identifier]
        if not candidates:
            return None
        # uuid7 ids are time-ordered
        return max(candidates, key=lambda c: (c.created_at, c.id))

    async def invalidate_codes(
        self, kind: CodeKind, identifier: Identifier, *, keep: UUID | None = None
    ) -> int:
        async with self._lock:
            now = datetime.now(UTC)
            targets = [
                c for c in self._live(kind) if c.identifier == identifier and c.id != keep
            ]
            for code in targets:
                code.invalidated_at = now
            return len(targets)

    async def consume_code(self, code: OneTimeCode) -> bool:
        async with self._lock:
            stored = self._codes.get(code.id)
            if stored is None or stored.is_invalidated:
                return False
            now = datetime.now(UTC)
            for sibling in self._live(code.kind):
                if sibling.identifier == code.identifier:
                    sibling.invalidated_at = now
            return True

    async def increment_failed_attempts(self, code: OneTimeCode) -> int:
        async with self._lock:
            stored = self._codes[code.id]
            stored.failed_attempts += 1
            return stored.failed_attempts

    def live_codes(self, kind: CodeKind, identifier: Identifier) -> list[OneTimeCode]:
        """Non-invalidated codes of an identifier (useful for testing)."""
        return [c for c in self._live(kind) if c.identifier == identifier]
