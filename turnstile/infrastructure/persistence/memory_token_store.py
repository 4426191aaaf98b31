"""In-memory refresh token store.

Rotation and revocation run under an ``asyncio.Lock`` so that the
check-then-mutate sequence on a presented token is atomic within the
process.
"""

import asyncio
from datetime import UTC, datetime
from uuid import UUID

from turnstile.domain.entities.refresh_token import RefreshToken


class InMemoryTokenStore:
    """Dict-backed TokenStore."""

    def __init__(self) -> None:
        self._tokens: dict[UUID, RefreshToken] = {}
        self._by_hash: dict[str, UUID] = {}
        self._lock = asyncio.Lock()

    async def create_refresh_token(
        self,
        user_id: UUID,
        token_hash: str,
        expires_at: datetime,
        *,
        replacing: RefreshToken | None = None,
    ) -> RefreshToken | None:
        async with self._lock:
            predecessor: RefreshToken | None = None
            if replacing is not None:
                predecessor = self._tokens.get(replacing.id)
                if (
                    predecessor is None
                    or predecessor.is_revoked
                    or predecessor.is_replaced
                ):
                    return None

            token = RefreshToken(
                user_id=user_id, token_hash=token_hash, expires_at=expires_at
            )
            self._tokens[token.id] = token
            self._by_hash[token_hash] = token.id

            if predecessor is not None:
                predecessor.replaced_by = token.id
                predecessor.revoke()
            return token

    async def find_by_token_hash(self, token_hash: str) -> RefreshToken | None:
        token_id = self._by_hash.get(token_hash)
        return self._tokens.get(token_id) if token_id is not None else None

    async def revoke_for_user(self, user_id: UUID) -> int:
        async with self._lock:
            now = datetime.now(UTC)
            live = [
                t for t in self._tokens.values() if t.user_id == user_id and not t.is_revoked
            ]
            for token in live:
                token.revoke(now)
            return len(live)

    async def revoke_with_hash(self, token_hash: str) -> bool:
        async with self._lock:
            token_id = self._by_hash.get(token_hash)
            if token_id is None:
                return False
            self._tokens[token_id].revoke()
            return True

    async def revoke_family(self, token: RefreshToken) -> int:
        async with self._lock:
            family = self._family_of(token.id)
            now = datetime.now(UTC)
            revoked = 0
            for member in family:
                if not member.is_revoked:
                    member.revoke(now)
                    revoked += 1
            return revoked

    def _family_of(self, token_id: UUID) -> list[RefreshToken]:
        """Walk to the chain root, then follow successors to the tip."""
        predecessors = {
            t.replaced_by: t.id for t in self._tokens.values() if t.replaced_by is not None
        }

        root_id = token_id
        seen = {root_id}
        while root_id in predecessors:
            root_id = predecessors[root_id]
            if root_id in seen:
                break
            seen.add(root_id)

        family: list[RefreshToken] = []
        visited: set[UUID] = set()
        current: UUID | None = root_id
        while current is not None and current not in visited and current in self._tokens:
            visited.add(current)
            member = self._tokens[current]
            family.append(member)
            current = member.replaced_by
        return family

    def token_count(self) -> int:
        """Number of stored tokens (useful for testing)."""
        return len(self._tokens)
