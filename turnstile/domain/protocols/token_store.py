"""TokenStore protocol for refresh token persistence.

Refresh tokens are addressed by hash. Each row carries an expiry and a
successor pointer forming the rotation chain.

Concurrency:
    ``create_refresh_token(..., replacing=token)`` must atomically check that
    ``token`` has not already been revoked or replaced, mark it consumed and
    insert the successor. When another request consumed it first the store
    returns None, so two concurrent refreshes of one token can never both
    succeed.
"""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from turnstile.domain.entities.refresh_token import RefreshToken


class TokenStore(Protocol):
    """Refresh token store protocol (port)."""

    async def create_refresh_token(
        self,
        user_id: UUID,
        token_hash: str,
        expires_at: datetime,
        *,
        replacing: RefreshToken | None = None,
    ) -> RefreshToken | None:
        """Persist a refresh token, optionally as the successor of another.

        Args:
            user_id: Token owner.
            token_hash: Lookup hash of the opaque token.
            expires_at: Absolute expiry.
            replacing: Token being rotated out, if this is a rotation.

        Returns:
            The new token, or None if ``replacing`` was already consumed.
        """
        ...

    async def find_by_token_hash(self, token_hash: str) -> RefreshToken | None:
        """Find a token by hash, including revoked and expired ones."""
        ...

    async def revoke_for_user(self, user_id: UUID) -> int:
        """Revoke every live token of a user. Returns the number revoked."""
        ...

    async def revoke_with_hash(self, token_hash: str) -> bool:
        """Revoke a single token. Returns False if it does not exist."""
        ...

    async def revoke_family(self, token: RefreshToken) -> int:
        """Revoke every ancestor and descendant of ``token`` and the token itself.

        Returns:
            Number of tokens newly revoked.
        """
        ...
