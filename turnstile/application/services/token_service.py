"""Token service: access token signing and refresh token lifecycle.

Refresh flow:
1. Hash the presented opaque token and look it up
2. Not found -> Failure(REFRESH_TOKEN_NOT_FOUND)
3. Found but revoked, rotated out or expired -> revoke the whole token
   family (reuse signal), emit RefreshTokenReuseDetected,
   Failure(REFRESH_TOKEN_INVALID)
4. Load the owner -> Failure(USER_NOT_FOUND) if gone
5. Create the successor with ``replacing=token``; the store consumes the
   presented token atomically and returns None if another request won the
   race, which is handled like step 3
6. Emit RefreshTokenRotated and return Success(AuthUser)

Architecture:
- Application layer ONLY imports from domain and core
- Stores, signer and random generator are injected via protocols
"""

from datetime import UTC, datetime, timedelta
from uuid import UUID

from turnstile.application.dtos import AuthUser, UserView
from turnstile.core.constants import ACCESS_TOKEN_SCOPE
from turnstile.core.enums import ErrorCode
from turnstile.core.result import Failure, Result, Success
from turnstile.domain.entities.refresh_token import RefreshToken
from turnstile.domain.entities.user import User, require_user_id
from turnstile.domain.errors import AuthenticationError, auth_error
from turnstile.domain.events import (
    RefreshTokenReuseDetected,
    RefreshTokenRotated,
    RefreshTokensRevoked,
)
from turnstile.domain.protocols import (
    AccessTokenProtocol,
    EventBusProtocol,
    RandomGeneratorProtocol,
    TokenStore,
    UserStore,
)
from turnstile.domain.value_objects import AccessTokenClaims


class TokenService:
    """Issues, rotates and revokes session credentials."""

    def __init__(
        self,
        *,
        token_store: TokenStore,
        user_store: UserStore,
        random_generator: RandomGeneratorProtocol,
        access_tokens: AccessTokenProtocol,
        event_bus: EventBusProtocol,
        access_token_ttl: timedelta = timedelta(minutes=15),
        refresh_token_ttl: timedelta = timedelta(days=7),
        issuer: str | None = None,
        audience: str | None = None,
    ) -> None:
        self._tokens = token_store
        self._users = user_store
        self._random = random_generator
        self._access_tokens = access_tokens
        self._event_bus = event_bus
        self._access_token_ttl = access_token_ttl
        self._refresh_token_ttl = refresh_token_ttl
        self._issuer = issuer
        self._audience = audience

    async def issue(self, user: User, *, revoke_existing: bool = True) -> AuthUser:
        """Issue an access token and a new refresh token chain.

        Args:
            user: Persisted user to authenticate.
            revoke_existing: Revoke the user's live refresh tokens first.

        Returns:
            AuthUser with both tokens.

        Raises:
            ValueError: If the user has no id.
        """
        user_id = require_user_id(user)

        if revoke_existing:
            await self._revoke_all(user_id, reason="login")

        opaque = self._random.generate_opaque_token()
        now = datetime.now(UTC)
        await self._tokens.create_refresh_token(
            user_id, self._random.hash(opaque), now + self._refresh_token_ttl
        )
        return self._auth_user(user, user_id, opaque, now)

    async def refresh(self, refresh_token: str) -> Result[AuthUser, AuthenticationError]:
        """Exchange a refresh token for a new token pair.

        Args:
            refresh_token: Opaque refresh token presented by the client.

        Returns:
            Success(AuthUser) with a new refresh token, or
            Failure(REFRESH_TOKEN_NOT_FOUND / REFRESH_TOKEN_INVALID / USER_NOT_FOUND).
        """
        token = await self._tokens.find_by_token_hash(self._random.hash(refresh_token))
        if token is None:
            return Failure(error=auth_error(ErrorCode.REFRESH_TOKEN_NOT_FOUND))

        now = datetime.now(UTC)
        if not token.is_valid(now):
            return await self._reject_reuse(token, reason=_invalid_reason(token, now))

        user = await self._users.find_by_id(token.user_id)
        if user is None:
            await self._tokens.revoke_family(token)
            return Failure(error=auth_error(ErrorCode.USER_NOT_FOUND))

        opaque = self._random.generate_opaque_token()
        successor = await self._tokens.create_refresh_token(
            token.user_id,
            self._random.hash(opaque),
            now + self._refresh_token_ttl,
            replacing=token,
        )
        if successor is None:
            return await self._reject_reuse(token, reason="concurrent_rotation")

        await self._event_bus.publish(
            RefreshTokenRotated(
                user_id=token.user_id, token_id=token.id, successor_id=successor.id
            )
        )
        return Success(value=self._auth_user(user, token.user_id, opaque, now))

    async def revoke(self, user: User, *, reason: str = "logout") -> int:
        """Revoke every live refresh token of a user.

        Idempotent: a user without tokens is a no-op.

        Returns:
            Number of tokens revoked.
        """
        if user.id is None:
            return 0
        return await self._revoke_all(user.id, reason=reason)

    async def revoke_token(self, refresh_token: str) -> bool:
        """Revoke a single refresh token (sign out one device).

        Returns:
            False if the token does not exist.
        """
        return await self._tokens.revoke_with_hash(self._random.hash(refresh_token))

    def verify_access_token(
        self, access_token: str
    ) -> Result[AccessTokenClaims, AuthenticationError]:
        """Verify an access token's signature, expiry, issuer and audience."""
        return self._access_tokens.verify(access_token)

    async def _revoke_all(self, user_id: UUID, *, reason: str) -> int:
        revoked = await self._tokens.revoke_for_user(user_id)
        if revoked:
            await self._event_bus.publish(
                RefreshTokensRevoked(user_id=user_id, reason=reason)
            )
        return revoked

    async def _reject_reuse(
        self, token: RefreshToken, *, reason: str
    ) -> Failure[AuthenticationError]:
        await self._tokens.revoke_family(token)
        await self._event_bus.publish(
            RefreshTokenReuseDetected(user_id=token.user_id, token_id=token.id)
        )
        return Failure(error=auth_error(ErrorCode.REFRESH_TOKEN_INVALID, reason=reason))

    def _auth_user(
        self, user: User, user_id: UUID, refresh_token: str, now: datetime
    ) -> AuthUser:
        claims = AccessTokenClaims(
            subject=user_id,
            issued_at=now,
            expires_at=now + self._access_token_ttl,
            issuer=self._issuer,
            audience=self._audience,
            scope=ACCESS_TOKEN_SCOPE,
        )
        return AuthUser(
            access_token=self._access_tokens.sign(claims),
            refresh_token=refresh_token,
            expires_in=int(self._access_token_ttl.total_seconds()),
            user=UserView.from_user(user),
        )


def _invalid_reason(token: RefreshToken, now: datetime) -> str:
    if token.is_replaced:
        return "reused"
    if token.is_revoked:
        return "revoked"
    if token.is_expired(now):
        return "expired"
    return "invalid"
