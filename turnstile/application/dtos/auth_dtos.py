"""Authentication DTOs (Data Transfer Objects).

DTOs:
    - UserView: Public projection of a user returned alongside tokens
    - AuthUser: Token pair issued by login, refresh and passwordless flows
"""

from dataclasses import dataclass
from uuid import UUID

from turnstile.core.constants import TOKEN_TYPE_BEARER
from turnstile.domain.entities.user import User


@dataclass(frozen=True, kw_only=True)
class UserView:
    """Public user projection (no password hash).

    Attributes:
        id: User id.
        email / phone / username: Identifiers, if set.
        is_email_verified / is_phone_verified: Verification flags.
    """

    id: UUID | None
    email: str | None
    phone: str | None
    username: str | None
    is_email_verified: bool
    is_phone_verified: bool

    @classmethod
    def from_user(cls, user: User) -> "UserView":
        return cls(
            id=user.id,
            email=user.email,
            phone=user.phone,
            username=user.username,
            is_email_verified=user.is_email_verified,
            is_phone_verified=user.is_phone_verified,
        )


@dataclass(frozen=True, kw_only=True)
class AuthUser:
    """Response from successful token issuance.

    Attributes:
        access_token: Signed JWT access token (short-lived).
        refresh_token: Opaque refresh token (long-lived, single use).
        expires_in: Access token lifetime in seconds.
        user: Authenticated user view.
        token_type: Always "Bearer".
    """

    access_token: str
    refresh_token: str
    expires_in: int
    user: UserView
    token_type: str = TOKEN_TYPE_BEARER
