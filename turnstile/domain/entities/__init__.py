"""Domain entities.

Usage:
    from turnstile.domain.entities import OneTimeCode, RefreshToken, User
"""

from turnstile.domain.entities.one_time_code import CodeKind, OneTimeCode
from turnstile.domain.entities.refresh_token import RefreshToken
from turnstile.domain.entities.user import User, identifier_of, require_user_id

__all__ = [
    "CodeKind",
    "OneTimeCode",
    "RefreshToken",
    "User",
    "identifier_of",
    "require_user_id",
]
