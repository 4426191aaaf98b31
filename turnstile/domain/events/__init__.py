"""Domain events package.

Usage:
    from turnstile.domain.events import DomainEvent, RefreshTokenRotated
"""

from turnstile.domain.events.auth_events import (
    AccountLinked,
    AccountLinkingDeferred,
    FederatedLoginSucceeded,
    OneTimeCodeIssued,
    OneTimeCodeRejected,
    OneTimeCodeVerified,
    PasswordRestored,
    RefreshTokenReuseDetected,
    RefreshTokenRotated,
    RefreshTokensRevoked,
    UserLoggedIn,
    UserLoggedOut,
    UserRegistered,
)
from turnstile.domain.events.base_event import DomainEvent

ALL_EVENT_TYPES: tuple[type[DomainEvent], ...] = (
    UserRegistered,
    UserLoggedIn,
    UserLoggedOut,
    RefreshTokenRotated,
    RefreshTokenReuseDetected,
    RefreshTokensRevoked,
    OneTimeCodeIssued,
    OneTimeCodeVerified,
    OneTimeCodeRejected,
    PasswordRestored,
    FederatedLoginSucceeded,
    AccountLinked,
    AccountLinkingDeferred,
)

__all__ = [
    "ALL_EVENT_TYPES",
    "AccountLinked",
    "AccountLinkingDeferred",
    "DomainEvent",
    "FederatedLoginSucceeded",
    "OneTimeCodeIssued",
    "OneTimeCodeRejected",
    "OneTimeCodeVerified",
    "PasswordRestored",
    "RefreshTokenReuseDetected",
    "RefreshTokenRotated",
    "RefreshTokensRevoked",
    "UserLoggedIn",
    "UserLoggedOut",
    "UserRegistered",
]
