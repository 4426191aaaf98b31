"""Application DTOs.

Usage:
    from turnstile.application.dtos import AuthUser, UserView
"""

from turnstile.application.dtos.auth_dtos import AuthUser, UserView
from turnstile.application.dtos.linking_dtos import (
    FederatedLoginCompleted,
    FederatedLoginOutcome,
    FederatedLoginPending,
    LinkingComplete,
    LinkingConflict,
    LinkingInitiated,
    LinkingResult,
    LinkingSkipped,
    LinkingState,
)

__all__ = [
    "AuthUser",
    "FederatedLoginCompleted",
    "FederatedLoginOutcome",
    "FederatedLoginPending",
    "LinkingComplete",
    "LinkingConflict",
    "LinkingInitiated",
    "LinkingResult",
    "LinkingSkipped",
    "LinkingState",
    "UserView",
]
