"""Domain value objects.

Usage:
    from turnstile.domain.value_objects import Identifier, IdentifierKind
"""

from turnstile.domain.value_objects.access_token_claims import AccessTokenClaims
from turnstile.domain.value_objects.account_linking import (
    AccountLinkingStrategy,
    AutomaticLinking,
    LinkingDisabled,
    ManualLinking,
)
from turnstile.domain.value_objects.credential import Credential, CredentialKind
from turnstile.domain.value_objects.federated_identity import FederatedIdentity
from turnstile.domain.value_objects.identifier import Identifier, IdentifierKind

__all__ = [
    "AccessTokenClaims",
    "AccountLinkingStrategy",
    "AutomaticLinking",
    "Credential",
    "CredentialKind",
    "FederatedIdentity",
    "Identifier",
    "IdentifierKind",
    "LinkingDisabled",
    "ManualLinking",
]
