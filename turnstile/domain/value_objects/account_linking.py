"""Account-linking strategy for federated logins.

Tagged variant:
    - LinkingDisabled: every unknown federated identity becomes a new user
    - AutomaticLinking: link onto the single matching local user
    - ManualLinking: let the person pick the account to link

Usage:
    match strategy:
        case LinkingDisabled():
            ...
        case AutomaticLinking(allowed_kinds=kinds):
            ...
"""

from dataclasses import dataclass

from turnstile.core.enums import MultipleMatchPolicy
from turnstile.domain.value_objects.identifier import IdentifierKind


@dataclass(frozen=True, slots=True)
class LinkingDisabled:
    """Never link; create a new user for unknown federated identities."""


@dataclass(frozen=True, slots=True, kw_only=True)
class AutomaticLinking:
    """Link automatically when exactly one local user matches.

    Attributes:
        allowed_kinds: Identifier kinds searched for candidates.
        on_multiple_matches: Fallback when several users match.
    """

    allowed_kinds: frozenset[IdentifierKind]
    on_multiple_matches: MultipleMatchPolicy = MultipleMatchPolicy.NEW_USER


@dataclass(frozen=True, slots=True, kw_only=True)
class ManualLinking:
    """Defer to a selection flow whenever any local user matches.

    Attributes:
        allowed_kinds: Identifier kinds searched for candidates.
    """

    allowed_kinds: frozenset[IdentifierKind]


type AccountLinkingStrategy = LinkingDisabled | AutomaticLinking | ManualLinking
