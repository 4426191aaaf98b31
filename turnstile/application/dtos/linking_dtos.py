"""Federated login and account-linking DTOs.

LinkingState is persisted in the browser session between the steps of a
manual linking flow, so it is a pydantic model with a JSON round trip.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from turnstile.application.dtos.auth_dtos import AuthUser
from turnstile.domain.entities.user import User
from turnstile.domain.value_objects import FederatedIdentity, Identifier, IdentifierKind


class LinkingState(BaseModel):
    """Pending manual account-linking session.

    Attributes:
        provider / subject_id: Federated identifier being linked.
        verified_emails / verified_phone_numbers: Provider-verified identifiers.
        display_name / profile_picture_url: Provider profile.
        candidate_ids: Local users the identity may be linked to.
        selected_user_id: Candidate picked by the person, once chosen.
        code_channel: Channel an ownership code was sent through, if any.
        expires_at: Absolute expiry of the linking session (UTC).
    """

    model_config = ConfigDict(frozen=True)

    provider: str
    subject_id: str
    verified_emails: list[str] = []
    verified_phone_numbers: list[str] = []
    display_name: str | None = None
    profile_picture_url: str | None = None
    candidate_ids: list[UUID]
    selected_user_id: UUID | None = None
    code_channel: IdentifierKind | None = None
    expires_at: datetime

    @classmethod
    def from_identity(
        cls,
        identity: FederatedIdentity,
        candidate_ids: list[UUID],
        expires_at: datetime,
    ) -> "LinkingState":
        return cls(
            provider=identity.provider,
            subject_id=identity.identifier.value,
            verified_emails=list(identity.verified_emails),
            verified_phone_numbers=list(identity.verified_phone_numbers),
            display_name=identity.display_name,
            profile_picture_url=identity.profile_picture_url,
            candidate_ids=candidate_ids,
            expires_at=expires_at,
        )

    def to_identity(self) -> FederatedIdentity:
        """Rebuild the federated identity this state was created for."""
        return FederatedIdentity(
            identifier=Identifier.federated(self.provider, self.subject_id),
            verified_emails=tuple(self.verified_emails),
            verified_phone_numbers=tuple(self.verified_phone_numbers),
            display_name=self.display_name,
            profile_picture_url=self.profile_picture_url,
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        return (now or datetime.now(UTC)) > self.expires_at


# ═══════════════════════════════════════════════════════════════
# Linking results
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class LinkingComplete:
    """The federated identifier was linked onto ``user``."""

    user: User


@dataclass(frozen=True)
class LinkingSkipped:
    """No linkable user; the caller creates a new one."""


@dataclass(frozen=True, kw_only=True)
class LinkingConflict:
    """Several users matched and the policy forbids choosing one."""

    candidate_ids: tuple[UUID, ...]


@dataclass(frozen=True, kw_only=True)
class LinkingInitiated:
    """A manual selection flow was started and stored in the session."""

    state: LinkingState


type LinkingResult = LinkingComplete | LinkingSkipped | LinkingConflict | LinkingInitiated


# ═══════════════════════════════════════════════════════════════
# Federated login outcomes
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class FederatedLoginCompleted:
    """Tokens were issued.

    Attributes:
        auth_user: Issued tokens and user view.
        resolution: returning, linked or created.
    """

    auth_user: AuthUser
    resolution: str


@dataclass(frozen=True, kw_only=True)
class FederatedLoginPending:
    """The person must pick an account to link before tokens are issued."""

    state: LinkingState


type FederatedLoginOutcome = FederatedLoginCompleted | FederatedLoginPending
