"""Account linking for federated identities.

Candidate search:
    For each allowed kind (email, phone), look up local users by the
    identity's provider-verified identifiers, deduplicated by user id.
    - Automatic mode: the matched identifier must be verified locally too
    - Manual mode: the user must have a password or a verified match

Automatic linking:
    0 candidates -> LinkingSkipped
    1 candidate  -> link, LinkingComplete
    n candidates -> LinkingInitiated (manual fallback) or LinkingConflict

Manual linking:
    0 candidates -> LinkingSkipped
    n candidates -> LinkingInitiated; the state lives in the session until
    ``advance()`` records the chosen user and ``complete()`` proves control
    of it (password, or an ownership code for passwordless users).
"""

from datetime import UTC, datetime, timedelta
from uuid import UUID

from turnstile.application.dtos import (
    LinkingComplete,
    LinkingConflict,
    LinkingInitiated,
    LinkingResult,
    LinkingSkipped,
    LinkingState,
)
from turnstile.application.services.verification_service import VerificationService
from turnstile.core.constants import LINKING_STATE_SESSION_KEY
from turnstile.core.enums import ErrorCode, MultipleMatchPolicy
from turnstile.core.result import Failure, Result, Success
from turnstile.domain.entities.user import User, require_user_id
from turnstile.domain.errors import AuthenticationError, auth_error
from turnstile.domain.events import AccountLinked, AccountLinkingDeferred
from turnstile.domain.protocols import (
    AuthContextProtocol,
    EventBusProtocol,
    PasswordHashingProtocol,
    UserStore,
)
from turnstile.domain.value_objects import (
    AutomaticLinking,
    FederatedIdentity,
    Identifier,
    IdentifierKind,
    ManualLinking,
)

_LINKABLE_KINDS = (IdentifierKind.EMAIL, IdentifierKind.PHONE)


class AccountLinkingService:
    """Resolve federated identities onto existing local users."""

    def __init__(
        self,
        *,
        user_store: UserStore,
        verification_service: VerificationService,
        password_hasher: PasswordHashingProtocol,
        event_bus: EventBusProtocol,
        state_ttl: timedelta = timedelta(minutes=10),
    ) -> None:
        self._users = user_store
        self._verification = verification_service
        self._hasher = password_hasher
        self._event_bus = event_bus
        self._state_ttl = state_ttl

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    async def link_automatically(
        self,
        identity: FederatedIdentity,
        strategy: AutomaticLinking,
        context: AuthContextProtocol,
    ) -> Result[LinkingResult, AuthenticationError]:
        """Apply the automatic strategy.

        Returns:
            Success(LinkingResult), or Failure(FEDERATED_ACCOUNT_ALREADY_LINKED)
            if the identifier was claimed concurrently.
        """
        candidates = await self.find_candidates(
            identity, strategy.allowed_kinds, require_verified=True
        )

        if not candidates:
            return Success(value=LinkingSkipped())

        if len(candidates) == 1:
            user = candidates[0]
            linked = await self.link(identity.identifier, user)
            if isinstance(linked, Failure):
                return linked
            return Success(value=LinkingComplete(user=user))

        if strategy.on_multiple_matches is MultipleMatchPolicy.MANUAL:
            return Success(value=await self.initiate(identity, candidates, context))
        return Success(
            value=LinkingConflict(
                candidate_ids=tuple(require_user_id(u) for u in candidates)
            )
        )

    async def link_manually(
        self,
        identity: FederatedIdentity,
        strategy: ManualLinking,
        context: AuthContextProtocol,
    ) -> LinkingResult:
        """Apply the manual strategy: defer whenever any candidate exists."""
        candidates = await self.find_candidates(
            identity, strategy.allowed_kinds, require_verified=False
        )
        if not candidates:
            return LinkingSkipped()
        return await self.initiate(identity, candidates, context)

    async def find_candidates(
        self,
        identity: FederatedIdentity,
        allowed_kinds: frozenset[IdentifierKind],
        *,
        require_verified: bool,
    ) -> list[User]:
        """Local users matching the identity's verified emails/phones.

        Args:
            identity: Inbound federated identity.
            allowed_kinds: Identifier kinds to search.
            require_verified: Only accept users whose matched identifier is
                verified; otherwise a password also qualifies.
        """
        candidates: list[User] = []
        seen: set[UUID] = set()

        for kind in _LINKABLE_KINDS:
            if kind not in allowed_kinds:
                continue
            for identifier in identity.verified_identifiers(kind):
                user = await self._users.find_by_identifier(identifier)
                if user is None or user.id is None or user.id in seen:
                    continue

                verified = (
                    user.is_email_verified
                    if kind is IdentifierKind.EMAIL
                    else user.is_phone_verified
                )
                eligible = verified or (
                    not require_verified and user.password_hash is not None
                )
                if eligible:
                    seen.add(user.id)
                    candidates.append(user)

        return candidates

    async def link(
        self, identifier: Identifier, user: User
    ) -> Result[None, AuthenticationError]:
        """Attach a federated identifier to a user.

        Returns:
            Success(None) (also when already linked to this user), or
            Failure(FEDERATED_ACCOUNT_ALREADY_LINKED).
        """
        owner = await self._users.find_by_identifier(identifier)
        if owner is not None:
            if owner.id != user.id:
                return Failure(
                    error=auth_error(ErrorCode.FEDERATED_ACCOUNT_ALREADY_LINKED)
                )
            return Success(value=None)

        await self._users.add_identifier(user, identifier)
        await self._event_bus.publish(
            AccountLinked(
                user_id=require_user_id(user), provider=identifier.provider or ""
            )
        )
        return Success(value=None)

    # ------------------------------------------------------------------
    # Manual selection flow
    # ------------------------------------------------------------------

    async def initiate(
        self,
        identity: FederatedIdentity,
        candidates: list[User],
        context: AuthContextProtocol,
    ) -> LinkingInitiated:
        """Store a pending linking state in the session."""
        state = LinkingState.from_identity(
            identity,
            [require_user_id(u) for u in candidates],
            datetime.now(UTC) + self._state_ttl,
        )
        self._save_state(context, state)
        await self._event_bus.publish(
            AccountLinkingDeferred(
                provider=identity.provider, candidate_count=len(candidates)
            )
        )
        return LinkingInitiated(state=state)

    def pending_state(
        self, context: AuthContextProtocol
    ) -> Result[LinkingState, AuthenticationError]:
        """Load the pending state, dropping it once expired.

        Returns:
            Success(LinkingState), or Failure with LINKING_SESSION_MISSING or
            LINKING_SESSION_EXPIRED.
        """
        raw = context.session.get(LINKING_STATE_SESSION_KEY)
        if raw is None:
            return Failure(error=auth_error(ErrorCode.LINKING_SESSION_MISSING))

        state = LinkingState.model_validate_json(raw)
        if state.is_expired():
            self.clear_state(context)
            return Failure(error=auth_error(ErrorCode.LINKING_SESSION_EXPIRED))
        return Success(value=state)

    async def advance(
        self, context: AuthContextProtocol, selected_user_id: UUID
    ) -> Result[LinkingState, AuthenticationError]:
        """Record the chosen candidate.

        Passwordless candidates are sent an ownership code.

        Returns:
            Success(LinkingState) with the selection, or Failure with
            LINKING_SESSION_*, LINKING_CANDIDATE_INVALID, USER_NOT_FOUND or a
            delivery failure.
        """
        state_result = self.pending_state(context)
        if isinstance(state_result, Failure):
            return state_result
        state = state_result.value

        if selected_user_id not in state.candidate_ids:
            return Failure(error=auth_error(ErrorCode.LINKING_CANDIDATE_INVALID))

        user = await self._users.find_by_id(selected_user_id)
        if user is None:
            return Failure(error=auth_error(ErrorCode.USER_NOT_FOUND))

        code_channel: IdentifierKind | None = None
        if user.password_hash is None:
            sent = await self._verification.send_ownership_code(user)
            if isinstance(sent, Failure):
                return sent
            code_channel = sent.value

        state = state.model_copy(
            update={"selected_user_id": selected_user_id, "code_channel": code_channel}
        )
        self._save_state(context, state)
        return Success(value=state)

    async def complete(
        self,
        context: AuthContextProtocol,
        *,
        password: str | None = None,
        code: str | None = None,
    ) -> Result[tuple[User, LinkingState], AuthenticationError]:
        """Prove control of the selected user and link the identity.

        Args:
            context: Auth context holding the pending state.
            password: Password of the selected user, if it has one.
            code: Ownership code, for passwordless users.

        Returns:
            Success((user, state)) once linked, or Failure with
            LINKING_SESSION_*, LINKING_CANDIDATE_INVALID, USER_NOT_FOUND,
            INVALID_*_OR_PASSWORD, CODE_* or FEDERATED_ACCOUNT_ALREADY_LINKED.
        """
        state_result = self.pending_state(context)
        if isinstance(state_result, Failure):
            return state_result
        state = state_result.value

        if state.selected_user_id is None:
            return Failure(error=auth_error(ErrorCode.LINKING_CANDIDATE_INVALID))

        user = await self._users.find_by_id(state.selected_user_id)
        if user is None:
            return Failure(error=auth_error(ErrorCode.USER_NOT_FOUND))

        if user.password_hash is not None:
            if password is None or not self._hasher.verify_password(
                password, user.password_hash
            ):
                return Failure(error=auth_error(_invalid_credentials_code(user)))
        else:
            if state.code_channel is None:
                return Failure(error=auth_error(ErrorCode.CODE_INVALID))
            confirmed = await self._verification.confirm_ownership_code(
                user, state.code_channel, code or ""
            )
            if isinstance(confirmed, Failure):
                return confirmed
            user = confirmed.value

        linked = await self.link(state.to_identity().identifier, user)
        if isinstance(linked, Failure):
            return linked

        self.clear_state(context)
        return Success(value=(user, state))

    def clear_state(self, context: AuthContextProtocol) -> None:
        context.session.pop(LINKING_STATE_SESSION_KEY, None)

    def _save_state(self, context: AuthContextProtocol, state: LinkingState) -> None:
        context.session[LINKING_STATE_SESSION_KEY] = state.model_dump_json()


def _invalid_credentials_code(user: User) -> ErrorCode:
    if user.email:
        return ErrorCode.INVALID_EMAIL_OR_PASSWORD
    if user.phone:
        return ErrorCode.INVALID_PHONE_OR_PASSWORD
    return ErrorCode.INVALID_USERNAME_OR_PASSWORD
