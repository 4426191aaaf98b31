"""Federated login.

Flow per inbound FederatedIdentity:
1. A user already holds the federated identifier -> returning user
2. Otherwise apply the account-linking strategy:
   - LinkingDisabled: create a new user
   - AutomaticLinking: link onto the single candidate; several candidates
     fall back to manual selection or a new user per policy
   - ManualLinking: any candidate defers to the selection flow
3. Terminal paths log the user into the auth context and issue tokens

New users are keyed by the federated identifier and also receive the
first provider-verified email/phone that no other user holds, marked as
verified.
"""

from turnstile.application.dtos import (
    FederatedLoginCompleted,
    FederatedLoginOutcome,
    FederatedLoginPending,
    LinkingComplete,
    LinkingInitiated,
)
from turnstile.application.services.account_linking_service import (
    AccountLinkingService,
)
from turnstile.application.services.token_service import TokenService
from turnstile.core.result import Failure, Result, Success
from turnstile.domain.entities.user import User, require_user_id
from turnstile.domain.errors import AuthenticationError
from turnstile.domain.events import FederatedLoginSucceeded, UserLoggedIn
from turnstile.domain.protocols import AuthContextProtocol, EventBusProtocol, UserStore
from turnstile.domain.value_objects import (
    AccountLinkingStrategy,
    AutomaticLinking,
    FederatedIdentity,
    IdentifierKind,
    LinkingDisabled,
    ManualLinking,
)


class FederatedLoginService:
    """Resolve federated identities to users and issue tokens."""

    def __init__(
        self,
        *,
        user_store: UserStore,
        token_service: TokenService,
        linking_service: AccountLinkingService,
        event_bus: EventBusProtocol,
        strategy: AccountLinkingStrategy,
    ) -> None:
        self._users = user_store
        self._tokens = token_service
        self._linking = linking_service
        self._event_bus = event_bus
        self._strategy = strategy

    async def login(
        self, identity: FederatedIdentity, context: AuthContextProtocol
    ) -> Result[FederatedLoginOutcome, AuthenticationError]:
        """Log in with a federated identity.

        Returns:
            Success(FederatedLoginCompleted) with tokens,
            Success(FederatedLoginPending) when manual selection is needed,
            or Failure(FEDERATED_ACCOUNT_ALREADY_LINKED) on a linking race.
        """
        existing = await self._users.find_by_identifier(identity.identifier)
        if existing is not None:
            return Success(value=await self._finish(existing, identity, "returning", context))

        match self._strategy:
            case LinkingDisabled():
                pass
            case AutomaticLinking() as automatic:
                linking = await self._linking.link_automatically(
                    identity, automatic, context
                )
                if isinstance(linking, Failure):
                    return linking
                match linking.value:
                    case LinkingComplete(user=user):
                        return Success(
                            value=await self._finish(user, identity, "linked", context)
                        )
                    case LinkingInitiated(state=state):
                        return Success(value=FederatedLoginPending(state=state))
            case ManualLinking() as manual:
                match await self._linking.link_manually(identity, manual, context):
                    case LinkingInitiated(state=state):
                        return Success(value=FederatedLoginPending(state=state))

        user = await self._create_user(identity)
        return Success(value=await self._finish(user, identity, "created", context))

    async def complete_manual_link(
        self,
        context: AuthContextProtocol,
        *,
        password: str | None = None,
        code: str | None = None,
    ) -> Result[FederatedLoginCompleted, AuthenticationError]:
        """Finish a pending manual link and issue tokens."""
        completed = await self._linking.complete(context, password=password, code=code)
        if isinstance(completed, Failure):
            return completed

        user, state = completed.value
        return Success(
            value=await self._finish(user, state.to_identity(), "linked", context)
        )

    async def _create_user(self, identity: FederatedIdentity) -> User:
        user = await self._users.create(identity.identifier)

        for kind in (IdentifierKind.EMAIL, IdentifierKind.PHONE):
            for identifier in identity.verified_identifiers(kind):
                if await self._users.find_by_identifier(identifier) is not None:
                    continue
                await self._users.add_identifier(user, identifier)
                if kind is IdentifierKind.EMAIL:
                    await self._users.mark_email_verified(user)
                else:
                    await self._users.mark_phone_verified(user)
                break

        return await self._users.find_by_id(require_user_id(user)) or user

    async def _finish(
        self,
        user: User,
        identity: FederatedIdentity,
        resolution: str,
        context: AuthContextProtocol,
    ) -> FederatedLoginCompleted:
        context.login(user)
        auth_user = await self._tokens.issue(user, revoke_existing=True)

        user_id = require_user_id(user)
        await self._event_bus.publish(
            FederatedLoginSucceeded(
                user_id=user_id, provider=identity.provider, resolution=resolution
            )
        )
        await self._event_bus.publish(UserLoggedIn(user_id=user_id, method="federated"))
        return FederatedLoginCompleted(auth_user=auth_user, resolution=resolution)
