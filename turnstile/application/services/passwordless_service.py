"""Passwordless (magic link) service.

Request flow:
1. Require magic links and email delivery to be configured
2. Look up the user by email; unknown emails need auto-create enabled
3. Issue an opaque token (and, with same-browser binding, a second
   session token whose plaintext is stored in the caller's session)
4. Dispatch the link

Verify flow:
1. Engine verification by token hash
2. Same-browser check when the link was bound; a mismatch counts as a
   failed attempt and fails with MAGIC_LINK_DIFFERENT_BROWSER
3. Consume the token; a concurrent redemption that got there first fails
   with CODE_INVALID
4. Resolve the user: bound user, user registered since, or a new user with
   a pre-verified email when auto-create is enabled
5. Mark the email verified and clear the session token
6. Log in and issue tokens
"""

from urllib.parse import urlencode

from turnstile.application.dtos import AuthUser
from turnstile.application.services.delivery_dispatcher import (
    DeliveryDispatcher,
    DeliveryJob,
    DeliveryMessage,
)
from turnstile.application.services.one_time_code_engine import (
    CodePolicy,
    OneTimeCodeEngine,
)
from turnstile.application.services.token_service import TokenService
from turnstile.core.constants import MAGIC_LINK_SESSION_KEY
from turnstile.core.enums import ErrorCode
from turnstile.core.result import Failure, Result, Success
from turnstile.domain.entities.one_time_code import CodeKind, OneTimeCode
from turnstile.domain.entities.user import User, require_user_id
from turnstile.domain.errors import AuthenticationError, auth_error
from turnstile.domain.events import UserLoggedIn
from turnstile.domain.protocols import AuthContextProtocol, EventBusProtocol, UserStore
from turnstile.domain.value_objects import Identifier


class PasswordlessService:
    """Email magic-link login."""

    def __init__(
        self,
        *,
        user_store: UserStore,
        token_service: TokenService,
        engine: OneTimeCodeEngine,
        dispatcher: DeliveryDispatcher,
        event_bus: EventBusProtocol,
        policy: CodePolicy,
        magic_link_url: str,
        enabled: bool = True,
        auto_create_user: bool = True,
        require_same_browser: bool = False,
        revoke_existing_tokens: bool = True,
        use_queues: bool = True,
    ) -> None:
        self._users = user_store
        self._tokens = token_service
        self._engine = engine
        self._dispatcher = dispatcher
        self._event_bus = event_bus
        self._policy = policy
        self._magic_link_url = magic_link_url
        self._enabled = enabled
        self._auto_create_user = auto_create_user
        self._require_same_browser = require_same_browser
        self._revoke_existing_tokens = revoke_existing_tokens
        self._use_queues = use_queues

    async def request_email_magic_link(
        self, email: str, context: AuthContextProtocol
    ) -> Result[None, AuthenticationError]:
        """Send a magic link to an email address.

        Args:
            email: Address to log in as.
            context: Caller's auth context; receives the browser binding token.

        Returns:
            Success(None), or Failure with MAGIC_LINK_NOT_CONFIGURED,
            EMAIL_DELIVERY_NOT_CONFIGURED, MAGIC_LINK_EMAIL_NOT_FOUND or
            DELIVERY_FAILED.
        """
        if not self._enabled:
            return Failure(error=auth_error(ErrorCode.MAGIC_LINK_NOT_CONFIGURED))
        if not self._dispatcher.has_email:
            return Failure(error=auth_error(ErrorCode.EMAIL_DELIVERY_NOT_CONFIGURED))

        identifier = Identifier.email(email)
        user = await self._users.find_by_identifier(identifier)
        if user is None and not self._auto_create_user:
            return Failure(error=auth_error(ErrorCode.MAGIC_LINK_EMAIL_NOT_FOUND))

        issued = await self._engine.issue(
            CodeKind.MAGIC_LINK,
            identifier,
            self._policy,
            user_id=user.id if user is not None else None,
            bind_session=self._require_same_browser,
        )
        if issued.session_token is not None:
            context.session[MAGIC_LINK_SESSION_KEY] = issued.session_token

        query = urlencode({"token": issued.plaintext})
        return await self._dispatcher.dispatch(
            DeliveryMessage(
                job=DeliveryJob.EMAIL_MAGIC_LINK,
                to=identifier.value,
                user_id=user.id if user is not None else None,
                url=f"{self._magic_link_url}?{query}",
            ),
            use_queue=self._use_queues,
        )

    async def resend_email_magic_link(
        self, email: str, context: AuthContextProtocol
    ) -> Result[None, AuthenticationError]:
        """Invalidate the pending link and send a new one."""
        return await self.request_email_magic_link(email, context)

    async def verify_email_magic_link(
        self, token: str, context: AuthContextProtocol
    ) -> Result[AuthUser, AuthenticationError]:
        """Redeem a magic link and log the user in.

        Args:
            token: Token from the link.
            context: Caller's auth context (session holds the binding token).

        Returns:
            Success(AuthUser), or Failure with CODE_INVALID, CODE_EXPIRED,
            CODE_MAX_ATTEMPTS, MAGIC_LINK_DIFFERENT_BROWSER or
            MAGIC_LINK_EMAIL_NOT_FOUND.
        """
        verify_result = await self._engine.verify(
            CodeKind.MAGIC_LINK, None, token, self._policy
        )
        if isinstance(verify_result, Failure):
            return verify_result
        record = verify_result.value

        if not self._engine.session_matches(
            record, context.session.get(MAGIC_LINK_SESSION_KEY)
        ):
            await self._engine.record_failure(record)
            return Failure(error=auth_error(ErrorCode.MAGIC_LINK_DIFFERENT_BROWSER))

        consumed = await self._engine.consume(record)
        if isinstance(consumed, Failure):
            return consumed

        user_result = await self._resolve_user(record)
        if isinstance(user_result, Failure):
            return user_result
        user = user_result.value

        if not user.is_email_verified:
            await self._users.mark_email_verified(user)
            user = await self._users.find_by_id(require_user_id(user)) or user

        context.session.pop(MAGIC_LINK_SESSION_KEY, None)

        context.login(user)
        auth_user = await self._tokens.issue(
            user, revoke_existing=self._revoke_existing_tokens
        )
        await self._event_bus.publish(
            UserLoggedIn(user_id=require_user_id(user), method="magic_link")
        )
        return Success(value=auth_user)

    async def _resolve_user(
        self, record: OneTimeCode
    ) -> Result[User, AuthenticationError]:
        if record.user_id is not None:
            user = await self._users.find_by_id(record.user_id)
            if user is not None:
                return Success(value=user)

        user = await self._users.find_by_identifier(record.identifier)
        if user is not None:
            return Success(value=user)

        if not self._auto_create_user:
            return Failure(error=auth_error(ErrorCode.MAGIC_LINK_EMAIL_NOT_FOUND))
        created = await self._users.create_with_email(
            record.identifier.value, verified=True
        )
        return Success(value=created)
