"""Restoration (password reset) service.

Request flow:
1. Find the user by identifier -> RESTORATION_IDENTIFIER_NOT_FOUND
2. Pick the channel: email/phone identifiers use their own medium,
   username/federated identifiers use the preferred channel
3. Issue a numeric reset code and dispatch it

Verify flow:
1. Engine verification against (identifier, code)
2. Consume the code; losing a concurrent redemption fails with CODE_INVALID
3. Hash and set the new password
4. Revoke every refresh token of the user
"""

from urllib.parse import urlencode

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
from turnstile.core.enums import DeliveryChannel, ErrorCode
from turnstile.core.result import Failure, Result, Success
from turnstile.domain.entities.one_time_code import CodeKind
from turnstile.domain.entities.user import User, require_user_id
from turnstile.domain.errors import AuthenticationError, auth_error
from turnstile.domain.events import PasswordRestored
from turnstile.domain.protocols import (
    EventBusProtocol,
    PasswordHashingProtocol,
    UserStore,
)
from turnstile.domain.value_objects import Credential, Identifier, IdentifierKind


class RestorationService:
    """Password reset by email or phone code."""

    def __init__(
        self,
        *,
        user_store: UserStore,
        token_service: TokenService,
        engine: OneTimeCodeEngine,
        dispatcher: DeliveryDispatcher,
        password_hasher: PasswordHashingProtocol,
        event_bus: EventBusProtocol,
        email_policy: CodePolicy,
        phone_policy: CodePolicy,
        reset_url: str,
        preferred_channel: DeliveryChannel = DeliveryChannel.EMAIL,
        use_queues: bool = False,
    ) -> None:
        self._users = user_store
        self._tokens = token_service
        self._engine = engine
        self._dispatcher = dispatcher
        self._hasher = password_hasher
        self._event_bus = event_bus
        self._email_policy = email_policy
        self._phone_policy = phone_policy
        self._reset_url = reset_url
        self._preferred_channel = preferred_channel
        self._use_queues = use_queues

    # ------------------------------------------------------------------
    # Request
    # ------------------------------------------------------------------

    async def request_reset(
        self, identifier: Identifier
    ) -> Result[None, AuthenticationError]:
        """Send a reset code for any identifier kind.

        Returns:
            Success(None), or Failure with RESTORATION_IDENTIFIER_NOT_FOUND,
            RESTORATION_DELIVERY_NOT_AVAILABLE, *_DELIVERY_NOT_CONFIGURED or
            DELIVERY_FAILED.
        """
        user = await self._users.find_by_identifier(identifier)
        if user is None:
            return Failure(error=auth_error(ErrorCode.RESTORATION_IDENTIFIER_NOT_FOUND))

        match identifier.kind:
            case IdentifierKind.EMAIL:
                return await self._send_email(user, identifier)
            case IdentifierKind.PHONE:
                return await self._send_phone(user, identifier)
            case _:
                return await self._send_preferred(user)

    async def request_email_reset(self, email: str) -> Result[None, AuthenticationError]:
        return await self.request_reset(Identifier.email(email))

    async def request_phone_reset(self, phone: str) -> Result[None, AuthenticationError]:
        return await self.request_reset(Identifier.phone(phone))

    async def resend_email_reset(self, email: str) -> Result[None, AuthenticationError]:
        """Invalidate the pending email code and send a new one."""
        return await self.request_email_reset(email)

    async def resend_phone_reset(self, phone: str) -> Result[None, AuthenticationError]:
        """Invalidate the pending phone code and send a new one."""
        return await self.request_phone_reset(phone)

    # ------------------------------------------------------------------
    # Verify
    # ------------------------------------------------------------------

    async def verify_email_reset(
        self, email: str, code: str, new_password: str
    ) -> Result[User, AuthenticationError]:
        """Redeem an email reset code and set a new password.

        Returns:
            Success(User), or Failure with CODE_INVALID, CODE_EXPIRED,
            CODE_MAX_ATTEMPTS or RESTORATION_IDENTIFIER_NOT_FOUND.
        """
        return await self._verify(
            CodeKind.EMAIL_RESET,
            Identifier.email(email),
            code,
            new_password,
            self._email_policy,
        )

    async def verify_phone_reset(
        self, phone: str, code: str, new_password: str
    ) -> Result[User, AuthenticationError]:
        """Redeem a phone reset code and set a new password."""
        return await self._verify(
            CodeKind.PHONE_RESET,
            Identifier.phone(phone),
            code,
            new_password,
            self._phone_policy,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _send_preferred(self, user: User) -> Result[None, AuthenticationError]:
        if self._preferred_channel is DeliveryChannel.EMAIL and user.email:
            return await self._send_email(user, Identifier.email(user.email))
        if self._preferred_channel is DeliveryChannel.PHONE and user.phone:
            return await self._send_phone(user, Identifier.phone(user.phone))
        return Failure(error=auth_error(ErrorCode.RESTORATION_DELIVERY_NOT_AVAILABLE))

    async def _send_email(
        self, user: User, identifier: Identifier
    ) -> Result[None, AuthenticationError]:
        if not self._dispatcher.has_email:
            return Failure(error=auth_error(ErrorCode.EMAIL_DELIVERY_NOT_CONFIGURED))

        issued = await self._engine.issue(
            CodeKind.EMAIL_RESET,
            identifier,
            self._email_policy,
            user_id=require_user_id(user),
        )
        query = urlencode({"code": issued.plaintext, "email": identifier.value})
        return await self._dispatcher.dispatch(
            DeliveryMessage(
                job=DeliveryJob.EMAIL_PASSWORD_RESET,
                to=identifier.value,
                user_id=user.id,
                code=issued.plaintext,
                url=f"{self._reset_url}?{query}",
            ),
            use_queue=self._use_queues,
        )

    async def _send_phone(
        self, user: User, identifier: Identifier
    ) -> Result[None, AuthenticationError]:
        if not self._dispatcher.has_phone:
            return Failure(error=auth_error(ErrorCode.PHONE_DELIVERY_NOT_CONFIGURED))

        issued = await self._engine.issue(
            CodeKind.PHONE_RESET,
            identifier,
            self._phone_policy,
            user_id=require_user_id(user),
        )
        return await self._dispatcher.dispatch(
            DeliveryMessage(
                job=DeliveryJob.PHONE_PASSWORD_RESET,
                to=identifier.value,
                user_id=user.id,
                code=issued.plaintext,
            ),
            use_queue=self._use_queues,
        )

    async def _verify(
        self,
        kind: CodeKind,
        identifier: Identifier,
        code: str,
        new_password: str,
        policy: CodePolicy,
    ) -> Result[User, AuthenticationError]:
        verify_result = await self._engine.verify(kind, identifier, code, policy)
        if isinstance(verify_result, Failure):
            return verify_result
        record = verify_result.value

        consumed = await self._engine.consume(record)
        if isinstance(consumed, Failure):
            return consumed

        user = None
        if record.user_id is not None:
            user = await self._users.find_by_id(record.user_id)
        if user is None:
            user = await self._users.find_by_identifier(identifier)
        if user is None:
            return Failure(error=auth_error(ErrorCode.RESTORATION_IDENTIFIER_NOT_FOUND))

        await self._users.set_password(
            user, Credential.password(self._hasher.hash_password(new_password))
        )
        await self._tokens.revoke(user, reason="password_reset")

        channel = "email" if kind is CodeKind.EMAIL_RESET else "phone"
        await self._event_bus.publish(
            PasswordRestored(user_id=require_user_id(user), channel=channel)
        )
        return Success(value=user)
