"""Verification service: email and phone ownership codes.

Send flow:
1. Require the channel to be configured
2. Require the user to have the identifier, not yet verified
3. Issue a numeric code through the one-time code engine
4. Dispatch it (queued or synchronous per configuration)

Verify flow:
1. Engine verification against (identifier, code)
2. Consume the code; losing a concurrent redemption fails with CODE_INVALID
3. Mark the identifier verified on the owning user

Ownership codes reuse the same codes for account linking, where the
identifier is usually verified already.
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
from turnstile.core.enums import ErrorCode
from turnstile.core.result import Failure, Result, Success
from turnstile.domain.entities.one_time_code import CodeKind
from turnstile.domain.entities.user import User, require_user_id
from turnstile.domain.errors import AuthenticationError, auth_error
from turnstile.domain.protocols import UserStore
from turnstile.domain.value_objects import Identifier, IdentifierKind


class VerificationService:
    """Email and phone verification codes."""

    def __init__(
        self,
        *,
        user_store: UserStore,
        engine: OneTimeCodeEngine,
        dispatcher: DeliveryDispatcher,
        email_policy: CodePolicy,
        phone_policy: CodePolicy,
        verification_url: str,
        use_queues: bool = False,
    ) -> None:
        self._users = user_store
        self._engine = engine
        self._dispatcher = dispatcher
        self._email_policy = email_policy
        self._phone_policy = phone_policy
        self._verification_url = verification_url
        self._use_queues = use_queues

    # ------------------------------------------------------------------
    # Send / resend
    # ------------------------------------------------------------------

    async def send_email_code(self, user: User) -> Result[None, AuthenticationError]:
        """Send an email verification code to the user's email.

        Returns:
            Success(None), or Failure with EMAIL_DELIVERY_NOT_CONFIGURED,
            EMAIL_NOT_SET, EMAIL_ALREADY_VERIFIED or DELIVERY_FAILED.
        """
        if not self._dispatcher.has_email:
            return Failure(error=auth_error(ErrorCode.EMAIL_DELIVERY_NOT_CONFIGURED))
        if not user.email:
            return Failure(error=auth_error(ErrorCode.EMAIL_NOT_SET))
        if user.is_email_verified:
            return Failure(error=auth_error(ErrorCode.EMAIL_ALREADY_VERIFIED))
        return await self._send_email(user, user.email)

    async def send_phone_code(self, user: User) -> Result[None, AuthenticationError]:
        """Send a phone verification code to the user's phone.

        Returns:
            Success(None), or Failure with PHONE_DELIVERY_NOT_CONFIGURED,
            PHONE_NOT_SET, PHONE_ALREADY_VERIFIED or DELIVERY_FAILED.
        """
        if not self._dispatcher.has_phone:
            return Failure(error=auth_error(ErrorCode.PHONE_DELIVERY_NOT_CONFIGURED))
        if not user.phone:
            return Failure(error=auth_error(ErrorCode.PHONE_NOT_SET))
        if user.is_phone_verified:
            return Failure(error=auth_error(ErrorCode.PHONE_ALREADY_VERIFIED))
        return await self._send_phone(user, user.phone)

    async def send_verification_code(
        self, user: User, kind: IdentifierKind
    ) -> Result[None, AuthenticationError]:
        """Send the code matching an identifier kind.

        Usernames and federated identifiers cannot be verified; they succeed
        without sending anything.
        """
        match kind:
            case IdentifierKind.EMAIL:
                return await self.send_email_code(user)
            case IdentifierKind.PHONE:
                return await self.send_phone_code(user)
            case _:
                return Success(value=None)

    async def resend_email_code(self, user: User) -> Result[None, AuthenticationError]:
        """Invalidate the current email code and send a new one."""
        return await self.send_email_code(user)

    async def resend_phone_code(self, user: User) -> Result[None, AuthenticationError]:
        """Invalidate the current phone code and send a new one."""
        return await self.send_phone_code(user)

    # ------------------------------------------------------------------
    # Verify
    # ------------------------------------------------------------------

    async def verify_email_code(
        self, email: str, code: str
    ) -> Result[User, AuthenticationError]:
        """Verify an email code and mark the email verified.

        Args:
            email: Address the code was sent to (from the link or form).
            code: Presented code.

        Returns:
            Success(User) with the refreshed user, or Failure with
            CODE_INVALID, CODE_EXPIRED, CODE_MAX_ATTEMPTS or USER_NOT_FOUND.
        """
        return await self._verify(
            CodeKind.EMAIL_VERIFICATION,
            Identifier.email(email),
            code,
            self._email_policy,
        )

    async def verify_phone_code(
        self, phone: str, code: str
    ) -> Result[User, AuthenticationError]:
        """Verify a phone code and mark the phone verified."""
        return await self._verify(
            CodeKind.PHONE_VERIFICATION,
            Identifier.phone(phone),
            code,
            self._phone_policy,
        )

    # ------------------------------------------------------------------
    # Ownership codes (account linking)
    # ------------------------------------------------------------------

    async def send_ownership_code(
        self, user: User
    ) -> Result[IdentifierKind, AuthenticationError]:
        """Send a code proving control of the user's verified email, else phone.

        Only identifiers the user already verified qualify; an unverified
        email or phone is never used to claim the account.

        Returns:
            Success(kind) naming the channel used, or Failure with
            RESTORATION_DELIVERY_NOT_AVAILABLE when no usable channel exists.
        """
        if user.email and user.is_email_verified and self._dispatcher.has_email:
            sent = await self._send_email(user, user.email)
            kind = IdentifierKind.EMAIL
        elif user.phone and user.is_phone_verified and self._dispatcher.has_phone:
            sent = await self._send_phone(user, user.phone)
            kind = IdentifierKind.PHONE
        else:
            return Failure(
                error=auth_error(ErrorCode.RESTORATION_DELIVERY_NOT_AVAILABLE)
            )

        if isinstance(sent, Failure):
            return sent
        return Success(value=kind)

    async def confirm_ownership_code(
        self, user: User, kind: IdentifierKind, code: str
    ) -> Result[User, AuthenticationError]:
        """Verify an ownership code sent by ``send_ownership_code``."""
        match kind:
            case IdentifierKind.EMAIL if user.email:
                return await self.verify_email_code(user.email, code)
            case IdentifierKind.PHONE if user.phone:
                return await self.verify_phone_code(user.phone, code)
            case _:
                return Failure(error=auth_error(ErrorCode.CODE_INVALID))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _send_email(self, user: User, email: str) -> Result[None, AuthenticationError]:
        identifier = Identifier.email(email)
        issued = await self._engine.issue(
            CodeKind.EMAIL_VERIFICATION,
            identifier,
            self._email_policy,
            user_id=require_user_id(user),
        )
        query = urlencode({"code": issued.plaintext, "email": identifier.value})
        return await self._dispatcher.dispatch(
            DeliveryMessage(
                job=DeliveryJob.EMAIL_VERIFICATION,
                to=identifier.value,
                user_id=user.id,
                code=issued.plaintext,
                url=f"{self._verification_url}?{query}",
            ),
            use_queue=self._use_queues,
        )

    async def _send_phone(self, user: User, phone: str) -> Result[None, AuthenticationError]:
        identifier = Identifier.phone(phone)
        issued = await self._engine.issue(
            CodeKind.PHONE_VERIFICATION,
            identifier,
            self._phone_policy,
            user_id=require_user_id(user),
        )
        return await self._dispatcher.dispatch(
            DeliveryMessage(
                job=DeliveryJob.PHONE_VERIFICATION,
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
            return Failure(error=auth_error(ErrorCode.USER_NOT_FOUND))

        if kind is CodeKind.EMAIL_VERIFICATION:
            await self._users.mark_email_verified(user)
        else:
            await self._users.mark_phone_verified(user)

        refreshed = await self._users.find_by_id(require_user_id(user))
        return Success(value=refreshed if refreshed is not None else user)
