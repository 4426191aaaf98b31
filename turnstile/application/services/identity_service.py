"""Identity service: password registration, login, logout.

Registration flow:
1. Require an email, phone or username identifier
2. Reject identifiers that are already registered
3. Hash the password and create the user
4. Send a verification code best-effort: the Result is logged and dropped,
   registration succeeds even when delivery fails

Login flow:
1. Find the user (unknown -> kind-specific invalid credentials)
2. Require a password credential and check it
3. Optionally require the login identifier to be verified
4. Log in the auth context and issue tokens, revoking existing ones
"""

from turnstile.application.dtos import AuthUser
from turnstile.application.services.token_service import TokenService
from turnstile.application.services.verification_service import VerificationService
from turnstile.core.enums import ErrorCode
from turnstile.core.result import Failure, Result, Success
from turnstile.domain.entities.user import User, require_user_id
from turnstile.domain.errors import AuthenticationError, auth_error
from turnstile.domain.events import UserLoggedIn, UserLoggedOut, UserRegistered
from turnstile.domain.protocols import (
    AuthContextProtocol,
    EventBusProtocol,
    LoggerProtocol,
    PasswordHashingProtocol,
    UserStore,
)
from turnstile.domain.value_objects import Credential, Identifier, IdentifierKind

_ALREADY_REGISTERED = {
    IdentifierKind.EMAIL: ErrorCode.EMAIL_ALREADY_REGISTERED,
    IdentifierKind.PHONE: ErrorCode.PHONE_ALREADY_REGISTERED,
    IdentifierKind.USERNAME: ErrorCode.USERNAME_ALREADY_REGISTERED,
}

_INVALID_CREDENTIALS = {
    IdentifierKind.EMAIL: ErrorCode.INVALID_EMAIL_OR_PASSWORD,
    IdentifierKind.PHONE: ErrorCode.INVALID_PHONE_OR_PASSWORD,
    IdentifierKind.USERNAME: ErrorCode.INVALID_USERNAME_OR_PASSWORD,
}


class IdentityService:
    """Password-based account lifecycle."""

    def __init__(
        self,
        *,
        user_store: UserStore,
        token_service: TokenService,
        verification_service: VerificationService,
        password_hasher: PasswordHashingProtocol,
        event_bus: EventBusProtocol,
        logger: LoggerProtocol,
        require_verified_identifier: bool = False,
    ) -> None:
        self._users = user_store
        self._tokens = token_service
        self._verification = verification_service
        self._hasher = password_hasher
        self._event_bus = event_bus
        self._logger = logger
        self._require_verified_identifier = require_verified_identifier

    async def register(
        self, identifier: Identifier, password: str
    ) -> Result[User, AuthenticationError]:
        """Register a user with a password.

        Args:
            identifier: Email, phone or username.
            password: Plaintext password (policy validated by the host).

        Returns:
            Success(User), or Failure with IDENTIFIER_NOT_SPECIFIED or
            *_ALREADY_REGISTERED.
        """
        if identifier.kind not in _ALREADY_REGISTERED:
            return Failure(error=auth_error(ErrorCode.IDENTIFIER_NOT_SPECIFIED))

        if await self._users.find_by_identifier(identifier) is not None:
            return Failure(error=auth_error(_ALREADY_REGISTERED[identifier.kind]))

        user = await self._users.create(
            identifier, Credential.password(self._hasher.hash_password(password))
        )
        user_id = require_user_id(user)
        await self._event_bus.publish(
            UserRegistered(user_id=user_id, identifier_kind=identifier.kind.value)
        )

        sent = await self._verification.send_verification_code(user, identifier.kind)
        if isinstance(sent, Failure):
            self._logger.warning(
                "registration_verification_not_sent",
                user_id=str(user_id),
                error_code=sent.error.code.value,
            )

        return Success(value=user)

    async def login(
        self,
        identifier: Identifier,
        password: str,
        context: AuthContextProtocol,
    ) -> Result[AuthUser, AuthenticationError]:
        """Authenticate with identifier and password and issue tokens.

        Returns:
            Success(AuthUser), or Failure with IDENTIFIER_NOT_SPECIFIED,
            INVALID_*_OR_PASSWORD, PASSWORD_NOT_SET or *_NOT_VERIFIED.
        """
        invalid_code = _INVALID_CREDENTIALS.get(identifier.kind)
        if invalid_code is None:
            return Failure(error=auth_error(ErrorCode.IDENTIFIER_NOT_SPECIFIED))

        user = await self._users.find_by_identifier(identifier)
        if user is None:
            return Failure(error=auth_error(invalid_code))

        if user.password_hash is None:
            return Failure(error=auth_error(ErrorCode.PASSWORD_NOT_SET))

        if not self._hasher.verify_password(password, user.password_hash):
            return Failure(error=auth_error(invalid_code))

        if self._require_verified_identifier:
            if identifier.kind is IdentifierKind.EMAIL and not user.is_email_verified:
                return Failure(error=auth_error(ErrorCode.EMAIL_NOT_VERIFIED))
            if identifier.kind is IdentifierKind.PHONE and not user.is_phone_verified:
                return Failure(error=auth_error(ErrorCode.PHONE_NOT_VERIFIED))

        context.login(user)
        auth_user = await self._tokens.issue(user, revoke_existing=True)
        await self._event_bus.publish(
            UserLoggedIn(user_id=require_user_id(user), method="password")
        )
        return Success(value=auth_user)

    async def logout(self, context: AuthContextProtocol) -> None:
        """Revoke the current user's refresh tokens and clear the context.

        Idempotent: logging out without a user or without tokens is a no-op.
        """
        user = context.user
        if user is None:
            return

        await self._tokens.revoke(user, reason="logout")
        context.logout()
        if user.id is not None:
            await self._event_bus.publish(UserLoggedOut(user_id=user.id))

    async def authenticate(
        self, access_token: str
    ) -> Result[User, AuthenticationError]:
        """Resolve the user behind an access token.

        Returns:
            Success(User), or Failure with ACCESS_TOKEN_INVALID,
            ACCESS_TOKEN_EXPIRED or USER_NOT_FOUND.
        """
        claims_result = self._tokens.verify_access_token(access_token)
        if isinstance(claims_result, Failure):
            return claims_result

        user = await self._users.find_by_id(claims_result.value.subject)
        if user is None:
            return Failure(error=auth_error(ErrorCode.USER_NOT_FOUND))
        return Success(value=user)
