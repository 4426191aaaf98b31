"""Unit tests for IdentityService.

Tests cover:
- Registration by email, phone and username
- Duplicate identifiers and unsupported identifier kinds
- Best-effort verification delivery during registration
- Password login errors per identifier kind
- Verified-identifier requirement
- Logout (idempotent) and access token authentication
"""

import pytest

from turnstile.core.enums import ErrorCode
from turnstile.core.result import Failure, Success
from turnstile.domain.events import UserLoggedIn, UserLoggedOut, UserRegistered
from turnstile.domain.value_objects import Identifier
from turnstile.infrastructure.session.in_memory_auth_context import (
    InMemoryAuthContext,
)

PASSWORD = "CorrectHorse1!"


@pytest.mark.unit
class TestRegister:
    """Password registration."""

    @pytest.mark.asyncio
    async def test_register_email_user(self, services, email_outbox, recorder):
        # Act
        result = await services.identity.register(Identifier.email("A@X.com"), PASSWORD)

        # Assert
        assert isinstance(result, Success)
        user = result.value
        assert user.email == "a@x.com"
        assert user.password_hash is not None
        assert user.password_hash != PASSWORD
        assert user.is_email_verified is False
        assert email_outbox.last("verification").to == "a@x.com"
        registered = recorder.of_type(UserRegistered)
        assert [e.identifier_kind for e in registered] == ["email"]

    @pytest.mark.asyncio
    async def test_register_phone_user_sends_sms(self, services, sms_outbox):
        result = await services.identity.register(Identifier.phone("+15550100"), PASSWORD)

        assert isinstance(result, Success)
        assert sms_outbox.last("verification").to == "+15550100"

    @pytest.mark.asyncio
    async def test_register_username_sends_nothing(
        self, services, email_outbox, sms_outbox
    ):
        result = await services.identity.register(Identifier.username("alice"), PASSWORD)

        assert isinstance(result, Success)
        assert email_outbox.sent == []
        assert sms_outbox.sent == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("identifier", "code"),
        [
            (Identifier.email("a@x.com"), ErrorCode.EMAIL_ALREADY_REGISTERED),
            (Identifier.phone("+15550100"), ErrorCode.PHONE_ALREADY_REGISTERED),
            (Identifier.username("alice"), ErrorCode.USERNAME_ALREADY_REGISTERED),
        ],
    )
    async def test_register_duplicate(self, services, identifier, code):
        await services.identity.register(identifier, PASSWORD)

        result = await services.identity.register(identifier, PASSWORD)

        assert isinstance(result, Failure)
        assert result.error.code == code

    @pytest.mark.asyncio
    async def test_register_federated_identifier_rejected(self, services):
        result = await services.identity.register(
            Identifier.federated("github", "42"), PASSWORD
        )

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.IDENTIFIER_NOT_SPECIFIED

    @pytest.mark.asyncio
    async def test_register_succeeds_when_verification_cannot_be_sent(
        self, make_services, logger, user_store
    ):
        """Test delivery failure is logged, not propagated."""
        # Arrange
        services = make_services(email_delivery=None)

        # Act
        result = await services.identity.register(Identifier.email("a@x.com"), PASSWORD)

        # Assert
        assert isinstance(result, Success)
        assert user_store.user_count() == 1
        messages = [c.args[0] for c in logger.warning.call_args_list]
        assert "registration_verification_not_sent" in messages


@pytest.mark.unit
class TestLogin:
    """Password login."""

    @pytest.mark.asyncio
    async def test_login_issues_tokens_and_sets_context(self, services, recorder):
        await services.identity.register(Identifier.email("a@x.com"), PASSWORD)
        context = InMemoryAuthContext()

        result = await services.identity.login(
            Identifier.email("a@x.com"), PASSWORD, context
        )

        assert isinstance(result, Success)
        assert result.value.token_type == "Bearer"
        assert context.user is not None
        assert context.user.email == "a@x.com"
        assert [e.method for e in recorder.of_type(UserLoggedIn)] == ["password"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("identifier", "code"),
        [
            (Identifier.email("a@x.com"), ErrorCode.INVALID_EMAIL_OR_PASSWORD),
            (Identifier.phone("+15550100"), ErrorCode.INVALID_PHONE_OR_PASSWORD),
            (Identifier.username("alice"), ErrorCode.INVALID_USERNAME_OR_PASSWORD),
        ],
    )
    async def test_unknown_identifier(self, services, identifier, code):
        result = await services.identity.login(
            identifier, PASSWORD, InMemoryAuthContext()
        )

        assert isinstance(result, Failure)
        assert result.error.code == code

    @pytest.mark.asyncio
    async def test_wrong_password(self, services):
        await services.identity.register(Identifier.email("a@x.com"), PASSWORD)
        context = InMemoryAuthContext()

        result = await services.identity.login(
            Identifier.email("a@x.com"), "wrong", context
        )

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.INVALID_EMAIL_OR_PASSWORD
        assert context.user is None

    @pytest.mark.asyncio
    async def test_passwordless_user_cannot_use_password(self, services, user_store):
        await user_store.create_with_email("a@x.com", verified=True)

        result = await services.identity.login(
            Identifier.email("a@x.com"), PASSWORD, InMemoryAuthContext()
        )

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.PASSWORD_NOT_SET

    @pytest.mark.asyncio
    async def test_federated_identifier_rejected(self, services):
        result = await services.identity.login(
            Identifier.federated("github", "42"), PASSWORD, InMemoryAuthContext()
        )

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.IDENTIFIER_NOT_SPECIFIED

    @pytest.mark.asyncio
    async def test_unverified_email_rejected_when_required(
        self, make_services, make_settings
    ):
        services = make_services(settings=make_settings(require_verified_identifier=True))
        await services.identity.register(Identifier.email("a@x.com"), PASSWORD)

        result = await services.identity.login(
            Identifier.email("a@x.com"), PASSWORD, InMemoryAuthContext()
        )

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.EMAIL_NOT_VERIFIED

    @pytest.mark.asyncio
    async def test_unverified_phone_rejected_when_required(
        self, make_services, make_settings
    ):
        services = make_services(settings=make_settings(require_verified_identifier=True))
        await services.identity.register(Identifier.phone("+15550100"), PASSWORD)

        result = await services.identity.login(
            Identifier.phone("+15550100"), PASSWORD, InMemoryAuthContext()
        )

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.PHONE_NOT_VERIFIED

    @pytest.mark.asyncio
    async def test_verified_email_accepted_when_required(
        self, make_services, make_settings, email_outbox
    ):
        services = make_services(settings=make_settings(require_verified_identifier=True))
        await services.identity.register(Identifier.email("a@x.com"), PASSWORD)
        code = email_outbox.last("verification").code
        await services.verification.verify_email_code("a@x.com", code)

        result = await services.identity.login(
            Identifier.email("a@x.com"), PASSWORD, InMemoryAuthContext()
        )

        assert isinstance(result, Success)


@pytest.mark.unit
class TestLogoutAndAuthenticate:
    """Logout and access token resolution."""

    @pytest.mark.asyncio
    async def test_logout_revokes_tokens(self, services, recorder):
        await services.identity.register(Identifier.email("a@x.com"), PASSWORD)
        context = InMemoryAuthContext()
        login = await services.identity.login(
            Identifier.email("a@x.com"), PASSWORD, context
        )

        await services.identity.logout(context)

        assert context.user is None
        assert isinstance(await services.tokens.refresh(login.value.refresh_token), Failure)
        assert len(recorder.of_type(UserLoggedOut)) == 1

    @pytest.mark.asyncio
    async def test_logout_is_idempotent(self, services):
        await services.identity.register(Identifier.email("a@x.com"), PASSWORD)
        context = InMemoryAuthContext()
        await services.identity.login(Identifier.email("a@x.com"), PASSWORD, context)

        await services.identity.logout(context)
        await services.identity.logout(context)

        assert context.user is None

    @pytest.mark.asyncio
    async def test_logout_with_user_without_tokens(self, services, user_store):
        user = await user_store.create(Identifier.email("a@x.com"))
        context = InMemoryAuthContext()
        context.login(user)

        await services.identity.logout(context)

        assert context.user is None

    @pytest.mark.asyncio
    async def test_authenticate_resolves_user(self, services):
        await services.identity.register(Identifier.email("a@x.com"), PASSWORD)
        login = await services.identity.login(
            Identifier.email("a@x.com"), PASSWORD, InMemoryAuthContext()
        )

        result = await services.identity.authenticate(login.value.access_token)

        assert isinstance(result, Success)
        assert result.value.email == "a@x.com"

    @pytest.mark.asyncio
    async def test_authenticate_rejects_garbage(self, services):
        result = await services.identity.authenticate("garbage")

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.ACCESS_TOKEN_INVALID
