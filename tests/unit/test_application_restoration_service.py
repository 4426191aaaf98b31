"""Unit tests for RestorationService (password reset).

Tests cover:
- Email and phone reset round trips
- Reset by username / federated identifier via the preferred channel
- Unknown identifiers and unavailable channels
- Token revocation and event publishing after a reset
"""

import pytest
import pytest_asyncio

from turnstile.core.enums import DeliveryChannel, ErrorCode
from turnstile.core.result import Failure, Success
from turnstile.domain.events import PasswordRestored
from turnstile.domain.value_objects import Credential, Identifier
from turnstile.infrastructure.session.in_memory_auth_context import (
    InMemoryAuthContext,
)


@pytest_asyncio.fixture
async def email_user(user_store, password_hasher):
    return await user_store.create(
        Identifier.email("a@x.com"),
        Credential.password(password_hasher.hash_password("OldPassword1!")),
    )


@pytest.mark.unit
class TestEmailReset:
    """Password reset over email."""

    @pytest.mark.asyncio
    async def test_reset_round_trip(self, services, email_user, email_outbox):
        # Arrange
        requested = await services.restoration.request_email_reset("a@x.com")
        assert isinstance(requested, Success)
        code = email_outbox.last("password_reset").code

        # Act
        result = await services.restoration.verify_email_reset(
            "a@x.com", code, "NewPassword1!"
        )

        # Assert
        assert isinstance(result, Success)
        login = await services.identity.login(
            Identifier.email("a@x.com"), "NewPassword1!", InMemoryAuthContext()
        )
        assert isinstance(login, Success)
        old = await services.identity.login(
            Identifier.email("a@x.com"), "OldPassword1!", InMemoryAuthContext()
        )
        assert isinstance(old, Failure)

    @pytest.mark.asyncio
    async def test_reset_link_uses_reset_path(self, services, email_user, email_outbox):
        await services.restoration.request_email_reset("a@x.com")

        message = email_outbox.last("password_reset")
        assert message.url.startswith(
            "https://app.example.com/auth/password/reset/email/verify?"
        )
        assert f"code={message.code}" in message.url

    @pytest.mark.asyncio
    async def test_reset_revokes_refresh_tokens(self, services, email_user, email_outbox):
        issued = await services.tokens.issue(email_user)
        await services.restoration.request_email_reset("a@x.com")
        code = email_outbox.last("password_reset").code

        await services.restoration.verify_email_reset("a@x.com", code, "NewPassword1!")

        assert isinstance(await services.tokens.refresh(issued.refresh_token), Failure)

    @pytest.mark.asyncio
    async def test_reset_publishes_event(
        self, services, email_user, email_outbox, recorder
    ):
        await services.restoration.request_email_reset("a@x.com")
        code = email_outbox.last("password_reset").code

        await services.restoration.verify_email_reset("a@x.com", code, "NewPassword1!")

        restored = recorder.of_type(PasswordRestored)
        assert len(restored) == 1
        assert restored[0].user_id == email_user.id
        assert restored[0].channel == "email"

    @pytest.mark.asyncio
    async def test_wrong_code_keeps_password(
        self, services, email_user, email_outbox, user_store
    ):
        await services.restoration.request_email_reset("a@x.com")
        code = email_outbox.last("password_reset").code
        wrong = "000000" if code != "000000" else "111111"
        original_hash = email_user.password_hash

        result = await services.restoration.verify_email_reset(
            "a@x.com", wrong, "NewPassword1!"
        )

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.CODE_INVALID
        assert (await user_store.find_by_id(email_user.id)).password_hash == original_hash

    @pytest.mark.asyncio
    async def test_unknown_email(self, services, email_outbox):
        result = await services.restoration.request_email_reset("nobody@x.com")

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.RESTORATION_IDENTIFIER_NOT_FOUND
        assert email_outbox.sent == []

    @pytest.mark.asyncio
    async def test_missing_email_channel(self, make_services, email_user):
        services = make_services(email_delivery=None)

        result = await services.restoration.request_email_reset("a@x.com")

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.EMAIL_DELIVERY_NOT_CONFIGURED


@pytest.mark.unit
class TestPhoneReset:
    """Password reset over SMS."""

    @pytest.mark.asyncio
    async def test_reset_round_trip(self, services, user_store, sms_outbox, recorder):
        user = await user_store.create(Identifier.phone("+15550100"))
        await services.restoration.request_phone_reset("+1 555 0100")
        code = sms_outbox.last("password_reset").code

        result = await services.restoration.verify_phone_reset(
            "+15550100", code, "NewPassword1!"
        )

        assert isinstance(result, Success)
        assert result.value.id == user.id
        assert result.value.password_hash is not None
        assert recorder.of_type(PasswordRestored)[0].channel == "phone"

    @pytest.mark.asyncio
    async def test_resend_invalidates_previous_code(
        self, services, user_store, sms_outbox
    ):
        await user_store.create(Identifier.phone("+15550100"))
        await services.restoration.request_phone_reset("+15550100")
        first = sms_outbox.last("password_reset").code
        await services.restoration.resend_phone_reset("+15550100")
        second = sms_outbox.last("password_reset").code

        stale = await services.restoration.verify_phone_reset(
            "+15550100", first, "NewPassword1!"
        )
        fresh = await services.restoration.verify_phone_reset(
            "+15550100", second, "NewPassword1!"
        )

        if first != second:
            assert isinstance(stale, Failure)
        assert isinstance(fresh, Success)


@pytest.mark.unit
class TestPreferredChannel:
    """Reset requested with an identifier that cannot receive messages."""

    @pytest.mark.asyncio
    async def test_username_reset_goes_to_email(
        self, services, user_store, email_outbox
    ):
        user = await user_store.create(Identifier.username("alice"))
        await user_store.add_identifier(user, Identifier.email("alice@x.com"))

        result = await services.restoration.request_reset(Identifier.username("alice"))

        assert isinstance(result, Success)
        assert email_outbox.last("password_reset").to == "alice@x.com"

    @pytest.mark.asyncio
    async def test_username_reset_goes_to_phone_when_preferred(
        self, make_services, make_settings, user_store, sms_outbox
    ):
        services = make_services(
            settings=make_settings(
                restoration_preferred_delivery=DeliveryChannel.PHONE
            )
        )
        user = await user_store.create(Identifier.username("alice"))
        await user_store.add_identifier(user, Identifier.phone("+15550100"))

        result = await services.restoration.request_reset(Identifier.username("alice"))

        assert isinstance(result, Success)
        assert sms_outbox.last("password_reset").to == "+15550100"

    @pytest.mark.asyncio
    async def test_username_without_preferred_channel(self, services, user_store):
        await user_store.create(Identifier.username("alice"))

        result = await services.restoration.request_reset(Identifier.username("alice"))

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.RESTORATION_DELIVERY_NOT_AVAILABLE
