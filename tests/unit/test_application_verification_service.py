"""Unit tests for VerificationService.

Tests cover:
- Email code send / resend / verify (c1 superseded by c2)
- Phone code send / verify
- Preconditions (channel configured, identifier set, not yet verified)
- Unverifiable identifier kinds
- Queued delivery
- Ownership codes for account linking
"""

import pytest
import pytest_asyncio

from turnstile.core.enums import ErrorCode
from turnstile.core.result import Failure, Success
from turnstile.domain.value_objects import Identifier, IdentifierKind
from turnstile.infrastructure.jobs import InMemoryJobQueue


@pytest_asyncio.fixture
async def email_user(user_store):
    return await user_store.create(Identifier.email("a@x.com"))


@pytest_asyncio.fixture
async def phone_user(user_store):
    return await user_store.create(Identifier.phone("+1 555 0100"))


@pytest.mark.unit
class TestEmailVerification:
    """Email verification codes."""

    @pytest.mark.asyncio
    async def test_resend_supersedes_previous_code(
        self, services, email_user, email_outbox
    ):
        """Test send c1 -> resend c2 -> c1 fails -> c2 verifies -> c2 fails."""
        # Arrange
        assert isinstance(await services.verification.send_email_code(email_user), Success)
        c1 = email_outbox.last("verification").code
        assert isinstance(
            await services.verification.resend_email_code(email_user), Success
        )
        c2 = email_outbox.last("verification").code

        # Act
        first = await services.verification.verify_email_code("a@x.com", c1)
        second = await services.verification.verify_email_code("a@x.com", c2)
        replay = await services.verification.verify_email_code("a@x.com", c2)

        # Assert
        if c1 != c2:
            assert isinstance(first, Failure)
            assert first.error.code == ErrorCode.CODE_INVALID
        assert isinstance(second, Success)
        assert second.value.is_email_verified is True
        assert isinstance(replay, Failure)
        assert replay.error.code == ErrorCode.CODE_INVALID

    @pytest.mark.asyncio
    async def test_message_carries_code_and_link(
        self, services, email_user, email_outbox
    ):
        await services.verification.send_email_code(email_user)

        message = email_outbox.last("verification")
        assert message.to == "a@x.com"
        assert message.user_id == str(email_user.id)
        assert len(message.code) == 6
        assert message.url.startswith("https://app.example.com/auth/email/verify?")
        assert f"code={message.code}" in message.url
        assert "email=a%40x.com" in message.url

    @pytest.mark.asyncio
    async def test_verify_normalizes_email(self, services, email_user, email_outbox):
        await services.verification.send_email_code(email_user)
        code = email_outbox.last("verification").code

        result = await services.verification.verify_email_code("  A@X.com ", code)

        assert isinstance(result, Success)

    @pytest.mark.asyncio
    async def test_send_requires_email_channel(self, make_services, email_user):
        services = make_services(email_delivery=None)

        result = await services.verification.send_email_code(email_user)

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.EMAIL_DELIVERY_NOT_CONFIGURED

    @pytest.mark.asyncio
    async def test_send_requires_email(self, services, phone_user):
        result = await services.verification.send_email_code(phone_user)

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.EMAIL_NOT_SET

    @pytest.mark.asyncio
    async def test_send_rejects_verified_email(self, services, email_user, user_store):
        await user_store.mark_email_verified(email_user)

        result = await services.verification.send_email_code(email_user)

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.EMAIL_ALREADY_VERIFIED

    @pytest.mark.asyncio
    async def test_wrong_code_then_exhaustion(self, services, email_user, email_outbox):
        await services.verification.send_email_code(email_user)
        code = email_outbox.last("verification").code
        wrong = "000000" if code != "000000" else "111111"
        for _ in range(3):
            await services.verification.verify_email_code("a@x.com", wrong)

        result = await services.verification.verify_email_code("a@x.com", code)

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.CODE_MAX_ATTEMPTS


@pytest.mark.unit
class TestPhoneVerification:
    """SMS verification codes."""

    @pytest.mark.asyncio
    async def test_phone_code_round_trip(self, services, phone_user, sms_outbox):
        await services.verification.send_phone_code(phone_user)
        message = sms_outbox.last("verification")

        result = await services.verification.verify_phone_code(
            "+15550100", message.code
        )

        assert message.to == "+15550100"
        assert isinstance(result, Success)
        assert result.value.is_phone_verified is True
        assert result.value.is_email_verified is False

    @pytest.mark.asyncio
    async def test_send_requires_phone_channel(self, make_services, phone_user):
        services = make_services(phone_delivery=None)

        result = await services.verification.send_phone_code(phone_user)

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.PHONE_DELIVERY_NOT_CONFIGURED

    @pytest.mark.asyncio
    async def test_send_requires_phone(self, services, email_user):
        result = await services.verification.send_phone_code(email_user)

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.PHONE_NOT_SET

    @pytest.mark.asyncio
    async def test_send_rejects_verified_phone(self, services, phone_user, user_store):
        await user_store.mark_phone_verified(phone_user)

        result = await services.verification.send_phone_code(phone_user)

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.PHONE_ALREADY_VERIFIED


@pytest.mark.unit
class TestVerificationDispatch:
    """Kind routing and queued delivery."""

    @pytest.mark.asyncio
    async def test_username_needs_no_verification(
        self, services, user_store, email_outbox, sms_outbox
    ):
        user = await user_store.create(Identifier.username("alice"))

        result = await services.verification.send_verification_code(
            user, IdentifierKind.USERNAME
        )

        assert isinstance(result, Success)
        assert email_outbox.sent == []
        assert sms_outbox.sent == []

    @pytest.mark.asyncio
    async def test_queued_delivery_waits_for_worker(
        self, make_services, make_settings, logger, email_user, email_outbox
    ):
        # Arrange
        queue = InMemoryJobQueue(logger)
        services = make_services(
            settings=make_settings(verification_use_queues=True), job_queue=queue
        )

        # Act
        result = await services.verification.send_email_code(email_user)

        # Assert
        assert isinstance(result, Success)
        assert queue.pending_count == 1
        assert email_outbox.sent == []

        assert await queue.drain() == 1
        message = email_outbox.last("verification")
        assert message.to == "a@x.com"
        verified = await services.verification.verify_email_code("a@x.com", message.code)
        assert isinstance(verified, Success)


@pytest.mark.unit
class TestOwnershipCodes:
    """Ownership proof for account linking."""

    @pytest.mark.asyncio
    async def test_ownership_code_sent_to_verified_email(
        self, services, email_user, user_store, email_outbox
    ):
        await user_store.mark_email_verified(email_user)

        sent = await services.verification.send_ownership_code(email_user)
        code = email_outbox.last("verification").code
        confirmed = await services.verification.confirm_ownership_code(
            email_user, IdentifierKind.EMAIL, code
        )

        assert isinstance(sent, Success)
        assert sent.value is IdentifierKind.EMAIL
        assert isinstance(confirmed, Success)

    @pytest.mark.asyncio
    async def test_ownership_code_falls_back_to_phone(
        self, services, phone_user, user_store, sms_outbox
    ):
        await user_store.mark_phone_verified(phone_user)

        sent = await services.verification.send_ownership_code(phone_user)

        assert isinstance(sent, Success)
        assert sent.value is IdentifierKind.PHONE
        assert sms_outbox.last("verification").to == "+15550100"

    @pytest.mark.asyncio
    async def test_unverified_email_is_skipped_for_verified_phone(
        self, services, user_store, email_outbox, sms_outbox
    ):
        user = await user_store.create_with_phone("+15550001", verified=True)
        await user_store.add_identifier(user, Identifier.email("intruder@x.com"))

        sent = await services.verification.send_ownership_code(user)

        assert isinstance(sent, Success)
        assert sent.value is IdentifierKind.PHONE
        assert email_outbox.sent == []
        assert sms_outbox.last("verification").to == "+15550001"

    @pytest.mark.asyncio
    async def test_unverified_identifiers_only_give_no_channel(
        self, services, email_user, email_outbox
    ):
        sent = await services.verification.send_ownership_code(email_user)

        assert isinstance(sent, Failure)
        assert sent.error.code == ErrorCode.RESTORATION_DELIVERY_NOT_AVAILABLE
        assert email_outbox.sent == []

    @pytest.mark.asyncio
    async def test_ownership_code_needs_a_channel(self, services, user_store):
        user = await user_store.create(Identifier.username("alice"))

        sent = await services.verification.send_ownership_code(user)

        assert isinstance(sent, Failure)
        assert sent.error.code == ErrorCode.RESTORATION_DELIVERY_NOT_AVAILABLE
