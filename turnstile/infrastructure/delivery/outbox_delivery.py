"""Outbox delivery channels (development/testing).

Instead of sending, messages are appended to an in-memory outbox and a
metadata-only log line is written. Hosts plug real email/SMS providers in
through EmailDeliveryProtocol / PhoneDeliveryProtocol.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime

from turnstile.domain.entities.user import User
from turnstile.domain.protocols.logger_protocol import LoggerProtocol


@dataclass(frozen=True, slots=True, kw_only=True)
class SentMessage:
    """A message captured by an outbox channel.

    Attributes:
        channel: email or sms.
        template: verification, password_reset or magic_link.
        to: Recipient address or number.
        code: Plaintext code, if the message carries one.
        url: Link, if the message carries one.
        user_id: Recipient user id, if known.
        sent_at: Capture timestamp (UTC).
    """

    channel: str
    template: str
    to: str
    code: str | None = None
    url: str | None = None
    user_id: str | None = None
    sent_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class _Outbox:
    def __init__(self, channel: str, logger: LoggerProtocol) -> None:
        self._channel = channel
        self._logger = logger
        self.sent: list[SentMessage] = []

    def _record(
        self,
        template: str,
        to: str,
        user: User | None,
        *,
        code: str | None = None,
        url: str | None = None,
    ) -> None:
        message = SentMessage(
            channel=self._channel,
            template=template,
            to=to,
            code=code,
            url=url,
            user_id=str(user.id) if user is not None and user.id is not None else None,
        )
        self.sent.append(message)
        self._logger.info(
            "delivery_captured",
            channel=self._channel,
            template=template,
            user_id=message.user_id,
        )

    def last(self, template: str | None = None) -> SentMessage:
        """Most recent message, optionally of one template.

        Raises:
            LookupError: If nothing matching was sent.
        """
        for message in reversed(self.sent):
            if template is None or message.template == template:
                return message
        raise LookupError(f"No {template or 'message'} in {self._channel} outbox")


class OutboxEmailDelivery(_Outbox):
    """EmailDeliveryProtocol adapter writing to an outbox."""

    def __init__(self, logger: LoggerProtocol) -> None:
        super().__init__("email", logger)

    async def send_verification_email(
        self,
        *,
        to_email: str,
        user: User | None,
        verification_url: str,
        verification_code: str,
    ) -> None:
        self._record(
            "verification", to_email, user, code=verification_code, url=verification_url
        )

    async def send_password_reset_email(
        self,
        *,
        to_email: str,
        user: User | None,
        reset_url: str,
        reset_code: str,
    ) -> None:
        self._record("password_reset", to_email, user, code=reset_code, url=reset_url)

    async def send_magic_link_email(
        self,
        *,
        to_email: str,
        user: User | None,
        magic_link_url: str,
    ) -> None:
        self._record("magic_link", to_email, user, url=magic_link_url)


class OutboxPhoneDelivery(_Outbox):
    """PhoneDeliveryProtocol adapter writing to an outbox."""

    def __init__(self, logger: LoggerProtocol) -> None:
        super().__init__("sms", logger)

    async def send_verification_sms(
        self, *, to_phone: str, user: User | None, code: str
    ) -> None:
        self._record("verification", to_phone, user, code=code)

    async def send_password_reset_sms(
        self, *, to_phone: str, user: User | None, code: str
    ) -> None:
        self._record("password_reset", to_phone, user, code=code)
