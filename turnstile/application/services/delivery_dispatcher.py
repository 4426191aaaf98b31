"""Delivery dispatch for one-time codes and links.

Sends the plaintext secret through the configured email/SMS channel, either
synchronously or by enqueuing a delivery job. The code or token has already
been persisted when dispatch runs; a delivery failure never removes it.

Flow:
    1. Check the channel the message needs is configured
    2. Queued: enqueue ``message.job`` with the payload and max retries
    3. Synchronous: ``deliver()`` now; exceptions become DELIVERY_FAILED

Queued delivery requested while no job queue is wired falls back to
synchronous delivery (logged at warning level).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import UUID

from turnstile.core.enums import ErrorCode
from turnstile.core.result import Failure, Result, Success
from turnstile.domain.entities.user import User
from turnstile.domain.errors import AuthenticationError, auth_error
from turnstile.domain.protocols import (
    EmailDeliveryProtocol,
    JobQueueProtocol,
    LoggerProtocol,
    PhoneDeliveryProtocol,
    UserStore,
)


class DeliveryJob(str, Enum):
    """Delivery job names (also the job queue's job names)."""

    EMAIL_VERIFICATION = "send_email_verification"
    PHONE_VERIFICATION = "send_phone_verification"
    EMAIL_PASSWORD_RESET = "send_email_password_reset"
    PHONE_PASSWORD_RESET = "send_phone_password_reset"
    EMAIL_MAGIC_LINK = "send_email_magic_link"

    @property
    def is_email(self) -> bool:
        return self.name.startswith("EMAIL_")


@dataclass(frozen=True, slots=True, kw_only=True)
class DeliveryMessage:
    """A message to deliver.

    Attributes:
        job: What to send.
        to: Email address or phone number.
        user_id: Recipient user, None for magic links to unknown emails.
        code: Plaintext code, for code-bearing messages.
        url: Link, for link-bearing messages.
    """

    job: DeliveryJob
    to: str
    user_id: UUID | None = None
    code: str | None = None
    url: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """JSON-serializable job payload."""
        return {
            "to": self.to,
            "user_id": str(self.user_id) if self.user_id is not None else None,
            "code": self.code,
            "url": self.url,
        }

    @classmethod
    def from_payload(cls, job_name: str, payload: dict[str, Any]) -> "DeliveryMessage":
        """Rebuild a message from a dequeued job.

        Raises:
            ValueError: If the job name is unknown.
            KeyError: If the payload has no recipient.
        """
        user_id = payload.get("user_id")
        return cls(
            job=DeliveryJob(job_name),
            to=payload["to"],
            user_id=UUID(user_id) if user_id else None,
            code=payload.get("code"),
            url=payload.get("url"),
        )


class DeliveryDispatcher:
    """Routes delivery messages to channels, synchronously or through a queue.

    Attributes:
        _email: Email channel, None when email delivery is not configured.
        _phone: SMS channel, None when phone delivery is not configured.
        _queue: Job queue, None when asynchronous delivery is unavailable.
    """

    def __init__(
        self,
        *,
        user_store: UserStore,
        logger: LoggerProtocol,
        email_delivery: EmailDeliveryProtocol | None = None,
        phone_delivery: PhoneDeliveryProtocol | None = None,
        job_queue: JobQueueProtocol | None = None,
        max_retries: int = 3,
    ) -> None:
        self._user_store = user_store
        self._logger = logger
        self._email = email_delivery
        self._phone = phone_delivery
        self._queue = job_queue
        self._max_retries = max_retries

    @property
    def has_email(self) -> bool:
        return self._email is not None

    @property
    def has_phone(self) -> bool:
        return self._phone is not None

    async def dispatch(
        self, message: DeliveryMessage, *, use_queue: bool
    ) -> Result[None, AuthenticationError]:
        """Deliver a message now or enqueue it.

        Args:
            message: Message to send.
            use_queue: Enqueue instead of delivering synchronously.

        Returns:
            Success(None) once delivered or enqueued.
            Failure(EMAIL/PHONE_DELIVERY_NOT_CONFIGURED) if the channel is missing.
            Failure(DELIVERY_FAILED) if the channel or queue raised.
        """
        if message.job.is_email and self._email is None:
            return Failure(error=auth_error(ErrorCode.EMAIL_DELIVERY_NOT_CONFIGURED))
        if not message.job.is_email and self._phone is None:
            return Failure(error=auth_error(ErrorCode.PHONE_DELIVERY_NOT_CONFIGURED))

        if use_queue and self._queue is None:
            self._logger.warning(
                "delivery_queue_unavailable",
                job=message.job.value,
                fallback="synchronous",
            )

        try:
            if use_queue and self._queue is not None:
                await self._queue.enqueue(
                    message.job.value,
                    message.to_payload(),
                    max_retries=self._max_retries,
                )
                self._logger.debug("delivery_enqueued", job=message.job.value)
            else:
                await self.deliver(message)
        except Exception as e:
            self._logger.error(
                "delivery_failed",
                error=e,
                job=message.job.value,
                user_id=str(message.user_id) if message.user_id else None,
            )
            return Failure(
                error=auth_error(ErrorCode.DELIVERY_FAILED, job=message.job.value)
            )

        return Success(value=None)

    async def deliver(self, message: DeliveryMessage) -> None:
        """Send a message through its channel.

        Used for synchronous dispatch and by the delivery job handlers.

        Raises:
            RuntimeError: If the channel is not configured.
            Exception: Whatever the channel raises on transport failure.
        """
        user: User | None = None
        if message.user_id is not None:
            user = await self._user_store.find_by_id(message.user_id)

        match message.job:
            case DeliveryJob.EMAIL_VERIFICATION:
                await self._email_channel().send_verification_email(
                    to_email=message.to,
                    user=user,
                    verification_url=message.url or "",
                    verification_code=message.code or "",
                )
            case DeliveryJob.EMAIL_PASSWORD_RESET:
                await self._email_channel().send_password_reset_email(
                    to_email=message.to,
                    user=user,
                    reset_url=message.url or "",
                    reset_code=message.code or "",
                )
            case DeliveryJob.EMAIL_MAGIC_LINK:
                await self._email_channel().send_magic_link_email(
                    to_email=message.to,
                    user=user,
                    magic_link_url=message.url or "",
                )
            case DeliveryJob.PHONE_VERIFICATION:
                await self._phone_channel().send_verification_sms(
                    to_phone=message.to, user=user, code=message.code or ""
                )
            case DeliveryJob.PHONE_PASSWORD_RESET:
                await self._phone_channel().send_password_reset_sms(
                    to_phone=message.to, user=user, code=message.code or ""
                )

    def _email_channel(self) -> EmailDeliveryProtocol:
        if self._email is None:
            raise RuntimeError("Email delivery is not configured")
        return self._email

    def _phone_channel(self) -> PhoneDeliveryProtocol:
        if self._phone is None:
            raise RuntimeError("Phone delivery is not configured")
        return self._phone
