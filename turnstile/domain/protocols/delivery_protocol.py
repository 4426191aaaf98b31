"""Delivery channel protocols (ports).

Channels send the plaintext secret to the user. They raise on transport
failure; the application layer decides whether that failure propagates.
"""

from typing import Protocol

from turnstile.domain.entities.user import User


class EmailDeliveryProtocol(Protocol):
    """Email channel."""

    async def send_verification_email(
        self,
        *,
        to_email: str,
        user: User | None,
        verification_url: str,
        verification_code: str,
    ) -> None:
        """Send an email verification code and link."""
        ...

    async def send_password_reset_email(
        self,
        *,
        to_email: str,
        user: User | None,
        reset_url: str,
        reset_code: str,
    ) -> None:
        """Send a password reset code and link."""
        ...

    async def send_magic_link_email(
        self,
        *,
        to_email: str,
        user: User | None,
        magic_link_url: str,
    ) -> None:
        """Send a passwordless login link."""
        ...


class PhoneDeliveryProtocol(Protocol):
    """SMS channel."""

    async def send_verification_sms(
        self, *, to_phone: str, user: User | None, code: str
    ) -> None:
        """Send a phone verification code."""
        ...

    async def send_password_reset_sms(
        self, *, to_phone: str, user: User | None, code: str
    ) -> None:
        """Send a password reset code."""
        ...
