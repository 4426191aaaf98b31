"""Delivery channel adapters."""

from turnstile.infrastructure.delivery.outbox_delivery import (
    OutboxEmailDelivery,
    OutboxPhoneDelivery,
    SentMessage,
)

__all__ = ["OutboxEmailDelivery", "OutboxPhoneDelivery", "SentMessage"]
