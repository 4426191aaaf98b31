"""Logging event handler for domain events.

Writes every authentication event through the structured logger.

Log Levels:
    - INFO: normal lifecycle events
    - WARNING: security-relevant rejections (reuse detection, rejected codes)

Structured Fields:
    - event_type: Event class name
    - event_id / occurred_at: correlation and ordering
    - every event attribute (events never carry secrets)
"""

from dataclasses import fields
from typing import Any

from turnstile.domain.events import (
    ALL_EVENT_TYPES,
    DomainEvent,
    OneTimeCodeRejected,
    RefreshTokenReuseDetected,
)
from turnstile.domain.protocols.event_bus_protocol import EventBusProtocol
from turnstile.domain.protocols.logger_protocol import LoggerProtocol

_WARNING_EVENTS: tuple[type[DomainEvent], ...] = (
    RefreshTokenReuseDetected,
    OneTimeCodeRejected,
)


class LoggingEventHandler:
    """Event handler for structured logging of domain events.

    Example:
        handler = LoggingEventHandler(logger=get_logger())
        handler.subscribe_all(event_bus)
    """

    def __init__(self, logger: LoggerProtocol) -> None:
        self._logger = logger

    def subscribe_all(self, event_bus: EventBusProtocol) -> None:
        """Subscribe ``handle`` to every authentication event type."""
        for event_type in ALL_EVENT_TYPES:
            event_bus.subscribe(event_type, self.handle)

    async def handle(self, event: DomainEvent) -> None:
        """Log one event at INFO, or WARNING for security rejections."""
        context: dict[str, Any] = {
            "event_type": type(event).__name__,
            "event_id": str(event.event_id),
            "occurred_at": event.occurred_at.isoformat(),
        }
        for f in fields(event):
            if f.name in ("event_id", "occurred_at"):
                continue
            value = getattr(event, f.name)
            context[f.name] = value if isinstance(value, (int, type(None))) else str(value)

        if isinstance(event, _WARNING_EVENTS):
            self._logger.warning("auth_event", **context)
        else:
            self._logger.info("auth_event", **context)
