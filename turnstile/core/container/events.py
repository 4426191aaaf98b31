"""Event bus dependency factory.

Application-scoped singleton for domain event publishing. The logging
handler is subscribed to every event type at construction.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from turnstile.core.container.infrastructure import get_logger

if TYPE_CHECKING:
    from turnstile.domain.protocols.event_bus_protocol import EventBusProtocol


@lru_cache()
def get_event_bus() -> "EventBusProtocol":
    """Get event bus singleton (app-scoped).

    Returns:
        Event bus implementing EventBusProtocol.

    Usage:
        event_bus = get_event_bus()
        await event_bus.publish(UserRegistered(...))
    """
    from turnstile.infrastructure.events.in_memory_event_bus import InMemoryEventBus
    from turnstile.infrastructure.events.logging_event_handler import (
        LoggingEventHandler,
    )

    logger = get_logger()
    event_bus = InMemoryEventBus(logger=logger)
    LoggingEventHandler(logger=logger).subscribe_all(event_bus)
    return event_bus
