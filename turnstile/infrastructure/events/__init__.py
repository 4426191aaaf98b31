"""Event bus adapter and handlers."""

from turnstile.infrastructure.events.in_memory_event_bus import InMemoryEventBus
from turnstile.infrastructure.events.logging_event_handler import LoggingEventHandler

__all__ = ["InMemoryEventBus", "LoggingEventHandler"]
