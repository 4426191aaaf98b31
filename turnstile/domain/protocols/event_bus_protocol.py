"""Event bus protocol (port) for domain events.

Architecture:
    - Protocol (structural typing, NOT ABC inheritance)
    - Domain layer defines the interface (port)
    - Infrastructure provides the adapter (InMemoryEventBus)

Key Requirements:
    1. Fail-open: one handler failure must NOT prevent other handlers from
       executing, and must never reach the publisher.
    2. Async handlers.
    3. No ordering guarantees between handlers.
    4. Subscribing to a base class receives every subclass event.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from turnstile.domain.events.base_event import DomainEvent

# Type alias for event handler functions
EventHandler = Callable[[DomainEvent], Awaitable[None]]


class EventBusProtocol(Protocol):
    """Protocol for event bus implementations."""

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        """Register an async handler for an event type and its subclasses."""
        ...

    async def publish(self, event: DomainEvent) -> None:
        """Publish an event to every handler registered for its type.

        Never raises: handler errors are logged by the implementation.
        """
        ...
