"""In-memory event bus implementation.

Implements EventBusProtocol for a single process. Handlers are looked up
along the event's class hierarchy, so a handler subscribed to
``DomainEvent`` receives every authentication event.

Architecture:
    - Registry keyed by event class
    - Handlers of one publish run concurrently (asyncio.gather)
    - Fail-open: a failing handler is logged, the others still run
"""

import asyncio
from collections import defaultdict

from turnstile.domain.events.base_event import DomainEvent
from turnstile.domain.protocols.event_bus_protocol import EventHandler
from turnstile.domain.protocols.logger_protocol import LoggerProtocol


class InMemoryEventBus:
    """Process-local publish/subscribe.

    Thread Safety:
        NOT thread-safe (single event loop).

    Usage:
        bus = InMemoryEventBus(logger=get_logger())
        bus.subscribe(RefreshTokenReuseDetected, alert_security_team)
        bus.subscribe(DomainEvent, write_audit_trail)
        await bus.publish(RefreshTokenReuseDetected(user_id=..., token_id=...))
    """

    def __init__(self, logger: LoggerProtocol) -> None:
        self._handlers: defaultdict[type[DomainEvent], list[EventHandler]] = (
            defaultdict(list)
        )
        self._logger = logger

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        """Register ``handler`` for ``event_type`` and its subclasses."""
        self._handlers[event_type].append(handler)

    def handlers_for(self, event_type: type[DomainEvent]) -> list[EventHandler]:
        """Handlers receiving ``event_type``, most specific subscription first."""
        return [
            handler
            for cls in event_type.__mro__
            if cls in self._handlers
            for handler in self._handlers[cls]
        ]

    async def publish(self, event: DomainEvent) -> None:
        """Deliver ``event`` to every matching handler. Never raises."""
        handlers = self.handlers_for(type(event))
        if not handlers:
            return

        event_name = type(event).__name__
        self._logger.debug(
            "event_publishing",
            event_type=event_name,
            event_id=str(event.event_id),
            handler_count=len(handlers),
        )

        outcomes = await asyncio.gather(
            *(handler(event) for handler in handlers), return_exceptions=True
        )
        for handler, outcome in zip(handlers, outcomes, strict=True):
            if isinstance(outcome, Exception):
                self._logger.warning(
                    "event_handler_failed",
                    event_type=event_name,
                    event_id=str(event.event_id),
                    handler_name=getattr(handler, "__qualname__", repr(handler)),
                    error_type=type(outcome).__name__,
                    error_message=str(outcome),
                )
