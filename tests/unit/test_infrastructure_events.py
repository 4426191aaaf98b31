"""Unit tests for InMemoryEventBus and LoggingEventHandler.

Tests cover:
- Subscribe/publish basic flow
- Sibling event types are isolated
- Base-class subscriptions receive every event
- Handler failure doesn't break others (fail-open)
- No handlers registered (no-op)
- Log level selection per event type

Architecture:
- Unit tests with mocked logger
"""

from unittest.mock import MagicMock

import pytest
from uuid_extensions import uuid7

from turnstile.domain.events import (
    ALL_EVENT_TYPES,
    DomainEvent,
    OneTimeCodeRejected,
    RefreshTokenReuseDetected,
    UserLoggedIn,
    UserLoggedOut,
)
from turnstile.infrastructure.events import InMemoryEventBus, LoggingEventHandler


@pytest.mark.unit
class TestInMemoryEventBus:
    """Publish/subscribe behavior."""

    @pytest.mark.asyncio
    async def test_publish_reaches_every_handler(self):
        # Arrange
        event_bus = InMemoryEventBus(logger=MagicMock())
        received: list[str] = []

        async def first(event: DomainEvent) -> None:
            received.append("first")

        async def second(event: DomainEvent) -> None:
            received.append("second")

        event_bus.subscribe(UserLoggedIn, first)
        event_bus.subscribe(UserLoggedIn, second)

        # Act
        await event_bus.publish(UserLoggedIn(user_id=uuid7(), method="password"))

        # Assert
        assert sorted(received) == ["first", "second"]

    @pytest.mark.asyncio
    async def test_sibling_event_types_are_isolated(self):
        event_bus = InMemoryEventBus(logger=MagicMock())
        received: list[DomainEvent] = []

        async def handler(event: DomainEvent) -> None:
            received.append(event)

        event_bus.subscribe(UserLoggedOut, handler)

        await event_bus.publish(UserLoggedIn(user_id=uuid7(), method="password"))

        assert received == []

    @pytest.mark.asyncio
    async def test_base_class_subscription_receives_all(self):
        event_bus = InMemoryEventBus(logger=MagicMock())
        received: list[str] = []

        async def specific(event: DomainEvent) -> None:
            received.append("specific")

        async def audit(event: DomainEvent) -> None:
            received.append("audit")

        event_bus.subscribe(DomainEvent, audit)
        event_bus.subscribe(UserLoggedIn, specific)

        await event_bus.publish(UserLoggedIn(user_id=uuid7(), method="password"))
        await event_bus.publish(UserLoggedOut(user_id=uuid7()))

        assert sorted(received) == ["audit", "audit", "specific"]
        assert event_bus.handlers_for(UserLoggedIn) == [specific, audit]

    @pytest.mark.asyncio
    async def test_no_handlers_is_noop(self):
        logger = MagicMock()
        event_bus = InMemoryEventBus(logger=logger)

        await event_bus.publish(UserLoggedOut(user_id=uuid7()))

        logger.debug.assert_not_called()

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_block_others(self):
        """Test fail-open: one broken handler, the rest still run."""
        # Arrange
        logger = MagicMock()
        event_bus = InMemoryEventBus(logger=logger)
        received: list[DomainEvent] = []

        async def broken(event: DomainEvent) -> None:
            raise RuntimeError("handler exploded")

        async def working(event: DomainEvent) -> None:
            received.append(event)

        event_bus.subscribe(UserLoggedOut, broken)
        event_bus.subscribe(UserLoggedOut, working)
        event = UserLoggedOut(user_id=uuid7())

        # Act
        await event_bus.publish(event)

        # Assert
        assert received == [event]
        logger.warning.assert_called_once()
        args, kwargs = logger.warning.call_args
        assert args[0] == "event_handler_failed"
        assert kwargs["handler_name"].endswith("broken")
        assert kwargs["error_type"] == "RuntimeError"
        assert kwargs["error_message"] == "handler exploded"


@pytest.mark.unit
class TestLoggingEventHandler:
    """Structured logging of authentication events."""

    def test_subscribe_all_registers_every_event_type(self):
        event_bus = MagicMock()
        handler = LoggingEventHandler(logger=MagicMock())

        handler.subscribe_all(event_bus)

        subscribed = [c.args[0] for c in event_bus.subscribe.call_args_list]
        assert subscribed == list(ALL_EVENT_TYPES)

    @pytest.mark.asyncio
    async def test_lifecycle_event_logged_at_info(self):
        logger = MagicMock()
        user_id = uuid7()
        event = UserLoggedIn(user_id=user_id, method="magic_link")

        await LoggingEventHandler(logger=logger).handle(event)

        logger.info.assert_called_once()
        args, kwargs = logger.info.call_args
        assert args[0] == "auth_event"
        assert kwargs["event_type"] == "UserLoggedIn"
        assert kwargs["event_id"] == str(event.event_id)
        assert kwargs["occurred_at"] == event.occurred_at.isoformat()
        assert kwargs["user_id"] == str(user_id)
        assert kwargs["method"] == "magic_link"
        logger.warning.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "event",
        [
            RefreshTokenReuseDetected(user_id=uuid7(), token_id=uuid7()),
            OneTimeCodeRejected(
                kind="email_verification", identifier=None, reason="invalid"
            ),
        ],
    )
    async def test_security_events_logged_at_warning(self, event):
        logger = MagicMock()

        await LoggingEventHandler(logger=logger).handle(event)

        logger.warning.assert_called_once()
        assert logger.warning.call_args.kwargs["event_type"] == type(event).__name__
        logger.info.assert_not_called()

    @pytest.mark.asyncio
    async def test_none_values_kept_as_none(self):
        logger = MagicMock()
        event = OneTimeCodeRejected(kind="magic_link", identifier=None, reason="expired")

        await LoggingEventHandler(logger=logger).handle(event)

        assert logger.warning.call_args.kwargs["identifier"] is None
