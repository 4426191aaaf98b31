"""Shared fixtures for the turnstile test suite.

Services are wired with the in-memory adapters, the outbox delivery
channels and a real JWT signer. The event bus is real and every published
event is captured by an ``EventRecorder``.
"""

from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest

from turnstile.core.config import Settings
from turnstile.core.container import AuthServices, build_auth_services
from turnstile.domain.events import ALL_EVENT_TYPES, DomainEvent
from turnstile.domain.value_objects import LinkingDisabled
from turnstile.infrastructure.delivery.outbox_delivery import (
    OutboxEmailDelivery,
    OutboxPhoneDelivery,
)
from turnstile.infrastructure.events.in_memory_event_bus import InMemoryEventBus
from turnstile.infrastructure.persistence import (
    InMemoryCodeStore,
    InMemoryTokenStore,
    InMemoryUserStore,
)
from turnstile.infrastructure.security.bcrypt_password_service import (
    BcryptPasswordService,
)
from turnstile.infrastructure.security.jwt_service import JWTService
from turnstile.infrastructure.security.random_generator import SecureRandomGenerator

TEST_JWT_SECRET = "test-secret-key-with-at-least-32-characters"


class EventRecorder:
    """Collects every event published on a bus."""

    def __init__(self, event_bus: InMemoryEventBus) -> None:
        self.events: list[DomainEvent] = []
        for event_type in ALL_EVENT_TYPES:
            event_bus.subscribe(event_type, self._record)

    async def _record(self, event: DomainEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: type[DomainEvent]) -> list[Any]:
        return [e for e in self.events if isinstance(e, event_type)]


def _build_settings(**overrides: Any) -> Settings:
    """Build Settings without reading a .env file."""
    values: dict[str, Any] = {
        "jwt_secret_key": TEST_JWT_SECRET,
        "bcrypt_rounds": 10,
        "public_base_url": "https://app.example.com",
        "magic_link_use_queues": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)  # type: ignore[call-arg]


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Factory for Settings with test defaults; keyword arguments override."""
    return _build_settings


@pytest.fixture
def logger() -> MagicMock:
    """Mock logger; assert on ``logger.warning.call_args`` etc."""
    return MagicMock()


@pytest.fixture
def event_bus(logger) -> InMemoryEventBus:
    return InMemoryEventBus(logger=logger)


@pytest.fixture
def recorder(event_bus) -> EventRecorder:
    return EventRecorder(event_bus)


@pytest.fixture
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def token_store() -> InMemoryTokenStore:
    return InMemoryTokenStore()


@pytest.fixture
def code_store() -> InMemoryCodeStore:
    return InMemoryCodeStore()


@pytest.fixture
def email_outbox(logger) -> OutboxEmailDelivery:
    return OutboxEmailDelivery(logger)


@pytest.fixture
def sms_outbox(logger) -> OutboxPhoneDelivery:
    return OutboxPhoneDelivery(logger)


@pytest.fixture(scope="session")
def password_hasher() -> BcryptPasswordService:
    # Lowest accepted cost keeps the suite fast
    return BcryptPasswordService(cost_factor=10)


@pytest.fixture
def random_generator() -> SecureRandomGenerator:
    return SecureRandomGenerator()


@pytest.fixture
def jwt_service() -> JWTService:
    return JWTService(TEST_JWT_SECRET)


@pytest.fixture
def make_services(
    logger,
    event_bus,
    recorder,
    user_store,
    token_store,
    code_store,
    email_outbox,
    sms_outbox,
    password_hasher,
    random_generator,
    jwt_service,
) -> Callable[..., AuthServices]:
    """Factory wiring the full service graph.

    Usage:
        services = make_services(linking_strategy=ManualLinking(...))
        services = make_services(settings=make_settings(magic_link_enabled=False))
    """

    def _make(**overrides: Any) -> AuthServices:
        kwargs: dict[str, Any] = {
            "user_store": user_store,
            "token_store": token_store,
            "code_store": code_store,
            "email_delivery": email_outbox,
            "phone_delivery": sms_outbox,
            "logger": logger,
            "event_bus": event_bus,
            "password_hasher": password_hasher,
            "random_generator": random_generator,
            "access_tokens": jwt_service,
            "linking_strategy": LinkingDisabled(),
        }
        settings = overrides.pop("settings", None) or _build_settings()
        kwargs.update(overrides)
        return build_auth_services(settings, **kwargs)

    return _make


@pytest.fixture
def services(make_services) -> AuthServices:
    return make_services()
