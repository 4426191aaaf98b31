"""Container module - Centralized dependency wiring.

Re-exports factory functions from submodules:

    from turnstile.core.container import get_logger, build_auth_services

The container is organized into modules:
- infrastructure: Core adapters (logging, hashing, tokens, randomness)
- events: Event bus and subscriptions
- auth_services: Application service graph built from settings
"""

from turnstile.core.container.auth_services import AuthServices, build_auth_services
from turnstile.core.container.events import get_event_bus
from turnstile.core.container.infrastructure import (
    get_access_token_service,
    get_account_linking_strategy,
    get_logger,
    get_password_service,
    get_random_generator,
)

__all__ = [
    "AuthServices",
    "build_auth_services",
    "get_access_token_service",
    "get_account_linking_strategy",
    "get_event_bus",
    "get_logger",
    "get_password_service",
    "get_random_generator",
]
