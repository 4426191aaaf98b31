"""Domain protocols (ports) for hexagonal architecture.

Infrastructure adapters and host applications implement these protocols
structurally; no inheritance is required.

Usage:
    from turnstile.domain.protocols import TokenStore, CodeStore, UserStore
"""

from turnstile.domain.protocols.access_token_protocol import AccessTokenProtocol
from turnstile.domain.protocols.auth_context_protocol import AuthContextProtocol
from turnstile.domain.protocols.code_store import CodeStore
from turnstile.domain.protocols.delivery_protocol import (
    EmailDeliveryProtocol,
    PhoneDeliveryProtocol,
)
from turnstile.domain.protocols.event_bus_protocol import EventBusProtocol, EventHandler
from turnstile.domain.protocols.job_queue_protocol import JobQueueProtocol
from turnstile.domain.protocols.logger_protocol import LoggerProtocol
from turnstile.domain.protocols.password_hashing_protocol import (
    PasswordHashingProtocol,
)
from turnstile.domain.protocols.random_generator_protocol import (
    RandomGeneratorProtocol,
)
from turnstile.domain.protocols.token_store import TokenStore
from turnstile.domain.protocols.user_store import UserStore

__all__ = [
    # Persistence
    "CodeStore",
    "TokenStore",
    "UserStore",
    # Security
    "AccessTokenProtocol",
    "PasswordHashingProtocol",
    "RandomGeneratorProtocol",
    # Delivery
    "EmailDeliveryProtocol",
    "JobQueueProtocol",
    "PhoneDeliveryProtocol",
    # Request state
    "AuthContextProtocol",
    # Events and logging
    "EventBusProtocol",
    "EventHandler",
    "LoggerProtocol",
]
