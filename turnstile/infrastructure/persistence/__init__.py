"""In-memory persistence adapters.

Concrete UserStore, TokenStore and CodeStore implementations backed by
dicts. No external dependencies: useful for tests and development. State is
lost on restart and not shared between processes.

Usage:
    users = InMemoryUserStore()
    tokens = InMemoryTokenStore()
    codes = InMemoryCodeStore()
"""

from turnstile.infrastructure.persistence.memory_code_store import InMemoryCodeStore
from turnstile.infrastructure.persistence.memory_token_store import InMemoryTokenStore
from turnstile.infrastructure.persistence.memory_user_store import (
    InMemoryUserStore,
    StoredUser,
)

__all__ = ["InMemoryCodeStore", "InMemoryTokenStore", "InMemoryUserStore", "StoredUser"]
