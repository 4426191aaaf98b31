"""Request-scoped auth context adapters."""

from turnstile.infrastructure.session.in_memory_auth_context import InMemoryAuthContext

__all__ = ["InMemoryAuthContext"]
