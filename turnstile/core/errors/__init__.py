"""Core errors package.

Usage:
    from turnstile.core.errors import DomainError
"""

from turnstile.core.errors.domain_error import DomainError

__all__ = ["DomainError"]
