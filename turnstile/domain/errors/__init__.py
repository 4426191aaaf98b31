"""Domain errors package.

Usage:
    from turnstile.domain.errors import AuthenticationError, auth_error
"""

from turnstile.domain.errors.authentication_error import (
    AuthenticationError,
    AuthErrorKind,
    auth_error,
)

__all__ = ["AuthErrorKind", "AuthenticationError", "auth_error"]
