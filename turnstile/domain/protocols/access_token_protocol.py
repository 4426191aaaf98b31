"""Access token signing protocol (port)."""

from typing import Protocol

from turnstile.core.result import Result
from turnstile.domain.errors import AuthenticationError
from turnstile.domain.value_objects import AccessTokenClaims


class AccessTokenProtocol(Protocol):
    """Protocol for signing and verifying stateless access tokens."""

    def sign(self, claims: AccessTokenClaims) -> str:
        """Encode and sign a claim set."""
        ...

    def verify(self, token: str) -> Result[AccessTokenClaims, AuthenticationError]:
        """Check signature, expiry, issuer and audience.

        Returns:
            Success(AccessTokenClaims), or Failure with ACCESS_TOKEN_EXPIRED /
            ACCESS_TOKEN_INVALID.
        """
        ...
