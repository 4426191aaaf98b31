"""Auth context protocol (port).

The host's request-scoped authentication state: the logged-in user and a
string session map (browser session). Passed explicitly to services that
need it.
"""

from collections.abc import MutableMapping
from typing import Protocol

from turnstile.domain.entities.user import User


class AuthContextProtocol(Protocol):
    """Request-scoped authentication state."""

    @property
    def user(self) -> User | None:
        """Currently logged-in user, if any."""
        ...

    @property
    def session(self) -> MutableMapping[str, str]:
        """Browser session values."""
        ...

    def login(self, user: User) -> None:
        """Mark ``user`` as logged in for this request/session."""
        ...

    def logout(self) -> None:
        """Clear the logged-in user."""
        ...
