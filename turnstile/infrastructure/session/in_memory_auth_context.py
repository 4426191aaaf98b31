"""In-memory auth context.

Holds the logged-in user and a plain dict session. Hosts back the session
with their web framework's session middleware instead.
"""

from collections.abc import MutableMapping

from turnstile.domain.entities.user import User


class InMemoryAuthContext:
    """AuthContextProtocol adapter for tests and scripts."""

    def __init__(self, session: MutableMapping[str, str] | None = None) -> None:
        self._user: User | None = None
        self._session: MutableMapping[str, str] = session if session is not None else {}

    @property
    def user(self) -> User | None:
        return self._user

    @property
    def session(self) -> MutableMapping[str, str]:
        return self._session

    def login(self, user: User) -> None:
        self._user = user

    def logout(self) -> None:
        self._user = None
