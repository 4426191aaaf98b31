"""UserStore protocol for user persistence.

Port (interface) for hexagonal architecture. The host's persistence layer
implements it; the core never owns user storage.
"""

from typing import Protocol
from uuid import UUID

from turnstile.domain.entities.user import User
from turnstile.domain.value_objects import Credential, Identifier


class UserStore(Protocol):
    """User store protocol (port).

    Methods:
        create: Create a user keyed by an identifier
        find_by_id / find_by_identifier / find_by_credential: Lookups
        add_identifier: Attach another identifier (account linking)
        mark_email_verified / mark_phone_verified: Verification hooks
        set_password: Replace the password credential
        create_with_email / create_with_phone: Passwordless user creation
    """

    async def create(
        self, identifier: Identifier, credential: Credential | None = None
    ) -> User:
        """Create a user.

        Args:
            identifier: Email, phone, username or federated identifier.
            credential: Optional password credential.

        Returns:
            The persisted user (with id).
        """
        ...

    async def find_by_id(self, user_id: UUID) -> User | None:
        """Find user by id."""
        ...

    async def find_by_identifier(self, identifier: Identifier) -> User | None:
        """Find user by identifier.

        Email comparison should be case-insensitive. Federated identifiers
        match on provider and subject id.
        """
        ...

    async def find_by_credential(self, credential: Credential) -> User | None:
        """Find the user holding exactly this credential."""
        ...

    async def add_identifier(self, user: User, identifier: Identifier) -> None:
        """Attach an identifier to an existing user."""
        ...

    async def mark_email_verified(self, user: User) -> None:
        """Flag the user's email as verified."""
        ...

    async def mark_phone_verified(self, user: User) -> None:
        """Flag the user's phone as verified."""
        ...

    async def set_password(self, user: User, credential: Credential) -> None:
        """Replace the user's password credential."""
        ...

    async def create_with_email(self, email: str, *, verified: bool) -> User:
        """Create a passwordless user keyed by email."""
        ...

    async def create_with_phone(self, phone: str, *, verified: bool) -> User:
        """Create a passwordless user keyed by phone."""
        ...
