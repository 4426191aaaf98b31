"""In-memory user store."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from uuid_extensions import uuid7

from turnstile.domain.entities.user import User
from turnstile.domain.value_objects import Credential, Identifier, IdentifierKind


@dataclass(slots=True, kw_only=True)
class StoredUser:
    """Concrete user record satisfying the ``User`` protocol.

    Attributes:
        id: User identifier.
        email / phone / username: Local identifiers (optional).
        password_hash: Bcrypt hash, None for passwordless users.
        is_anonymous: Placeholder users created before any identifier.
        is_email_verified / is_phone_verified: Verification flags.
        federated_identifiers: Linked federated identities.
        created_at: Creation timestamp (UTC).
    """

    id: UUID = field(default_factory=uuid7)
    email: str | None = None
    phone: str | None = None
    username: str | None = None
    password_hash: str | None = None
    is_anonymous: bool = False
    is_email_verified: bool = False
    is_phone_verified: bool = False
    federated_identifiers: list[Identifier] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class InMemoryUserStore:
    """Dict-backed UserStore.

    Users are indexed by every identifier they hold. Identifier collisions
    raise ValueError (the services check for them beforehand).
    """

    def __init__(self) -> None:
        self._users: dict[UUID, StoredUser] = {}
        self._index: dict[Identifier, UUID] = {}
        self._lock = asyncio.Lock()

    def _stored(self, user: User) -> StoredUser:
        if user.id is None or user.id not in self._users:
            raise KeyError(f"Unknown user: {user.id}")
        return self._users[user.id]

    def _attach(self, stored: StoredUser, identifier: Identifier) -> None:
        owner = self._index.get(identifier)
        if owner is not None and owner != stored.id:
            raise ValueError(f"Identifier already in use: {identifier}")

        match identifier.kind:
            case IdentifierKind.EMAIL:
                if stored.email is not None:
                    self._index.pop(Identifier.email(stored.email), None)
                stored.email = identifier.value
            case IdentifierKind.PHONE:
                if stored.phone is not None:
                    self._index.pop(Identifier.phone(stored.phone), None)
                stored.phone = identifier.value
            case IdentifierKind.USERNAME:
                if stored.username is not None:
                    self._index.pop(Identifier.username(stored.username), None)
                stored.username = identifier.value
            case IdentifierKind.FEDERATED:
                if identifier not in stored.federated_identifiers:
                    stored.federated_identifiers.append(identifier)
        self._index[identifier] = stored.id

    async def create(
        self, identifier: Identifier, credential: Credential | None = None
    ) -> StoredUser:
        async with self._lock:
            stored = StoredUser(
                password_hash=credential.secret if credential is not None else None
            )
            self._attach(stored, identifier)
            self._users[stored.id] = stored
            return stored

    async def find_by_id(self, user_id: UUID) -> StoredUser | None:
        return self._users.get(user_id)

    async def find_by_identifier(self, identifier: Identifier) -> StoredUser | None:
        user_id = self._index.get(identifier)
        return self._users.get(user_id) if user_id is not None else None

    async def find_by_credential(self, credential: Credential) -> StoredUser | None:
        return next(
            (u for u in self._users.values() if u.password_hash == credential.secret),
            None,
        )

    async def add_identifier(self, user: User, identifier: Identifier) -> None:
        async with self._lock:
            self._attach(self._stored(user), identifier)

    async def mark_email_verified(self, user: User) -> None:
        self._stored(user).is_email_verified = True

    async def mark_phone_verified(self, user: User) -> None:
        self._stored(user).is_phone_verified = True

    async def set_password(self, user: User, credential: Credential) -> None:
        self._stored(user).password_hash = credential.secret

    async def create_with_email(self, email: str, *, verified: bool) -> StoredUser:
        stored = await self.create(Identifier.email(email))
        stored.is_email_verified = verified
        return stored

    async def create_with_phone(self, phone: str, *, verified: bool) -> StoredUser:
        stored = await self.create(Identifier.phone(phone))
        stored.is_phone_verified = verified
        return stored

    def user_count(self) -> int:
        """Number of stored users (useful for testing)."""
        return len(self._users)
