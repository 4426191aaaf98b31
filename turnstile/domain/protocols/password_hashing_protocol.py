"""Password hashing protocol (port).

The hashing algorithm is an external choice; the core only hashes new
passwords and verifies presented ones.
"""

from typing import Protocol


class PasswordHashingProtocol(Protocol):
    """Protocol for password hashing adapters."""

    def hash_password(self, password: str) -> str:
        """Hash a plaintext password (salted, one-way)."""
        ...

    def verify_password(self, password: str, password_hash: str) -> bool:
        """Verify a plaintext password against a stored hash.

        Returns:
            True on match. False on mismatch or malformed hash (never raises).
        """
        ...
