"""Random/hash provider protocol (port).

Generates the secrets handed to users and the one-way hashes stored in
their place. ``hash`` must be deterministic so that a presented secret can
be looked up by its hash.
"""

from typing import Protocol


class RandomGeneratorProtocol(Protocol):
    """Protocol for secret generation and lookup hashing."""

    def generate_opaque_token(self) -> str:
        """Return a high-entropy URL-safe token (refresh tokens, magic links)."""
        ...

    def generate_numeric_code(self, length: int) -> str:
        """Return a uniformly random numeric code of exactly ``length`` digits."""
        ...

    def hash(self, token: str) -> str:
        """Return the one-way, deterministic lookup hash of a secret."""
        ...
