"""Secure random generator (adapter).

Implements RandomGeneratorProtocol with the ``secrets`` module and SHA-256.

Security:
    - Opaque tokens: 32 random bytes, URL-safe base64 (~43 characters)
    - Numeric codes: each digit drawn with ``secrets.randbelow`` (no modulo bias)
    - Lookup hash: unsalted SHA-256 hex digest (deterministic)
"""

import hashlib
import secrets

from turnstile.core.constants import TOKEN_BYTES


class SecureRandomGenerator:
    """Cryptographically secure secret generation and hashing."""

    def __init__(self, token_bytes: int = TOKEN_BYTES) -> None:
        """Initialize generator.

        Args:
            token_bytes: Random bytes per opaque token (default: 32).

        Raises:
            ValueError: If fewer than 16 bytes are requested.
        """
        if token_bytes < 16:
            msg = "Opaque tokens need at least 16 random bytes"
            raise ValueError(msg)
        self._token_bytes = token_bytes

    def generate_opaque_token(self) -> str:
        """Generate a URL-safe opaque token."""
        return secrets.token_urlsafe(self._token_bytes)

    def generate_numeric_code(self, length: int) -> str:
        """Generate a numeric code of exactly ``length`` digits.

        Leading zeros are preserved ("004213" is a valid 6-digit code).

        Raises:
            ValueError: If length is less than 1.
        """
        if length < 1:
            msg = "Code length must be at least 1"
            raise ValueError(msg)
        return "".join(str(secrets.randbelow(10)) for _ in range(length))

    def hash(self, token: str) -> str:
        """Return the SHA-256 hex digest of a secret."""
        return hashlib.sha256(token.encode("utf-8")).hexdigest()
