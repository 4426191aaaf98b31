"""Centralized constants for internal implementation details.

Environment-specific settings live in ``turnstile/core/config.py``.
"""

# =============================================================================
# Token Lengths
# =============================================================================

TOKEN_BYTES: int = 32
"""Number of bytes for opaque token generation (32 bytes = 256 bits)."""

MIN_JWT_SECRET_LENGTH: int = 32
"""Minimum HS256 signing key length in bytes."""


# =============================================================================
# Token Response
# =============================================================================

TOKEN_TYPE_BEARER: str = "Bearer"
"""Token type reported alongside issued access tokens."""

ACCESS_TOKEN_SCOPE: str = "user"
"""Scope claim carried by every access token."""


# =============================================================================
# Session Keys
# =============================================================================

MAGIC_LINK_SESSION_KEY: str = "turnstile_magic_link_session_token"
"""Session key holding the same-browser binding token of a magic link."""

LINKING_STATE_SESSION_KEY: str = "turnstile_account_linking_state"
"""Session key holding a pending manual account-linking state."""
