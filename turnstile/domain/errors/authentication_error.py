"""Authentication domain errors.

Every expected failure of the authentication core is an AuthenticationError
returned inside ``Failure``. Each error code maps to one taxonomy kind so
that hosts can translate whole families of failures to a transport response.

Kinds:
    - NOT_FOUND: user, token or code absent for the lookup key
    - EXPIRED: token or code past its expiry
    - EXHAUSTED: code reached its failed-attempt limit
    - POLICY_VIOLATION: disallowed by configuration or current state
    - INTEGRITY: refresh token reuse, browser binding mismatch, link conflicts
    - PRECONDITION: identifier or credential missing on the user

Usage:
    return Failure(error=auth_error(ErrorCode.EMAIL_NOT_SET))
"""

from dataclasses import dataclass
from enum import Enum

from turnstile.core.enums import ErrorCode
from turnstile.core.errors import DomainError


class AuthErrorKind(str, Enum):
    """Error taxonomy kinds."""

    NOT_FOUND = "not_found"
    EXPIRED = "expired"
    EXHAUSTED = "exhausted"
    POLICY_VIOLATION = "policy_violation"
    INTEGRITY = "integrity"
    PRECONDITION = "precondition"


@dataclass(frozen=True, slots=True, kw_only=True)
class AuthenticationError(DomainError):
    """Authentication failure.

    Attributes:
        code: Machine-readable error code.
        message: Human-readable message.
        details: Optional context (e.g. ``{"flow": "email_reset"}``).
        kind: Taxonomy kind of the failure.
    """

    kind: AuthErrorKind


_K = AuthErrorKind

_CATALOG: dict[ErrorCode, tuple[AuthErrorKind, str]] = {
    # Registration
    ErrorCode.IDENTIFIER_NOT_SPECIFIED: (_K.PRECONDITION, "Identifier not specified."),
    ErrorCode.EMAIL_ALREADY_REGISTERED: (_K.POLICY_VIOLATION, "Email already registered."),
    ErrorCode.PHONE_ALREADY_REGISTERED: (_K.POLICY_VIOLATION, "Phone already registered."),
    ErrorCode.USERNAME_ALREADY_REGISTERED: (
        _K.POLICY_VIOLATION,
        "Username already registered.",
    ),
    # Login
    ErrorCode.INVALID_EMAIL_OR_PASSWORD: (_K.NOT_FOUND, "Invalid email or password."),
    ErrorCode.INVALID_PHONE_OR_PASSWORD: (_K.NOT_FOUND, "Invalid phone or password."),
    ErrorCode.INVALID_USERNAME_OR_PASSWORD: (
        _K.NOT_FOUND,
        "Invalid username or password.",
    ),
    ErrorCode.EMAIL_NOT_VERIFIED: (_K.PRECONDITION, "Email is not verified."),
    ErrorCode.PHONE_NOT_VERIFIED: (_K.PRECONDITION, "Phone is not verified."),
    ErrorCode.PASSWORD_NOT_SET: (_K.PRECONDITION, "Password is not set."),
    ErrorCode.USER_NOT_FOUND: (_K.NOT_FOUND, "User not found."),
    # Tokens
    ErrorCode.REFRESH_TOKEN_INVALID: (_K.INTEGRITY, "Invalid refresh token."),
    ErrorCode.REFRESH_TOKEN_NOT_FOUND: (_K.NOT_FOUND, "Refresh token not found."),
    ErrorCode.ACCESS_TOKEN_INVALID: (_K.INTEGRITY, "Invalid access token."),
    ErrorCode.ACCESS_TOKEN_EXPIRED: (_K.EXPIRED, "Access token expired."),
    # Verification preconditions
    ErrorCode.EMAIL_NOT_SET: (_K.PRECONDITION, "Email is not set."),
    ErrorCode.PHONE_NOT_SET: (_K.PRECONDITION, "Phone is not set."),
    ErrorCode.EMAIL_ALREADY_VERIFIED: (_K.POLICY_VIOLATION, "Email already verified."),
    ErrorCode.PHONE_ALREADY_VERIFIED: (_K.POLICY_VIOLATION, "Phone already verified."),
    # One-time codes
    ErrorCode.CODE_INVALID: (_K.NOT_FOUND, "Invalid code."),
    ErrorCode.CODE_EXPIRED: (_K.EXPIRED, "Code expired."),
    ErrorCode.CODE_MAX_ATTEMPTS: (_K.EXHAUSTED, "Too many failed attempts."),
    # Magic links
    ErrorCode.MAGIC_LINK_EMAIL_NOT_FOUND: (
        _K.POLICY_VIOLATION,
        "No account found for this email.",
    ),
    ErrorCode.MAGIC_LINK_DIFFERENT_BROWSER: (
        _K.INTEGRITY,
        "Magic link must be opened in the browser that requested it.",
    ),
    # Restoration
    ErrorCode.RESTORATION_IDENTIFIER_NOT_FOUND: (
        _K.NOT_FOUND,
        "No account found for this identifier.",
    ),
    ErrorCode.RESTORATION_DELIVERY_NOT_AVAILABLE: (
        _K.PRECONDITION,
        "No delivery channel available for this account.",
    ),
    # Delivery
    ErrorCode.EMAIL_DELIVERY_NOT_CONFIGURED: (
        _K.POLICY_VIOLATION,
        "Email delivery is not configured.",
    ),
    ErrorCode.PHONE_DELIVERY_NOT_CONFIGURED: (
        _K.POLICY_VIOLATION,
        "Phone delivery is not configured.",
    ),
    ErrorCode.MAGIC_LINK_NOT_CONFIGURED: (
        _K.POLICY_VIOLATION,
        "Email magic link is not configured.",
    ),
    ErrorCode.DELIVERY_FAILED: (_K.POLICY_VIOLATION, "Delivery failed."),
    # Federated login and account linking
    ErrorCode.FEDERATED_ACCOUNT_ALREADY_LINKED: (
        _K.INTEGRITY,
        "Federated account is already linked to another user.",
    ),
    ErrorCode.LINKING_SESSION_MISSING: (_K.NOT_FOUND, "No account linking in progress."),
    ErrorCode.LINKING_SESSION_EXPIRED: (_K.EXPIRED, "Account linking session expired."),
    ErrorCode.LINKING_CANDIDATE_INVALID: (
        _K.POLICY_VIOLATION,
        "Selected account is not a linking candidate.",
    ),
}


def auth_error(code: ErrorCode, **details: str) -> AuthenticationError:
    """Build the canonical AuthenticationError for an error code.

    Args:
        code: Error code from the authentication catalog.
        **details: Optional debugging context.

    Returns:
        AuthenticationError with catalog message and kind.

    Raises:
        KeyError: If ``code`` is not an authentication error code.
    """
    kind, message = _CATALOG[code]
    return AuthenticationError(
        code=code,
        message=message,
        details=details or None,
        kind=kind,
    )
