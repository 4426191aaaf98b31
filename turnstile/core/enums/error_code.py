"""Domain-level error codes (machine-readable).

Error codes follow ENTITY_ACTION_REASON naming convention.
Used with Result types for railway-oriented programming.

Categories:
- Registration and login (*_ALREADY_REGISTERED, INVALID_*_OR_PASSWORD)
- Refresh and access tokens (REFRESH_TOKEN_*, ACCESS_TOKEN_*)
- One-time codes (CODE_*, MAGIC_LINK_*, RESTORATION_*)
- Delivery configuration (*_DELIVERY_NOT_CONFIGURED, DELIVERY_FAILED)
- Federated login and account linking (FEDERATED_*, LINKING_*)
"""

from enum import Enum


class ErrorCode(Enum):
    """Domain-level error codes (machine-readable)."""

    # Registration
    IDENTIFIER_NOT_SPECIFIED = "identifier_not_specified"
    EMAIL_ALREADY_REGISTERED = "email_already_registered"
    PHONE_ALREADY_REGISTERED = "phone_already_registered"
    USERNAME_ALREADY_REGISTERED = "username_already_registered"

    # Login
    INVALID_EMAIL_OR_PASSWORD = "invalid_email_or_password"
    INVALID_PHONE_OR_PASSWORD = "invalid_phone_or_password"
    INVALID_USERNAME_OR_PASSWORD = "invalid_username_or_password"
    EMAIL_NOT_VERIFIED = "email_not_verified"
    PHONE_NOT_VERIFIED = "phone_not_verified"
    PASSWORD_NOT_SET = "password_not_set"
    USER_NOT_FOUND = "user_not_found"

    # Tokens
    REFRESH_TOKEN_INVALID = "refresh_token_invalid"
    REFRESH_TOKEN_NOT_FOUND = "refresh_token_not_found"
    ACCESS_TOKEN_INVALID = "access_token_invalid"
    ACCESS_TOKEN_EXPIRED = "access_token_expired"

    # Verification preconditions
    EMAIL_NOT_SET = "email_not_set"
    PHONE_NOT_SET = "phone_not_set"
    EMAIL_ALREADY_VERIFIED = "email_already_verified"
    PHONE_ALREADY_VERIFIED = "phone_already_verified"

    # One-time codes
    CODE_INVALID = "code_invalid"
    CODE_EXPIRED = "code_expired"
    CODE_MAX_ATTEMPTS = "code_max_attempts"

    # Magic links
    MAGIC_LINK_EMAIL_NOT_FOUND = "magic_link_email_not_found"
    MAGIC_LINK_DIFFERENT_BROWSER = "magic_link_different_browser"

    # Restoration
    RESTORATION_IDENTIFIER_NOT_FOUND = "restoration_identifier_not_found"
    RESTORATION_DELIVERY_NOT_AVAILABLE = "restoration_delivery_not_available"

    # Delivery
    EMAIL_DELIVERY_NOT_CONFIGURED = "email_delivery_not_configured"
    PHONE_DELIVERY_NOT_CONFIGURED = "phone_delivery_not_configured"
    MAGIC_LINK_NOT_CONFIGURED = "magic_link_not_configured"
    DELIVERY_FAILED = "delivery_failed"

    # Federated login and account linking
    FEDERATED_ACCOUNT_ALREADY_LINKED = "federated_account_already_linked"
    LINKING_SESSION_MISSING = "linking_session_missing"
    LINKING_SESSION_EXPIRED = "linking_session_expired"
    LINKING_CANDIDATE_INVALID = "linking_candidate_invalid"
