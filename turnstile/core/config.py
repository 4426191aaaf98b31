"""
Configuration management using Pydantic Settings.

Type-safe, validated configuration loaded from environment variables
prefixed with ``TURNSTILE_`` (or a ``.env`` file).

Architecture:
- Flat Settings structure (no nesting)
- All config loaded from environment variables
- Type validation via Pydantic
- Durations are expressed in seconds

Usage:
    from turnstile.core.config import get_settings

    settings = get_settings()
    ttl = settings.refresh_token_ttl_seconds
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from turnstile.core.constants import MIN_JWT_SECRET_LENGTH
from turnstile.core.enums import (
    DeliveryChannel,
    Environment,
    LinkingMode,
    MultipleMatchPolicy,
)

_LINKABLE_KINDS = frozenset({"email", "phone"})


class Settings(BaseSettings):
    """
    Authentication core settings (flat structure).

    Configuration precedence:
        1. Environment variables
        2. ``.env`` file
        3. Default values (only for non-sensitive config)
    """

    # Environment and logging
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Runtime environment (development, testing, ci, production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_json: bool = Field(
        default=False,
        description="Render logs as JSON instead of the colored console format",
    )

    # Access tokens
    jwt_secret_key: str = Field(
        ...,
        description="HS256 signing key for access tokens (at least 32 characters)",
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="JWT signing algorithm",
    )
    token_issuer: str | None = Field(
        default=None,
        description="Value of the 'iss' claim; also required on validation when set",
    )
    token_audience: str | None = Field(
        default=None,
        description="Value of the 'aud' claim; also required on validation when set",
    )
    access_token_ttl_seconds: int = Field(
        default=15 * 60,
        description="Access token lifetime",
    )
    refresh_token_ttl_seconds: int = Field(
        default=7 * 24 * 60 * 60,
        description="Refresh token lifetime",
    )

    # Links
    public_base_url: str = Field(
        default="http://localhost:8080",
        description="Public origin used to build links sent to users",
    )
    email_verification_path: str = Field(
        default="/auth/email/verify",
        description="Path of the email verification link",
    )
    password_reset_path: str = Field(
        default="/auth/password/reset/email/verify",
        description="Path of the email password reset link",
    )
    magic_link_path: str = Field(
        default="/auth/magic-link/email/verify",
        description="Path of the magic link",
    )

    # Verification codes
    verification_code_length: int = Field(
        default=6,
        description="Number of digits in email/phone verification codes",
    )
    verification_code_ttl_seconds: int = Field(
        default=15 * 60,
        description="Lifetime of a verification code",
    )
    verification_max_attempts: int = Field(
        default=3,
        description="Failed attempts allowed before a verification code is exhausted",
    )
    verification_use_queues: bool = Field(
        default=False,
        description="Deliver verification codes through the job queue",
    )
    require_verified_identifier: bool = Field(
        default=False,
        description="Reject password logins whose email/phone is not verified",
    )

    # Restoration (password reset)
    restoration_code_length: int = Field(
        default=6,
        description="Number of digits in password reset codes",
    )
    restoration_code_ttl_seconds: int = Field(
        default=15 * 60,
        description="Lifetime of a password reset code",
    )
    restoration_max_attempts: int = Field(
        default=3,
        description="Failed attempts allowed before a reset code is exhausted",
    )
    restoration_use_queues: bool = Field(
        default=False,
        description="Deliver reset codes through the job queue",
    )
    restoration_preferred_delivery: DeliveryChannel = Field(
        default=DeliveryChannel.EMAIL,
        description="Channel used when a reset is requested by username or federated id",
    )

    # Passwordless magic links
    magic_link_enabled: bool = Field(
        default=True,
        description="Enable email magic links",
    )
    magic_link_ttl_seconds: int = Field(
        default=15 * 60,
        description="Lifetime of a magic link",
    )
    magic_link_max_attempts: int = Field(
        default=5,
        description="Failed attempts allowed before a magic link is exhausted",
    )
    magic_link_auto_create_user: bool = Field(
        default=True,
        description="Create a user on first magic-link login for an unknown email",
    )
    magic_link_require_same_browser: bool = Field(
        default=False,
        description="Bind a magic link to the browser session that requested it",
    )
    magic_link_revoke_existing_tokens: bool = Field(
        default=True,
        description="Revoke existing refresh tokens on magic-link login",
    )
    magic_link_use_queues: bool = Field(
        default=True,
        description="Deliver magic links through the job queue",
    )

    # Delivery
    delivery_max_retries: int = Field(
        default=3,
        description="Retries handed to the job queue for a delivery job",
    )

    # Federated account linking
    account_linking_mode: LinkingMode = Field(
        default=LinkingMode.DISABLED,
        description="Account linking strategy (disabled, automatic, manual)",
    )
    account_linking_allowed_kinds: list[str] = Field(
        default_factory=lambda: ["email"],
        description="Identifier kinds searched for linking candidates (email, phone)",
    )
    account_linking_on_multiple_matches: MultipleMatchPolicy = Field(
        default=MultipleMatchPolicy.NEW_USER,
        description="Automatic mode fallback when several users match (manual, new_user)",
    )
    account_linking_state_ttl_seconds: int = Field(
        default=600,
        description="Lifetime of a pending manual linking session",
    )

    # Password hashing
    bcrypt_rounds: int = Field(
        default=12,
        description="Bcrypt cost factor for password hashing",
    )

    model_config = SettingsConfigDict(
        env_prefix="TURNSTILE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret_key(cls, v: str) -> str:
        """
        Validate the signing key is long enough for HS256.

        Raises:
            ValueError: If the key is shorter than 32 characters.
        """
        if len(v) < MIN_JWT_SECRET_LENGTH:
            raise ValueError(
                f"jwt_secret_key must be at least {MIN_JWT_SECRET_LENGTH} characters"
            )
        return v

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        """
        Validate bcrypt rounds are within the range the hasher accepts.

        Raises:
            ValueError: If rounds are not between 10 and 20.
        """
        if not 10 <= v <= 20:
            raise ValueError("bcrypt_rounds must be between 10 and 20")
        return v

    @field_validator("public_base_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Remove trailing slashes from the public origin."""
        return v.rstrip("/")

    @field_validator("account_linking_allowed_kinds")
    @classmethod
    def validate_allowed_kinds(cls, v: list[str]) -> list[str]:
        """
        Normalize and validate linkable identifier kinds.

        Raises:
            ValueError: If a kind other than email or phone is listed.
        """
        kinds = [kind.strip().lower() for kind in v]
        unknown = sorted(set(kinds) - _LINKABLE_KINDS)
        if unknown:
            raise ValueError(f"Unsupported account linking kinds: {', '.join(unknown)}")
        return kinds

    @field_validator(
        "verification_code_length",
        "restoration_code_length",
        "verification_max_attempts",
        "restoration_max_attempts",
        "magic_link_max_attempts",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Reject zero or negative lengths and attempt limits."""
        if v < 1:
            raise ValueError("value must be at least 1")
        return v

    @property
    def is_production(self) -> bool:
        """
        Check if running in production environment.

        Returns:
            bool: True if environment is PRODUCTION, False otherwise.
        """
        return self.environment == Environment.PRODUCTION

    def link_url(self, path: str) -> str:
        """Join the public origin with a link path."""
        return f"{self.public_base_url}/{path.lstrip('/')}"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Application configuration loaded from environment.
    """
    return Settings()  # type: ignore[call-arg]
