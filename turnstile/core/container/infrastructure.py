"""Infrastructure dependency factories.

Application-scoped singletons for the adapters every service needs.
Each factory imports its adapter lazily and returns the protocol type,
so callers never depend on a concrete implementation.
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from turnstile.core.config import get_settings
from turnstile.core.enums import LinkingMode

if TYPE_CHECKING:
    from turnstile.domain.protocols.access_token_protocol import AccessTokenProtocol
    from turnstile.domain.protocols.logger_protocol import LoggerProtocol
    from turnstile.domain.protocols.password_hashing_protocol import (
        PasswordHashingProtocol,
    )
    from turnstile.domain.protocols.random_generator_protocol import (
        RandomGeneratorProtocol,
    )
    from turnstile.domain.value_objects.account_linking import AccountLinkingStrategy


# ============================================================================
# Logging
# ============================================================================


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Get logger singleton (app-scoped).

    Renders JSON when ``log_json`` is set, colored console output otherwise.

    Returns:
        Logger implementing LoggerProtocol.

    Usage:
        logger = get_logger()
        logger.info("user_registered", user_id=str(user_id))
    """
    from turnstile.infrastructure.logging.console_adapter import ConsoleAdapter

    settings = get_settings()
    return ConsoleAdapter(use_json=settings.log_json, level=settings.log_level)


# ============================================================================
# Security
# ============================================================================


@lru_cache()
def get_password_service() -> "PasswordHashingProtocol":
    """Get password hashing service singleton.

    Returns:
        Bcrypt hasher using the configured cost factor.
    """
    from turnstile.infrastructure.security.bcrypt_password_service import (
        BcryptPasswordService,
    )

    return BcryptPasswordService(cost_factor=get_settings().bcrypt_rounds)


@lru_cache()
def get_random_generator() -> "RandomGeneratorProtocol":
    """Get secure random generator singleton."""
    from turnstile.infrastructure.security.random_generator import (
        SecureRandomGenerator,
    )

    return SecureRandomGenerator()


@lru_cache()
def get_access_token_service() -> "AccessTokenProtocol":
    """Get access token signer singleton.

    Returns:
        JWT service configured with key, algorithm, issuer and audience.

    Usage:
        claims_result = get_access_token_service().verify(token)
    """
    from turnstile.infrastructure.security.jwt_service import JWTService

    settings = get_settings()
    return JWTService(
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
        issuer=settings.token_issuer,
        audience=settings.token_audience,
    )


# ============================================================================
# Account linking
# ============================================================================


@lru_cache()
def get_account_linking_strategy() -> "AccountLinkingStrategy":
    """Build the account linking strategy from settings.

    Returns:
        LinkingDisabled, AutomaticLinking or ManualLinking.
    """
    from turnstile.domain.value_objects.account_linking import (
        AutomaticLinking,
        LinkingDisabled,
        ManualLinking,
    )
    from turnstile.domain.value_objects.identifier import IdentifierKind

    settings = get_settings()
    allowed = frozenset(
        IdentifierKind(kind) for kind in settings.account_linking_allowed_kinds
    )

    match settings.account_linking_mode:
        case LinkingMode.AUTOMATIC:
            return AutomaticLinking(
                allowed_kinds=allowed,
                on_multiple_matches=settings.account_linking_on_multiple_matches,
            )
        case LinkingMode.MANUAL:
            return ManualLinking(allowed_kinds=allowed)
        case _:
            return LinkingDisabled()
