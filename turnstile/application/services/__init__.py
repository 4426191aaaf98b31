"""Application services.

Usage:
    from turnstile.application.services import TokenService, OneTimeCodeEngine
"""

from turnstile.application.services.account_linking_service import (
    AccountLinkingService,
)
from turnstile.application.services.delivery_dispatcher import (
    DeliveryDispatcher,
    DeliveryJob,
    DeliveryMessage,
)
from turnstile.application.services.federated_login_service import (
    FederatedLoginService,
)
from turnstile.application.services.identity_service import IdentityService
from turnstile.application.services.one_time_code_engine import (
    CodePolicy,
    IssuedCode,
    OneTimeCodeEngine,
)
from turnstile.application.services.passwordless_service import PasswordlessService
from turnstile.application.services.restoration_service import RestorationService
from turnstile.application.services.token_service import TokenService
from turnstile.application.services.verification_service import VerificationService

__all__ = [
    "AccountLinkingService",
    "CodePolicy",
    "DeliveryDispatcher",
    "DeliveryJob",
    "DeliveryMessage",
    "FederatedLoginService",
    "IdentityService",
    "IssuedCode",
    "OneTimeCodeEngine",
    "PasswordlessService",
    "RestorationService",
    "TokenService",
    "VerificationService",
]
