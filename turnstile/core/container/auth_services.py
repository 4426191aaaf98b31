"""Authentication service graph.

Builds every application service from Settings and the storage and
delivery adapters the host provides. Adapters that are not passed in come
from the app-scoped factories in this package.

Flow:
    1. Resolve settings and shared adapters
    2. Derive code policies and link URLs from settings
    3. Wire services bottom-up (tokens, codes, delivery, flows)
    4. Bind delivery jobs when an in-memory queue is supplied
"""

from dataclasses import dataclass
from datetime import timedelta

from turnstile.application.services import (
    AccountLinkingService,
    CodePolicy,
    DeliveryDispatcher,
    FederatedLoginService,
    IdentityService,
    OneTimeCodeEngine,
    PasswordlessService,
    RestorationService,
    TokenService,
    VerificationService,
)
from turnstile.core.config import Settings, get_settings
from turnstile.core.container.events import get_event_bus
from turnstile.core.container.infrastructure import (
    get_access_token_service,
    get_account_linking_strategy,
    get_logger,
    get_password_service,
    get_random_generator,
)
from turnstile.domain.protocols import (
    AccessTokenProtocol,
    CodeStore,
    EmailDeliveryProtocol,
    EventBusProtocol,
    JobQueueProtocol,
    LoggerProtocol,
    PasswordHashingProtocol,
    PhoneDeliveryProtocol,
    RandomGeneratorProtocol,
    TokenStore,
    UserStore,
)
from turnstile.domain.value_objects import AccountLinkingStrategy
from turnstile.infrastructure.jobs import InMemoryJobQueue, register_delivery_jobs


@dataclass(frozen=True, slots=True, kw_only=True)
class AuthServices:
    """Every service of one configured authentication system."""

    tokens: TokenService
    engine: OneTimeCodeEngine
    dispatcher: DeliveryDispatcher
    verification: VerificationService
    passwordless: PasswordlessService
    restoration: RestorationService
    identity: IdentityService
    linking: AccountLinkingService
    federated: FederatedLoginService


def _seconds(value: int) -> timedelta:
    return timedelta(seconds=value)


def build_auth_services(
    settings: Settings | None = None,
    *,
    user_store: UserStore,
    token_store: TokenStore,
    code_store: CodeStore,
    email_delivery: EmailDeliveryProtocol | None = None,
    phone_delivery: PhoneDeliveryProtocol | None = None,
    job_queue: JobQueueProtocol | None = None,
    logger: LoggerProtocol | None = None,
    event_bus: EventBusProtocol | None = None,
    password_hasher: PasswordHashingProtocol | None = None,
    random_generator: RandomGeneratorProtocol | None = None,
    access_tokens: AccessTokenProtocol | None = None,
    linking_strategy: AccountLinkingStrategy | None = None,
) -> AuthServices:
    """Wire the authentication services.

    Args:
        settings: Configuration. Defaults to ``get_settings()``.
        user_store: Host user persistence.
        token_store: Refresh token persistence.
        code_store: One-time code persistence.
        email_delivery: Email sender, if the host sends email.
        phone_delivery: SMS sender, if the host sends SMS.
        job_queue: Background queue for queued delivery.
        logger: Overrides the container logger.
        event_bus: Overrides the container event bus.
        password_hasher: Overrides the bcrypt hasher.
        random_generator: Overrides the secure random generator.
        access_tokens: Overrides the JWT service.
        linking_strategy: Overrides the strategy built from settings.

    Returns:
        AuthServices bundle.

    Usage:
        services = build_auth_services(
            user_store=users, token_store=tokens, code_store=codes,
            email_delivery=mailer,
        )
        result = await services.identity.login(identifier, password, context)
    """
    settings = settings or get_settings()
    logger = logger or get_logger()
    event_bus = event_bus or get_event_bus()
    password_hasher = password_hasher or get_password_service()
    random_generator = random_generator or get_random_generator()
    access_tokens = access_tokens or get_access_token_service()
    if linking_strategy is None:
        linking_strategy = get_account_linking_strategy()

    verification_policy = CodePolicy(
        ttl=_seconds(settings.verification_code_ttl_seconds),
        max_attempts=settings.verification_max_attempts,
        code_length=settings.verification_code_length,
    )
    restoration_policy = CodePolicy(
        ttl=_seconds(settings.restoration_code_ttl_seconds),
        max_attempts=settings.restoration_max_attempts,
        code_length=settings.restoration_code_length,
    )
    magic_link_policy = CodePolicy(
        ttl=_seconds(settings.magic_link_ttl_seconds),
        max_attempts=settings.magic_link_max_attempts,
    )

    tokens = TokenService(
        token_store=token_store,
        user_store=user_store,
        random_generator=random_generator,
        access_tokens=access_tokens,
        event_bus=event_bus,
        access_token_ttl=_seconds(settings.access_token_ttl_seconds),
        refresh_token_ttl=_seconds(settings.refresh_token_ttl_seconds),
        issuer=settings.token_issuer,
        audience=settings.token_audience,
    )
    engine = OneTimeCodeEngine(
        code_store=code_store,
        random_generator=random_generator,
        event_bus=event_bus,
    )
    dispatcher = DeliveryDispatcher(
        user_store=user_store,
        logger=logger,
        email_delivery=email_delivery,
        phone_delivery=phone_delivery,
        job_queue=job_queue,
        max_retries=settings.delivery_max_retries,
    )
    if isinstance(job_queue, InMemoryJobQueue):
        register_delivery_jobs(job_queue, dispatcher)

    verification = VerificationService(
        user_store=user_store,
        engine=engine,
        dispatcher=dispatcher,
        email_policy=verification_policy,
        phone_policy=verification_policy,
        verification_url=settings.link_url(settings.email_verification_path),
        use_queues=settings.verification_use_queues,
    )
    passwordless = PasswordlessService(
        user_store=user_store,
        token_service=tokens,
        engine=engine,
        dispatcher=dispatcher,
        event_bus=event_bus,
        policy=magic_link_policy,
        magic_link_url=settings.link_url(settings.magic_link_path),
        enabled=settings.magic_link_enabled,
        auto_create_user=settings.magic_link_auto_create_user,
        require_same_browser=settings.magic_link_require_same_browser,
        revoke_existing_tokens=settings.magic_link_revoke_existing_tokens,
        use_queues=settings.magic_link_use_queues,
    )
    restoration = RestorationService(
        user_store=user_store,
        token_service=tokens,
        engine=engine,
        dispatcher=dispatcher,
        password_hasher=password_hasher,
        event_bus=event_bus,
        email_policy=restoration_policy,
        phone_policy=restoration_policy,
        reset_url=settings.link_url(settings.password_reset_path),
        preferred_channel=settings.restoration_preferred_delivery,
        use_queues=settings.restoration_use_queues,
    )
    identity = IdentityService(
        user_store=user_store,
        token_service=tokens,
        verification_service=verification,
        password_hasher=password_hasher,
        event_bus=event_bus,
        logger=logger,
        require_verified_identifier=settings.require_verified_identifier,
    )
    linking = AccountLinkingService(
        user_store=user_store,
        verification_service=verification,
        password_hasher=password_hasher,
        event_bus=event_bus,
        state_ttl=_seconds(settings.account_linking_state_ttl_seconds),
    )
    federated = FederatedLoginService(
        user_store=user_store,
        token_service=tokens,
        linking_service=linking,
        event_bus=event_bus,
        strategy=linking_strategy,
    )

    return AuthServices(
        tokens=tokens,
        engine=engine,
        dispatcher=dispatcher,
        verification=verification,
        passwordless=passwordless,
        restoration=restoration,
        identity=identity,
        linking=linking,
        federated=federated,
    )
