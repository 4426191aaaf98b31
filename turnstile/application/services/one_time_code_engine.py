"""One-time code engine.

Shared lifecycle behind email/phone verification, email/phone password reset
and magic links. Only hashes are persisted; the plaintext leaves the engine
once, inside ``IssuedCode``, to be embedded in a message.

Invariants:
    - Single live code: issuing a code invalidates every other live code of
      the same (kind, identifier). The new code is created first and the
      rest invalidated afterwards (``keep=new.id``), which is idempotent
      under concurrent requests.
    - Bounded attempts: a wrong code for an identifier adds a failed attempt
      to its live code; once ``failed_attempts >= max_attempts`` even the
      correct code is rejected.
    - No replay: ``consume()`` invalidates the code before the success
      action; a concurrent redemption that loses the race gets CODE_INVALID.

Verification order:
    not found -> CODE_INVALID, expired -> CODE_EXPIRED,
    exhausted -> CODE_MAX_ATTEMPTS, otherwise Success(code).
"""

import hmac
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

from turnstile.core.enums import ErrorCode
from turnstile.core.result import Failure, Result, Success
from turnstile.domain.entities.one_time_code import CodeKind, OneTimeCode
from turnstile.domain.errors import AuthenticationError, auth_error
from turnstile.domain.events import (
    OneTimeCodeIssued,
    OneTimeCodeRejected,
    OneTimeCodeVerified,
)
from turnstile.domain.protocols import (
    CodeStore,
    EventBusProtocol,
    RandomGeneratorProtocol,
)
from turnstile.domain.value_objects import Identifier


@dataclass(frozen=True, slots=True, kw_only=True)
class CodePolicy:
    """Per-flow code parameters.

    Attributes:
        ttl: Lifetime of a code.
        max_attempts: Failed attempts allowed.
        code_length: Digits of a numeric code; None issues an opaque token.
    """

    ttl: timedelta
    max_attempts: int
    code_length: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class IssuedCode:
    """A freshly issued code.

    Attributes:
        record: Persisted code (hash only).
        plaintext: Code or token to deliver. Never persisted.
        session_token: Plaintext browser binding token, if requested.
    """

    record: OneTimeCode
    plaintext: str
    session_token: str | None = None


class OneTimeCodeEngine:
    """Issue, verify and consume one-time codes of any kind."""

    def __init__(
        self,
        *,
        code_store: CodeStore,
        random_generator: RandomGeneratorProtocol,
        event_bus: EventBusProtocol,
    ) -> None:
        self._codes = code_store
        self._random = random_generator
        self._event_bus = event_bus

    async def issue(
        self,
        kind: CodeKind,
        identifier: Identifier,
        policy: CodePolicy,
        *,
        user_id: UUID | None = None,
        bind_session: bool = False,
    ) -> IssuedCode:
        """Create a code and invalidate every other live code of the identifier.

        Resending is the same operation.

        Args:
            kind: Flow the code belongs to.
            identifier: Email or phone the code is sent to.
            policy: TTL and code format.
            user_id: Owning user, if known.
            bind_session: Also mint a browser binding token (magic links).

        Returns:
            IssuedCode carrying the plaintext for delivery.
        """
        if policy.code_length is None:
            plaintext = self._random.generate_opaque_token()
        else:
            plaintext = self._random.generate_numeric_code(policy.code_length)

        session_token = self._random.generate_opaque_token() if bind_session else None

        record = await self._codes.create_code(
            kind,
            identifier,
            self._random.hash(plaintext),
            datetime.now(UTC) + policy.ttl,
            user_id=user_id,
            session_token_hash=(
                self._random.hash(session_token) if session_token is not None else None
            ),
        )
        await self._codes.invalidate_codes(kind, identifier, keep=record.id)

        await self._event_bus.publish(
            OneTimeCodeIssued(
                code_id=record.id, kind=kind.value, identifier=str(identifier)
            )
        )
        return IssuedCode(record=record, plaintext=plaintext, session_token=session_token)

    async def verify(
        self,
        kind: CodeKind,
        identifier: Identifier | None,
        code: str,
        policy: CodePolicy,
    ) -> Result[OneTimeCode, AuthenticationError]:
        """Check a presented code without consuming it.

        Args:
            kind: Flow the code belongs to.
            identifier: Identifier the code was sent to; None looks the code
                up by hash alone (magic-link tokens).
            code: Plaintext code presented by the user.
            policy: Attempt limit.

        Returns:
            Success(OneTimeCode) if the code may be redeemed, otherwise
            Failure(CODE_INVALID / CODE_EXPIRED / CODE_MAX_ATTEMPTS).
        """
        code_hash = self._random.hash(code)
        if identifier is None:
            record = await self._codes.find_code_by_hash(kind, code_hash)
        else:
            record = await self._codes.find_code(kind, identifier, code_hash)

        if record is None:
            if identifier is not None:
                live = await self._codes.find_live_code(kind, identifier)
                if live is not None:
                    await self._codes.increment_failed_attempts(live)
            return await self._reject(kind, identifier, ErrorCode.CODE_INVALID)

        if record.is_expired():
            return await self._reject(kind, record.identifier, ErrorCode.CODE_EXPIRED)

        if record.is_exhausted(policy.max_attempts):
            return await self._reject(kind, record.identifier, ErrorCode.CODE_MAX_ATTEMPTS)

        return Success(value=record)

    async def record_failure(self, record: OneTimeCode) -> int:
        """Count a failed redemption against a code found by hash."""
        return await self._codes.increment_failed_attempts(record)

    def session_matches(self, record: OneTimeCode, session_token: str | None) -> bool:
        """Compare a browser's binding token with the one stored on the code.

        Codes issued without a binding always match.
        """
        if record.session_token_hash is None:
            return True
        if session_token is None:
            return False
        return hmac.compare_digest(
            self._random.hash(session_token), record.session_token_hash
        )

    async def consume(self, record: OneTimeCode) -> Result[None, AuthenticationError]:
        """Claim a verified code (and invalidate any sibling) to prevent replay.

        Returns:
            Success(None), or Failure(CODE_INVALID) when another redemption
            consumed the code first.
        """
        if not await self._codes.consume_code(record):
            return await self._reject(record.kind, record.identifier, ErrorCode.CODE_INVALID)
        await self._event_bus.publish(
            OneTimeCodeVerified(
                code_id=record.id,
                kind=record.kind.value,
                identifier=str(record.identifier),
            )
        )
        return Success(value=None)

    async def _reject(
        self, kind: CodeKind, identifier: Identifier | None, code: ErrorCode
    ) -> Failure[AuthenticationError]:
        await self._event_bus.publish(
            OneTimeCodeRejected(
                kind=kind.value,
                identifier=str(identifier) if identifier is not None else None,
                reason=code.value,
            )
        )
        return Failure(error=auth_error(code, flow=kind.value))
