"""Access token claim set.

Access tokens are stateless: they are never persisted and are verified by
signature, expiry, issuer and audience only.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True, kw_only=True)
class AccessTokenClaims:
    """Claims carried by a signed access token.

    Attributes:
        subject: User id (``sub``).
        issued_at: Issue time (``iat``).
        expires_at: Expiry (``exp``).
        issuer: Issuer (``iss``), optional.
        audience: Audience (``aud``), optional.
        scope: Space separated scopes (``scope``), optional.
    """

    subject: UUID
    issued_at: datetime
    expires_at: datetime
    issuer: str | None = None
    audience: str | None = None
    scope: str | None = None
