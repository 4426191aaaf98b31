"""JWT access token service (adapter).

Implements AccessTokenProtocol using PyJWT with HMAC-SHA256.

Architecture:
    - Implements AccessTokenProtocol (no inheritance required)
    - Structural typing via Protocol
    - Injected via dependency container

Security:
    - HMAC-SHA256 (HS256) algorithm
    - 256-bit secret key minimum
    - Issuer and audience enforced on validation when configured
    - Unique JWT ID (jti) per token

Claims:
    sub, iat, exp, jti, and optionally iss, aud, scope.
"""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import jwt
from jwt.exceptions import ExpiredSignatureError, InvalidTokenError
from uuid_extensions import uuid7

from turnstile.core.constants import MIN_JWT_SECRET_LENGTH
from turnstile.core.enums import ErrorCode
from turnstile.core.result import Failure, Result, Success
from turnstile.domain.errors import AuthenticationError, auth_error
from turnstile.domain.value_objects import AccessTokenClaims


class JWTService:
    """JWT access token signing and validation service.

    Usage:
        from turnstile.core.container import get_access_token_service

        signer = get_access_token_service()
        token = signer.sign(claims)

        match signer.verify(token):
            case Success(value=claims):
                user_id = claims.subject
            case Failure(error=error):
                ...
    """

    def __init__(
        self,
        secret_key: str,
        *,
        algorithm: str = "HS256",
        issuer: str | None = None,
        audience: str | None = None,
    ) -> None:
        """Initialize JWT service.

        Args:
            secret_key: Secret key for HMAC signing (at least 32 bytes).
            algorithm: Signing algorithm (default: HS256).
            issuer: Issuer required on validation, if set.
            audience: Audience required on validation, if set.

        Raises:
            ValueError: If secret_key is too short (< 32 bytes).
        """
        if len(secret_key) < MIN_JWT_SECRET_LENGTH:
            msg = "JWT secret key must be at least 32 bytes (256 bits)"
            raise ValueError(msg)

        self._secret_key = secret_key
        self._algorithm = algorithm
        self._issuer = issuer
        self._audience = audience

    def sign(self, claims: AccessTokenClaims) -> str:
        """Encode and sign an access token.

        Args:
            claims: Claim set to encode.

        Returns:
            JWT string (header.payload.signature).
        """
        payload: dict[str, Any] = {
            "sub": str(claims.subject),
            "iat": int(claims.issued_at.timestamp()),
            "exp": int(claims.expires_at.timestamp()),
            "jti": str(uuid7()),
        }
        if claims.issuer is not None:
            payload["iss"] = claims.issuer
        if claims.audience is not None:
            payload["aud"] = claims.audience
        if claims.scope is not None:
            payload["scope"] = claims.scope

        token: str = jwt.encode(payload, self._secret_key, algorithm=self._algorithm)
        return token

    def verify(self, token: str) -> Result[AccessTokenClaims, AuthenticationError]:
        """Validate an access token and extract its claims.

        Args:
            token: JWT access token string.

        Returns:
            Success(AccessTokenClaims) if valid.
            Failure(ACCESS_TOKEN_EXPIRED) if past ``exp``.
            Failure(ACCESS_TOKEN_INVALID) for any other defect.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                audience=self._audience,
                options={"require": ["sub", "exp", "iat"]},
            )
            subject = UUID(payload["sub"])
        except ExpiredSignatureError:
            return Failure(error=auth_error(ErrorCode.ACCESS_TOKEN_EXPIRED))
        except (InvalidTokenError, ValueError):
            return Failure(error=auth_error(ErrorCode.ACCESS_TOKEN_INVALID))

        return Success(
            value=AccessTokenClaims(
                subject=subject,
                issued_at=datetime.fromtimestamp(payload["iat"], UTC),
                expires_at=datetime.fromtimestamp(payload["exp"], UTC),
                issuer=payload.get("iss"),
                audience=payload.get("aud"),
                scope=payload.get("scope"),
            )
        )
