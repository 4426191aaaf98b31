"""Security adapters: access tokens, password hashing, secret generation."""

from turnstile.infrastructure.security.bcrypt_password_service import (
    BcryptPasswordService,
)
from turnstile.infrastructure.security.jwt_service import JWTService
from turnstile.infrastructure.security.random_generator import SecureRandomGenerator

__all__ = ["BcryptPasswordService", "JWTService", "SecureRandomGenerator"]
