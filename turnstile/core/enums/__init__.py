"""Core enums package.

Usage:
    from turnstile.core.enums import ErrorCode, Environment
"""

from turnstile.core.enums.environment import Environment
from turnstile.core.enums.error_code import ErrorCode
from turnstile.core.enums.policy import DeliveryChannel, LinkingMode, MultipleMatchPolicy

__all__ = [
    "DeliveryChannel",
    "Environment",
    "ErrorCode",
    "LinkingMode",
    "MultipleMatchPolicy",
]
