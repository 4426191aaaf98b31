"""Configuration-level policy enums.

These are plain value enums so that Settings can parse them from the
environment without importing the domain layer.
"""

from enum import Enum


class DeliveryChannel(str, Enum):
    """Medium a one-time code is delivered through."""

    EMAIL = "email"
    PHONE = "phone"


class LinkingMode(str, Enum):
    """Account-linking mode for federated logins."""

    DISABLED = "disabled"
    AUTOMATIC = "automatic"
    MANUAL = "manual"


class MultipleMatchPolicy(str, Enum):
    """What automatic linking does when several local users match."""

    MANUAL = "manual"
    NEW_USER = "new_user"
