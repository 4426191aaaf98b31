"""Federated identity presented by an external identity provider.

Transient: built once per federated login attempt from the provider's
profile response and never persisted as-is.
"""

from dataclasses import dataclass, field

from turnstile.domain.value_objects.identifier import Identifier, IdentifierKind


@dataclass(frozen=True, slots=True, kw_only=True)
class FederatedIdentity:
    """Identity asserted by a federated provider.

    Attributes:
        identifier: Federated identifier (provider + subject id).
        verified_emails: Emails the provider vouches for.
        verified_phone_numbers: Phone numbers the provider vouches for.
        display_name: Optional display name.
        profile_picture_url: Optional avatar URL.
    """

    identifier: Identifier
    verified_emails: tuple[str, ...] = field(default_factory=tuple)
    verified_phone_numbers: tuple[str, ...] = field(default_factory=tuple)
    display_name: str | None = None
    profile_picture_url: str | None = None

    def __post_init__(self) -> None:
        if self.identifier.kind is not IdentifierKind.FEDERATED:
            raise ValueError("FederatedIdentity requires a federated identifier")

    @property
    def provider(self) -> str:
        """Name of the issuing provider."""
        return self.identifier.provider or ""

    def verified_identifiers(self, kind: IdentifierKind) -> list[Identifier]:
        """Return the provider-verified identifiers of one kind.

        Args:
            kind: EMAIL or PHONE.

        Returns:
            Normalized identifiers, empty for any other kind.
        """
        if kind is IdentifierKind.EMAIL:
            return [Identifier.email(email) for email in self.verified_emails]
        if kind is IdentifierKind.PHONE:
            return [Identifier.phone(phone) for phone in self.verified_phone_numbers]
        return []
