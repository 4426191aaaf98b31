"""Turnstile: storage-agnostic authentication core.

Issues, rotates and revokes session credentials and drives the one-time code
flows (email/phone verification, password reset, magic links) together with
federated account linking. Persistence, delivery and the job queue are
consumed through protocols defined in ``turnstile.domain.protocols``.
"""

__version__ = "0.1.0"
