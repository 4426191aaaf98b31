"""Domain layer: identity model, one-time codes, refresh tokens, ports."""
