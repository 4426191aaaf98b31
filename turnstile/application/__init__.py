"""Application layer: services orchestrating the authentication flows."""
