"""Test suite for turnstile.

Test structure:
- unit/: Unit tests - domain logic and single services in isolation
- integration/: Integration tests - full flows through the wired service graph
"""
