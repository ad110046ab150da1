"""
Human Verification Relay Test Suite
===================================

Test organization:
- tests/unit/          - Unit tests (no network, no Redis)
- tests/services/      - HTTP tests against the ASGI app

Run tests:
    pytest                          # All tests
    pytest tests/unit               # Unit tests only
"""
