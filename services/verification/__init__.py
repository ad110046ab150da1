"""
Verification Service
====================

HTTP relay between the World ID widget and the World ID verification
authority.

This service provides:
- Boundary validation of proof payloads
- Proof verification with the authority
- Verification record issuance
- Per-client rate limiting

Version: 0.1.0
"""

__version__ = "0.1.0"
