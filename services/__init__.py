"""
Human Verification Relay Services
=================================

Services:
- verification: World ID proof relay and verification records
"""

__all__ = [
    "verification",
]
