"""
Verification Service Routes
===========================

API route handlers for the verification service.
"""

from services.verification.routes import verification


__all__ = ["verification"]
