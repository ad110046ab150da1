"""
Shared Models
=============

Pydantic response models shared by relay services.
"""

from shared.models.common import ErrorResponse, HealthResponse


__all__ = [
    "ErrorResponse",
    "HealthResponse",
]
