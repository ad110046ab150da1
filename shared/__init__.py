"""
Human Verification Relay - Shared Library
==========================================

Building blocks for relaying World ID proofs to the verification authority.

Modules:
    - config: Configuration management with Pydantic Settings
    - logging: Structured logging with structlog
    - worldid: Proof validation, upstream verification and records
    - ratelimit: Sliding-window request limiting (memory / Redis)
    - database: Redis client for shared state
    - models: Shared response models

Version: 0.1.0
"""

__version__ = "0.1.0"
__author__ = "Human Relay Team"

from shared.config import settings
from shared.logging import get_logger, setup_logging

__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
    "__version__",
]
