"""
Logging Module
==============

Structured logging using structlog with JSON output for production
and colored console output for development.

Usage:
    from shared.logging import get_logger, setup_logging

    # Setup at application start
    setup_logging()

    # Get logger for a module
    logger = get_logger(__name__)

    # Log with context
    logger.info("verification_succeeded", verification_id="wid_...")
    logger.error("worldid_transport_error", error=str(e))
"""

from shared.logging.logger import (
    bind_context,
    clear_context,
    get_logger,
    mask_hash,
    setup_logging,
)


__all__ = [
    "bind_context",
    "clear_context",
    "get_logger",
    "mask_hash",
    "setup_logging",
]
