"""
Database Module
===============

Async clients for the relay's shared state stores.

Clients:
- Redis (redis.asyncio)

Usage:
    from shared.database import RedisClient

    client = RedisClient.get_client()
    await client.ping()
"""

from shared.database.redis import RedisClient


__all__ = [
    "RedisClient",
]
