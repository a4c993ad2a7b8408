"""
Redis client initialization and connection management.

This module provides the Redis client used to publish ledger refresh events.
"""

import redis.asyncio as redis
from fleet_ledger.app.core.config import settings


# Create async Redis client
redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)

