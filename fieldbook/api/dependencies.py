# ============================================================================
# FILE: fieldbook/api/dependencies.py
# Shared FastAPI dependencies
# ============================================================================
from typing import Callable

from redis.asyncio.lock import Lock

from fieldbook.config.redis import get_redis, RedisKeys
from fieldbook.config.settings import get_settings


async def get_booking_lock() -> Callable[[str], Lock]:
    """
    Factory for the per-business booking lock.

    Held around the re-check + insert of a booking so that concurrent
    submissions for one tenant are serialised across app instances.
    """
    redis_client = await get_redis()
    settings = get_settings()

    def lock_for(business_id: str) -> Lock:
        return redis_client.lock(
            RedisKeys.BOOKING_LOCK.format(business_id=business_id),
            timeout=settings.BOOKING_LOCK_TIMEOUT_SECONDS,
            blocking_timeout=settings.BOOKING_LOCK_WAIT_SECONDS,
        )

    return lock_for
