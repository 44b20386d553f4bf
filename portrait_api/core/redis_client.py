import redis.asyncio as redis
from portrait_api.core.config import settings

redis_client = None


async def get_redis_client():
    """
    Provide a Redis client dependency.
    """
    global redis_client
    if redis_client is None:
        redis_client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True
        )
    return redis_client


async def close_redis_client():
    global redis_client
    if redis_client is not None:
        await redis_client.aclose()
        redis_client = None
