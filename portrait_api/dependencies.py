from typing import Optional

from fastapi import Depends

from portrait_api.core.config import Settings, settings
from portrait_api.core.paths import get_upload_dir, get_portraits_dir, get_rate_limit_dir
from portrait_api.core.rate_limit import (
    FileRateLimitStore,
    RateLimitStore,
    RedisRateLimitStore,
    SlidingWindowRateLimiter,
)
from portrait_api.core.redis_client import get_redis_client
from portrait_api.services.image_normalizer import PortraitNormalizer
from portrait_api.services.portrait_store import PortraitStore

# 요청마다 새로 만들어도 되는 가벼운 객체들. 상태는 모두 디스크/redis 에 있다.


def get_settings() -> Settings:
    return settings


def get_portrait_store(config: Settings = Depends(get_settings)) -> PortraitStore:
    upload_dir = get_upload_dir(config.UPLOAD_DIRECTORY)
    return PortraitStore(base_dir=get_portraits_dir(upload_dir))


def get_normalizer(config: Settings = Depends(get_settings)) -> PortraitNormalizer:
    return PortraitNormalizer(target_size=config.PORTRAIT_SIZE, quality=config.PORTRAIT_JPEG_QUALITY)


async def get_rate_limit_store(config: Settings = Depends(get_settings)) -> RateLimitStore:
    if config.RATE_LIMIT_BACKEND == "redis":
        client = await get_redis_client()
        return RedisRateLimitStore(client, ttl_seconds=config.RATE_LIMIT_WINDOW_SECONDS)
    upload_dir = get_upload_dir(config.UPLOAD_DIRECTORY)
    return FileRateLimitStore(get_rate_limit_dir(upload_dir))


async def get_rate_limiter(
    config: Settings = Depends(get_settings),
    store: RateLimitStore = Depends(get_rate_limit_store),
) -> Optional[SlidingWindowRateLimiter]:
    if not config.RATE_LIMIT_ENABLED:
        return None
    return SlidingWindowRateLimiter(
        store,
        max_requests=config.RATE_LIMIT_MAX_REQUESTS,
        window_seconds=config.RATE_LIMIT_WINDOW_SECONDS,
    )


__all__ = [
    "get_settings",
    "get_portrait_store",
    "get_normalizer",
    "get_rate_limit_store",
    "get_rate_limiter",
]
