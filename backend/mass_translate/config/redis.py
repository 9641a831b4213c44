from typing import Optional
import redis.asyncio as redis
from mass_translate.config.settings import settings

_redis: Optional[redis.Redis] = None


def redis_url() -> str:
    url = settings.REDIS_URL
    if "://" not in url:
        # Plain "host:port" address
        url = f"redis://{url}"
    return url


async def get_redis() -> redis.Redis:
    global _redis
    if _redis is None:
        _redis = redis.Redis.from_url(redis_url(), decode_responses=False)
    return _redis


async def close_redis():
    global _redis
    if _redis is not None:
        await _redis.aclose()
        _redis = None
