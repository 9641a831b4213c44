import asyncio
import sys
import os

# Add backend to path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from mass_translate.config.constants import CACHE_KEY_PREFIX
from mass_translate.config.redis import get_redis, close_redis


async def clear_cache():
    print("🧹 Clearing cached translations...")
    redis = await get_redis()
    removed = 0
    async for key in redis.scan_iter(match=f"{CACHE_KEY_PREFIX}:*", count=500):
        removed += await redis.delete(key)
    print(f"✅ Removed {removed} cached translation(s).")
    await close_redis()

if __name__ == "__main__":
    asyncio.run(clear_cache())
