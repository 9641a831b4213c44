"""
Translation Cache - Redis-backed store for provider responses

Entries are keyed by request fingerprint and expire after two hours.
The cache is strictly an optimization: callers treat every CacheError as a
miss (on read) or ignore it (on write).
"""
from typing import Optional
import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from mass_translate.config.constants import TRANSLATION_TTL_SEC, MAX_CACHEABLE_BYTES, CACHE_ENTRY_OVERHEAD_BYTES
from mass_translate.services.translation.exceptions import CacheError
from mass_translate.services.translation.models import RequestFormat, TranslationRequest, TranslationResponse

logger = logging.getLogger(__name__)


class TranslationCache:
    """Get/Set of serialized translation responses with a TTL."""

    def __init__(
        self,
        client: redis.Redis,
        ttl: int = TRANSLATION_TTL_SEC,
        max_entry_bytes: int = MAX_CACHEABLE_BYTES,
    ):
        self._redis = client
        self.ttl = ttl
        self.max_entry_bytes = max_entry_bytes

    def fits(self, request: TranslationRequest) -> bool:
        """
        Whether the response to ``request`` is expected to fit in one entry.

        Uses the same bound as set(): file responses are stored base64-encoded,
        so their estimate is 4/3 of the payload.
        """
        if request.format is RequestFormat.FILE:
            estimate = 4 * ((request.payload_size + 2) // 3)
        else:
            # Quotes and separator per segment
            estimate = request.payload_size + 4 * len(request.text)
        return estimate + CACHE_ENTRY_OVERHEAD_BYTES <= self.max_entry_bytes

    async def get(self, key: str) -> Optional[TranslationResponse]:
        """
        Look up a cached response.

        Returns:
            The cached response, or None when the key is absent

        Raises:
            CacheError: On transport or decode failure
        """
        try:
            raw = await self._redis.get(key)
        except RedisError as e:
            raise CacheError(f"cache get failed: {e}") from e

        if raw is None:
            return None

        try:
            return TranslationResponse.from_json(raw)
        except (ValueError, TypeError) as e:
            raise CacheError(f"cache entry {key} could not be decoded: {e}") from e

    async def set(self, key: str, response: TranslationResponse) -> bool:
        """
        Store a response under ``key`` with the cache TTL.

        Returns:
            False if the serialized response is too large to cache

        Raises:
            CacheError: On transport failure
        """
        value = response.to_json()
        if len(value) > self.max_entry_bytes:
            logger.info(f"Skipping cache write for {key}: {len(value)} bytes exceeds {self.max_entry_bytes}")
            return False

        try:
            await self._redis.set(key, value, ex=self.ttl)
        except RedisError as e:
            raise CacheError(f"cache set failed: {e}") from e
        return True
