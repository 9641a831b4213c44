"""
Translation Pipeline

Orchestrates a single translation request:
    fingerprint -> cache lookup -> provider call -> cache write-back

The cache never decides the outcome: lookup failures count as misses and
write failures are only logged, so the client always receives the
provider's response on a miss.
"""
import logging
from typing import Awaitable, Callable, Optional

from mass_translate.config.constants import PROVIDER_DEEPL
from mass_translate.services.translation.cache import TranslationCache
from mass_translate.services.translation.deepl_client import TranslationProvider
from mass_translate.services.translation.exceptions import CacheError
from mass_translate.services.translation.fingerprint import fingerprint
from mass_translate.services.translation.models import (
    TranslationOutcome,
    TranslationRequest,
    TranslationResponse,
)

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[], Awaitable[TranslationProvider]]


class TranslationPipeline:
    """Cache-fronted translation against a single provider."""

    def __init__(
        self,
        cache: Optional[TranslationCache],
        client_factory: ProviderFactory,
        provider_id: str = PROVIDER_DEEPL,
    ):
        self._cache = cache
        self._client_factory = client_factory
        self.provider_id = provider_id

    async def translate(self, request: TranslationRequest) -> TranslationOutcome:
        """
        Translate ``request``, serving it from the cache when possible.

        Raises:
            ProviderError: (and subclasses) when the provider fails on a miss
        """
        key = fingerprint(self.provider_id, request)
        cacheable = self._cache is not None and self._cache.fits(request)

        if cacheable:
            cached = await self._lookup(key, request)
            if cached is not None:
                logger.info(f"Cache HIT {key}")
                return TranslationOutcome(response=cached, cache_hit=True)
        else:
            logger.debug(f"Payload of {request.payload_size} bytes bypasses the cache")

        client = await self._client_factory()
        response = await client.translate(request)

        if cacheable:
            await self._store(key, response)

        logger.info(f"Cache MISS {key}")
        return TranslationOutcome(response=response, cache_hit=False)

    async def _lookup(self, key: str, request: TranslationRequest) -> Optional[TranslationResponse]:
        try:
            cached = await self._cache.get(key)
        except CacheError as e:
            logger.warning(f"cache error: {e}")
            return None

        if cached is not None and not cached.matches(request):
            logger.warning(f"Ignoring cache entry {key}: does not match the request shape")
            return None
        return cached

    async def _store(self, key: str, response: TranslationResponse):
        try:
            await self._cache.set(key, response)
        except CacheError as e:
            logger.warning(f"cache set error: {e}")
