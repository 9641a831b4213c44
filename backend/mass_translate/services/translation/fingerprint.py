import hashlib

from mass_translate.config.constants import CACHE_KEY_PREFIX
from mass_translate.services.translation.models import TranslationRequest


def fingerprint(provider_id: str, request: TranslationRequest) -> str:
    """
    Derive the cache key for a translation request.

    Format: ``translate:{provider}:{source}:{target}:{sha256(payload)}``.
    The key does not include the caller: translations are treated as pure
    functions of (languages, payload), so all users share cache entries.
    Text and file payloads share one key space: a file whose bytes equal a
    framed text payload (e.g. ``5:hello`` and ``["hello"]``) gets the same key,
    and the cached variant check keeps such entries from being served.
    """
    digest = hashlib.sha256(request.payload()).hexdigest()
    return f"{CACHE_KEY_PREFIX}:{provider_id}:{request.source_lang}:{request.target_lang}:{digest}"
