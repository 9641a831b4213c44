"""
Translation Service Module

Re-exports the pipeline building blocks and exceptions.
"""
from .models import (
    RequestFormat,
    TranslationRequest,
    TranslationResponse,
    TranslationOutcome,
)
from .fingerprint import fingerprint
from .cache import TranslationCache
from .deepl_client import DeepLClient, TranslationProvider, get_deepl_client, close_deepl_client
from .pipeline import TranslationPipeline
from .exceptions import (
    TranslationServiceError,
    MalformedInputError,
    ProviderError,
    InvalidSourceLanguageError,
    InvalidTargetLanguageError,
    TranslationTimeoutError,
    CacheError,
)

__all__ = [
    "RequestFormat",
    "TranslationRequest",
    "TranslationResponse",
    "TranslationOutcome",
    "fingerprint",
    "TranslationCache",
    "DeepLClient",
    "TranslationProvider",
    "get_deepl_client",
    "close_deepl_client",
    "TranslationPipeline",
    "TranslationServiceError",
    "MalformedInputError",
    "ProviderError",
    "InvalidSourceLanguageError",
    "InvalidTargetLanguageError",
    "TranslationTimeoutError",
    "CacheError",
]
