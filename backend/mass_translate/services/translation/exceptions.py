"""
Translation Service Exceptions

Custom exceptions for translation pipeline errors.
"""


class TranslationServiceError(Exception):
    """Base exception for translation service errors"""
    pass


class MalformedInputError(TranslationServiceError):
    """Raised when a client request cannot be turned into a translation request"""
    pass


class ProviderError(TranslationServiceError):
    """Raised when the upstream provider fails to translate"""

    def __init__(self, message: str, *, retryable: bool = False, status_code: int | None = None):
        super().__init__(message)
        self.retryable = retryable
        self.status_code = status_code


class InvalidSourceLanguageError(ProviderError):
    """Raised when the provider rejects the source language"""

    def __init__(self, detail: str | None = None):
        super().__init__("Invalid Source Language", status_code=400)
        self.detail = detail


class InvalidTargetLanguageError(ProviderError):
    """Raised when the provider rejects the target language"""

    def __init__(self, detail: str | None = None):
        super().__init__("Invalid Target Language", status_code=400)
        self.detail = detail


class TranslationTimeoutError(TranslationServiceError):
    """Raised when a translation exceeds its request deadline"""
    pass


class CacheError(TranslationServiceError):
    """Raised when the translation cache cannot be read or written"""
    pass
