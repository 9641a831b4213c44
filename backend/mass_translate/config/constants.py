"""
Application-wide constants for the translation pipeline.

Environment-dependent settings (API keys, Redis, database) belong in settings.py.
This file is for operational parameters that rarely change between environments.
"""

# ==============================================================================
# REQUEST LIMITS
# ==============================================================================

# Maximum request body for file translations (50 MiB)
MAX_FILE_SIZE: int = 50 << 20

# File extensions DeepL document translation accepts from clients
ALLOWED_FILE_EXTENSIONS: frozenset[str] = frozenset({".srt", ".txt", ".docx"})

# Prefix prepended to the filename of a translated document
TRANSLATED_FILE_PREFIX: str = "translated_"

# ==============================================================================
# TRANSLATION CACHE
# ==============================================================================

# Key namespace for cached translations
CACHE_KEY_PREFIX: str = "translate"

# Lifetime of a cached translation (seconds, 2 hours)
TRANSLATION_TTL_SEC: int = 2 * 60 * 60

# Largest payload / serialized response that is read from or written to the cache (5 MiB)
MAX_CACHEABLE_BYTES: int = 5 << 20

# Allowance for the JSON envelope around a cached response
CACHE_ENTRY_OVERHEAD_BYTES: int = 64

# ==============================================================================
# PROVIDERS
# ==============================================================================

PROVIDER_DEEPL: str = "deepl"

DEEPL_FREE_API_URL: str = "https://api-free.deepl.com"
DEEPL_PRO_API_URL: str = "https://api.deepl.com"

# Free-tier authentication keys carry this suffix
DEEPL_FREE_KEY_SUFFIX: str = ":fx"

# Per-call HTTP timeout for DeepL requests (seconds)
DEEPL_HTTP_TIMEOUT_SEC: float = 60.0

# Retries for 429 / 5xx / transport failures
DEEPL_MAX_RETRIES: int = 2

# Base delay for exponential backoff between retries (seconds)
DEEPL_RETRY_BACKOFF_SEC: float = 0.5

# Document status polling interval bounds (seconds)
DEEPL_DOCUMENT_POLL_MIN_SEC: float = 0.5
DEEPL_DOCUMENT_POLL_MAX_SEC: float = 5.0

# ==============================================================================
# HTTP
# ==============================================================================

# How often a running translation checks whether the client went away (seconds)
DISCONNECT_POLL_INTERVAL_SEC: float = 0.5

# Status logged and returned when the client disconnects mid-request
CLIENT_CLOSED_REQUEST_STATUS: int = 499

# ==============================================================================
# API PAGINATION & LIMITS
# ==============================================================================

# Default page size for the user listing
DEFAULT_USER_LIST_LIMIT: int = 10

# Largest accepted page size for the user listing
MAX_USER_LIST_LIMIT: int = 100

# Password validation
PASSWORD_MIN_LENGTH: int = 6
