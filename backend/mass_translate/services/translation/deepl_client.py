"""
DeepL Provider Client

Speaks the DeepL v2 REST API over HTTPS:
- Text: POST /v2/translate
- Documents: upload, poll status, download result

DeepL failures are mapped onto typed errors so the HTTP layer never has to
inspect message strings.
"""
import asyncio
import logging
from typing import Any, Optional, Protocol

import httpx

from mass_translate.config.constants import (
    PROVIDER_DEEPL,
    DEEPL_FREE_API_URL,
    DEEPL_PRO_API_URL,
    DEEPL_FREE_KEY_SUFFIX,
    DEEPL_HTTP_TIMEOUT_SEC,
    DEEPL_MAX_RETRIES,
    DEEPL_RETRY_BACKOFF_SEC,
    DEEPL_DOCUMENT_POLL_MIN_SEC,
    DEEPL_DOCUMENT_POLL_MAX_SEC,
)
from mass_translate.config.settings import settings
from mass_translate.services.translation.exceptions import (
    ProviderError,
    InvalidSourceLanguageError,
    InvalidTargetLanguageError,
)
from mass_translate.services.translation.models import (
    RequestFormat,
    TranslationRequest,
    TranslationResponse,
)

logger = logging.getLogger(__name__)

# HTTP statuses DeepL uses for conditions worth retrying
_RETRYABLE_STATUSES = {429, 500, 502, 503, 504, 529}


class TranslationProvider(Protocol):
    """Interface the pipeline expects from an upstream translation service."""

    provider_id: str

    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        ...


def default_server_url(auth_key: str) -> str:
    """Free-tier keys end in ':fx' and must use the free endpoint."""
    if auth_key.endswith(DEEPL_FREE_KEY_SUFFIX):
        return DEEPL_FREE_API_URL
    return DEEPL_PRO_API_URL


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase
    if isinstance(body, dict):
        message = body.get("message") or ""
        detail = body.get("detail")
        return f"{message}, {detail}" if detail else message
    return str(body)


def classify_error(message: str, status_code: Optional[int] = None) -> ProviderError:
    """Map a DeepL error message onto the typed provider errors."""
    lowered = message.lower()
    if "source_lang" in lowered or "source language" in lowered:
        return InvalidSourceLanguageError(message)
    if "target_lang" in lowered or "target language" in lowered:
        return InvalidTargetLanguageError(message)
    return ProviderError(message, status_code=status_code)


def error_from_response(response: httpx.Response) -> ProviderError:
    status_code = response.status_code
    message = _error_message(response)

    if status_code == 400:
        return classify_error(message, status_code)
    if status_code == 403:
        return ProviderError(f"DeepL authorization failed: {message}", status_code=status_code)
    if status_code == 456:
        return ProviderError(f"DeepL quota exceeded: {message}", status_code=status_code)
    if status_code in _RETRYABLE_STATUSES:
        return ProviderError(
            f"DeepL unavailable ({status_code}): {message}",
            retryable=True,
            status_code=status_code,
        )
    return ProviderError(f"DeepL request failed ({status_code}): {message}", status_code=status_code)


class DeepLClient:
    """Async DeepL adapter exposing a single translate() operation."""

    provider_id = PROVIDER_DEEPL

    def __init__(
        self,
        auth_key: str,
        *,
        server_url: Optional[str] = None,
        timeout: float = DEEPL_HTTP_TIMEOUT_SEC,
        max_retries: int = DEEPL_MAX_RETRIES,
        retry_backoff: float = DEEPL_RETRY_BACKOFF_SEC,
        poll_interval: float = DEEPL_DOCUMENT_POLL_MIN_SEC,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not auth_key:
            raise ValueError("DeepL auth key is empty; set DEEPL_API")
        self.server_url = (server_url or default_server_url(auth_key)).rstrip("/")
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self.poll_interval = poll_interval
        self._http = httpx.AsyncClient(
            base_url=self.server_url,
            headers={"Authorization": f"DeepL-Auth-Key {auth_key}"},
            timeout=timeout,
            transport=transport,
        )

    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        """Translate a text or file request.

        Raises:
            InvalidSourceLanguageError: DeepL rejected the source language
            InvalidTargetLanguageError: DeepL rejected the target language
            ProviderError: Any other upstream failure
        """
        if request.format is RequestFormat.TEXT:
            return await self._translate_text(request)
        return await self._translate_document(request)

    async def close(self):
        await self._http.aclose()

    async def _translate_text(self, request: TranslationRequest) -> TranslationResponse:
        if not request.text:
            return TranslationResponse.for_text(())

        body: dict[str, Any] = {"text": list(request.text), "target_lang": request.target_lang}
        if request.source_lang:
            body["source_lang"] = request.source_lang

        response = await self._request("POST", "/v2/translate", json=body)
        translations = self._json(response).get("translations")
        if not isinstance(translations, list) or len(translations) != len(request.text):
            raise ProviderError(
                f"DeepL returned {len(translations) if isinstance(translations, list) else 'no'} "
                f"translations for {len(request.text)} segments"
            )

        logger.info(f"DeepL translated {len(request.text)} segment(s) ({request.source_lang or 'auto'} > {request.target_lang})")
        return TranslationResponse.for_text(t.get("text", "") for t in translations)

    async def _translate_document(self, request: TranslationRequest) -> TranslationResponse:
        form = {"target_lang": request.target_lang, "filename": request.filename}
        if request.source_lang:
            form["source_lang"] = request.source_lang

        upload = await self._request(
            "POST",
            "/v2/document",
            data=form,
            files={"file": (request.filename, request.data, "application/octet-stream")},
        )
        handle = self._json(upload)
        document_id = handle.get("document_id")
        document_key = handle.get("document_key")
        if not document_id or not document_key:
            raise ProviderError("DeepL document upload returned no document handle")
        logger.info(f"DeepL document {document_id} uploaded ({request.filename}, {len(request.data)} bytes)")

        await self._wait_for_document(document_id, document_key)

        result = await self._request(
            "POST",
            f"/v2/document/{document_id}/result",
            data={"document_key": document_key},
        )
        logger.info(f"DeepL document {document_id} downloaded ({len(result.content)} bytes)")
        return TranslationResponse.for_file(result.content)

    async def _wait_for_document(self, document_id: str, document_key: str):
        while True:
            response = await self._request(
                "POST",
                f"/v2/document/{document_id}",
                data={"document_key": document_key},
            )
            status = self._json(response)
            state = status.get("status")

            if state == "done":
                return
            if state == "error":
                message = status.get("error_message") or status.get("message") or "document translation failed"
                raise classify_error(message)
            if state not in ("queued", "translating"):
                raise ProviderError(f"DeepL returned unknown document status: {state!r}")

            remaining = status.get("seconds_remaining")
            delay = self.poll_interval
            if isinstance(remaining, (int, float)) and remaining > 0:
                delay = min(max(float(remaining), self.poll_interval), DEEPL_DOCUMENT_POLL_MAX_SEC)
            logger.debug(f"DeepL document {document_id} is {state}, polling again in {delay:.1f}s")
            await asyncio.sleep(delay)

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        attempt = 0
        while True:
            try:
                response = await self._http.request(method, path, **kwargs)
            except httpx.TimeoutException as e:
                error = ProviderError(f"DeepL request timed out: {e}", retryable=True)
            except httpx.TransportError as e:
                error = ProviderError(f"DeepL connection failed: {e}", retryable=True)
            else:
                if response.is_success:
                    return response
                error = error_from_response(response)

            if not error.retryable or attempt >= self.max_retries:
                raise error

            delay = self.retry_backoff * (2 ** attempt)
            attempt += 1
            logger.warning(f"{error} - retry {attempt}/{self.max_retries} in {delay:.1f}s")
            await asyncio.sleep(delay)

    @staticmethod
    def _json(response: httpx.Response) -> dict:
        try:
            body = response.json()
        except ValueError as e:
            raise ProviderError(f"DeepL returned invalid JSON: {e}") from e
        if not isinstance(body, dict):
            raise ProviderError("DeepL returned an unexpected response body")
        return body


_deepl_client: Optional[DeepLClient] = None
_deepl_client_lock = asyncio.Lock()


async def get_deepl_client() -> DeepLClient:
    """Get or create the global DeepL client instance.

    Construction happens once; concurrent first callers wait on the lock and
    all receive the same instance.
    """
    global _deepl_client

    if _deepl_client is None:
        async with _deepl_client_lock:
            if _deepl_client is None:
                if not settings.DEEPL_API:
                    raise ProviderError("DeepL API key is not configured (DEEPL_API)")
                _deepl_client = DeepLClient(settings.DEEPL_API, server_url=settings.DEEPL_API_URL)
                logger.info(f"DeepL client initialized ({_deepl_client.server_url})")

    return _deepl_client


async def close_deepl_client():
    global _deepl_client
    if _deepl_client is not None:
        await _deepl_client.close()
        _deepl_client = None
