"""
Translate API - DeepL translation with a shared result cache

POST /deepl/translate dispatches on the request media type:
- application/json     -> text segments
- multipart/form-data  -> a single document upload
"""
import asyncio
import logging
import os
from typing import Awaitable, Callable
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import ValidationError
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import ClientDisconnect

from mass_translate.api.deps import get_translation_pipeline, require_translate_access
from mass_translate.config.constants import (
    MAX_FILE_SIZE,
    ALLOWED_FILE_EXTENSIONS,
    TRANSLATED_FILE_PREFIX,
    DISCONNECT_POLL_INTERVAL_SEC,
    CLIENT_CLOSED_REQUEST_STATUS,
)
from mass_translate.config.settings import settings
from mass_translate.schemas.translate import TextTranslateRequest, TextTranslateResponse
from mass_translate.services.translation import (
    TranslationPipeline,
    TranslationRequest,
    MalformedInputError,
    ProviderError,
    InvalidSourceLanguageError,
    InvalidTargetLanguageError,
    TranslationTimeoutError,
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_translate_access)])


class ClientDisconnectedError(Exception):
    """Raised when the client goes away before the translation finished"""
    pass


@router.post("/deepl/translate")
async def deepl_translate(
    request: Request,
    pipeline: TranslationPipeline = Depends(get_translation_pipeline),
):
    """Translate text segments (JSON) or a document (multipart)."""
    media_type = _media_type(request.headers.get("content-type", ""))

    try:
        if media_type == "multipart/form-data":
            return await _run_until_done(request, pipeline, _translate_file)
        if media_type == "application/json":
            return await _run_until_done(request, pipeline, _translate_text)
        raise MalformedInputError("unsupported content type")
    except MalformedInputError as e:
        logger.info(f"Rejected translate request: {e}")
        return PlainTextResponse(str(e), status_code=400)
    except (InvalidSourceLanguageError, InvalidTargetLanguageError) as e:
        logger.info(f"Error translating: {e} ({e.detail})")
        return PlainTextResponse(f"Error translating: {e}", status_code=400)
    except ProviderError as e:
        logger.error(f"Error translating: {e}")
        return PlainTextResponse("Error translating", status_code=500)
    except TranslationTimeoutError as e:
        logger.warning(f"Error translating: {e}")
        return PlainTextResponse("Error translating", status_code=500)
    except ClientDisconnectedError:
        logger.info("Client disconnected, translation cancelled")
        return Response(status_code=CLIENT_CLOSED_REQUEST_STATUS)


async def _translate_text(request: Request, pipeline: TranslationPipeline, body_read: asyncio.Event) -> Response:
    body = await _read_body(request, MAX_FILE_SIZE, "request body too large")
    body_read.set()
    try:
        params = TextTranslateRequest.model_validate_json(body)
    except ValidationError as e:
        logger.info(f"Error decoding parameters: {e.error_count()} error(s)")
        raise MalformedInputError("Invalid JSON in the request body") from e

    translation_request = TranslationRequest.for_text(params.text, params.source_lang, params.target_lang)
    outcome = await pipeline.translate(translation_request)

    payload = TextTranslateResponse(translation=list(outcome.response.text))
    return JSONResponse(payload.model_dump(), headers={"X-Cache": outcome.cache_status})


async def _translate_file(request: Request, pipeline: TranslationPipeline, body_read: asyncio.Event) -> Response:
    body = await _read_body(request, MAX_FILE_SIZE, "file too large")
    body_read.set()
    try:
        form = await Request(request.scope, _replay(body)).form()
    except (MultiPartException, StarletteHTTPException) as e:
        raise MalformedInputError("file required") from e

    try:
        upload = form.get("file")
        if not isinstance(upload, UploadFile):
            raise MalformedInputError("file required")

        filename = _clean_filename(upload.filename or "")
        if not is_file_allowed(filename):
            raise MalformedInputError("invalid file type")

        target_lang = _form_text(form.get("target_lang"))
        if not target_lang:
            raise MalformedInputError("invalid form no target language")
        source_lang = _form_text(form.get("source_lang"))

        data = await upload.read()
    finally:
        await form.close()

    translation_request = TranslationRequest.for_file(data, filename, source_lang, target_lang)
    outcome = await pipeline.translate(translation_request)

    return Response(
        content=outcome.response.data,
        media_type="application/octet-stream",
        headers={
            "Content-Disposition": content_disposition(TRANSLATED_FILE_PREFIX + filename),
            "X-Cache": outcome.cache_status,
        },
    )


async def _run_until_done(
    request: Request,
    pipeline: TranslationPipeline,
    handler: Callable[[Request, TranslationPipeline, asyncio.Event], Awaitable[Response]],
) -> Response:
    """
    Run ``handler`` bounded by the request deadline and the client connection.

    The deadline covers the whole request, body upload included. The
    disconnect watcher only starts once the handler has consumed the body,
    since both read from the same ASGI receive channel.
    """
    body_read = asyncio.Event()
    work = asyncio.ensure_future(handler(request, pipeline, body_read))
    watcher = asyncio.ensure_future(_wait_for_disconnect(request, body_read))
    try:
        done, _ = await asyncio.wait(
            {work, watcher},
            timeout=settings.TRANSLATE_TIMEOUT_SEC,
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        for task in (work, watcher):
            if not task.done():
                task.cancel()
        await asyncio.gather(work, watcher, return_exceptions=True)

    if work in done:
        return work.result()
    if watcher in done:
        raise ClientDisconnectedError()
    raise TranslationTimeoutError(f"deadline of {settings.TRANSLATE_TIMEOUT_SEC}s exceeded")


async def _wait_for_disconnect(request: Request, body_read: asyncio.Event):
    await body_read.wait()
    while not await request.is_disconnected():
        await asyncio.sleep(DISCONNECT_POLL_INTERVAL_SEC)


async def _read_body(request: Request, limit: int, too_large: str) -> bytes:
    """Read the request body, refusing anything larger than ``limit`` bytes."""
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise MalformedInputError(too_large)

    body = bytearray()
    try:
        async for chunk in request.stream():
            body += chunk
            if len(body) > limit:
                raise MalformedInputError(too_large)
    except ClientDisconnect as e:
        raise ClientDisconnectedError() from e
    return bytes(body)


def _replay(body: bytes):
    """ASGI receive callable that hands an already-read body to a new Request."""
    sent = False

    async def receive():
        nonlocal sent
        if sent:
            return {"type": "http.disconnect"}
        sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    return receive


def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def _form_text(value) -> str:
    return value.strip() if isinstance(value, str) else ""


def _clean_filename(filename: str) -> str:
    # Browsers may send full client paths; keep the last component only
    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    return "".join(c for c in name if c not in '"\r\n')


def is_file_allowed(filename: str) -> bool:
    return os.path.splitext(filename)[1].lower() in ALLOWED_FILE_EXTENSIONS


def content_disposition(filename: str) -> str:
    try:
        filename.encode("ascii")
    except UnicodeEncodeError:
        fallback = filename.encode("ascii", "replace").decode("ascii")
        return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"
    return f"attachment; filename=\"{filename}\""
