import asyncio
import uuid
from typing import Optional

from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from mass_translate.services.translation import (
    RequestFormat,
    TranslationRequest,
    TranslationResponse,
)


def unique_email(prefix: str = 'user') -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}@example.com"


def create_user(client: TestClient, email: Optional[str] = None, password: str = 'pass123'):
    if email is None:
        email = unique_email()
    return client.post('/api/auth/register', json={'email': email, 'password': password})


def login(client: TestClient, email: str, password: str) -> dict:
    r = client.post('/api/auth/login', json={'email': email, 'password': password})
    assert r.status_code == 200, r.text
    return {'Authorization': f"Bearer {r.json()['token']}"}


class FakeProvider:
    """Stands in for DeepL: prefixes each segment / file with the target language."""

    provider_id = "deepl"

    def __init__(self, error: Optional[Exception] = None, delay: float = 0.0):
        self.calls: list[TranslationRequest] = []
        self.error = error
        self.delay = delay

    async def translate(self, request: TranslationRequest) -> TranslationResponse:
        self.calls.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if request.format is RequestFormat.TEXT:
            return TranslationResponse.for_text(f"[{request.target_lang}] {s}" for s in request.text)
        return TranslationResponse.for_file(b"translated:" + request.data)


class BrokenRedis:
    """Redis client whose every call fails at the transport level."""

    async def get(self, *args, **kwargs):
        raise RedisConnectionError("Connection refused")

    async def set(self, *args, **kwargs):
        raise RedisConnectionError("Connection refused")


def scripted_receive(*steps):
    """ASGI receive that plays back ``(delay, message)`` steps, then reports a disconnect."""
    pending = list(steps)

    async def receive():
        if not pending:
            return {"type": "http.disconnect"}
        delay, message = pending.pop(0)
        if delay:
            await asyncio.sleep(delay)
        return message

    return receive


def body_chunk(body: bytes, more_body: bool = False) -> dict:
    return {"type": "http.request", "body": body, "more_body": more_body}


async def asgi_post(app, path: str, receive, content_type: str = "application/json"):
    """Drive one POST through the ASGI app directly and return (status, body)."""
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "POST",
        "scheme": "http",
        "path": path,
        "raw_path": path.encode("ascii"),
        "root_path": "",
        "query_string": b"",
        "headers": [(b"host", b"testserver"), (b"content-type", content_type.encode("ascii"))],
        "client": ("testclient", 50000),
        "server": ("testserver", 80),
    }
    messages = []

    async def send(message):
        messages.append(message)

    await app(scope, receive, send)
    start = next(m for m in messages if m["type"] == "http.response.start")
    body = b"".join(m.get("body", b"") for m in messages if m["type"] == "http.response.body")
    return start["status"], body
