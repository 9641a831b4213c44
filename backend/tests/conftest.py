import asyncio
import os
import sys
import tempfile
from pathlib import Path

import pytest

# Add project root (2 levels up from tests/) to sys.path so tests can import 'mass_translate'
root = Path(__file__).resolve().parents[1]
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

# Settings are read at import time: point them at throwaway resources before
# anything from mass_translate is imported.
_test_dir = tempfile.mkdtemp(prefix="mass-translate-tests-")
os.environ["DB_URL"] = f"sqlite+aiosqlite:///{_test_dir}/test.db"
os.environ["DEEPL_API"] = "test-key:fx"
os.environ["SECRET_JWT"] = "test-secret-key-for-testing"
os.environ["ADMIN_EMAIL"] = "None"
os.environ["TRANSLATE_REQUIRE_AUTH"] = "false"

import fakeredis
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import NullPool

import mass_translate.models.database as database_module
from mass_translate.api.deps import get_translation_pipeline
from mass_translate.main import app
from mass_translate.models.database import Base as DBBase, get_db
from mass_translate.services.translation import TranslationCache, TranslationPipeline

from tests.helpers import FakeProvider


# Replace the app's database engine so that every request opens a fresh
# SQLite connection in whichever event loop TestClient is running.
test_engine = create_async_engine(os.environ["DB_URL"], poolclass=NullPool)
test_async_session = sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

database_module.engine = test_engine
database_module.AsyncSessionLocal = test_async_session


@pytest.fixture
def db():
    """Reset the schema and route get_db to the test database."""
    async def _reset():
        async with test_engine.begin() as conn:
            await conn.run_sync(DBBase.metadata.drop_all)
            await conn.run_sync(DBBase.metadata.create_all)

    asyncio.run(_reset())

    async def _get_test_db():
        async with test_async_session() as session:
            yield session

    app.dependency_overrides[get_db] = _get_test_db
    yield test_async_session
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
def redis_server():
    return fakeredis.FakeServer()


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def use_provider(redis_server):
    """Route the translate pipeline to fake Redis and the given provider."""
    def _use(provider, redis_factory=None):
        async def _pipeline():
            # New connection per request: TestClient may run each request in its own loop
            client = redis_factory() if redis_factory else fakeredis.FakeAsyncRedis(server=redis_server)

            async def _provider():
                return provider

            return TranslationPipeline(TranslationCache(client), _provider)

        app.dependency_overrides[get_translation_pipeline] = _pipeline

    yield _use
    app.dependency_overrides.pop(get_translation_pipeline, None)


@pytest.fixture
def make_client(use_provider):
    """Build a TestClient whose translate pipeline uses fake Redis and the given provider."""
    def _make(provider, redis_factory=None):
        use_provider(provider, redis_factory)
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client, fake_provider):
    return make_client(fake_provider)
