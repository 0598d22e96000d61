"""
Fixtures for HTTP API tests.

Builds an app with the real routers and dependencies, wired to a file-based
SQLite database, an in-memory vector index and the fake embedding model.
The indexing queue runs on the TestClient event loop.
"""

from contextlib import asynccontextmanager
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from docsearch.api import api_router
from docsearch.api.deps import ServiceCache, get_service_cache
from docsearch.boundary.db import get_async_db
from docsearch.boundary.db.create_tables import create_all_tables, drop_all_tables
from docsearch.boundary.vdb import FaissVectorIndex
from docsearch.configs import Settings
from docsearch.configs.pipeline import PipelineSettings
from docsearch.configs.vector_store import VectorStoreSettings
from docsearch.core.document_processing.tasks import EmbeddingModelHandle
from tests.fakes import TEST_COLLECTION, TEST_DIMENSION, FakeSentenceTransformer

API_PREFIX = "/api/v1"


@pytest.fixture
def api_settings(tmp_path: Path) -> Settings:
    """Settings pointing uploads at a temporary directory."""
    return Settings(
        pipeline=PipelineSettings(
            upload_directory=str(tmp_path / "uploads"),
            max_file_size=4096,
            resume_on_startup=False,
        ),
        vector_store=VectorStoreSettings(
            store_type="memory",
            collection_name=TEST_COLLECTION,
            dimension=TEST_DIMENSION,
        ),
    )


@pytest.fixture
def api_vector_index() -> FaissVectorIndex:
    index = FaissVectorIndex()
    index.ensure_collection(TEST_COLLECTION, TEST_DIMENSION, "cosine")
    return index


@pytest.fixture
def api_engine(tmp_path: Path) -> AsyncEngine:
    return create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'api.db'}")


@pytest.fixture
def api_session_factory(api_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(api_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def api_cache(
    api_settings: Settings,
    api_vector_index: FaissVectorIndex,
    api_session_factory: async_sessionmaker[AsyncSession],
) -> ServiceCache:
    """Service cache wired to test collaborators."""
    handle = EmbeddingModelHandle(
        model_name="fake-model", model_factory=FakeSentenceTransformer
    )
    return ServiceCache(
        settings=api_settings,
        model_handle=handle,
        vector_index=api_vector_index,
        session_factory=api_session_factory,
    )


@pytest.fixture
def client(
    api_cache: ServiceCache,
    api_engine: AsyncEngine,
    api_session_factory: async_sessionmaker[AsyncSession],
):
    """
    TestClient for the API routers.

    Yields:
        TestClient: Client whose lifespan creates tables and runs the queue
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await create_all_tables(api_engine)
        await api_cache.indexing_queue.start()
        yield
        await api_cache.indexing_queue.stop()
        await drop_all_tables(api_engine)
        await api_engine.dispose()

    async def override_get_async_db():
        async with api_session_factory() as session:
            yield session

    app = FastAPI(lifespan=lifespan)
    app.include_router(api_router, prefix=API_PREFIX)
    app.dependency_overrides[get_service_cache] = lambda: api_cache
    app.dependency_overrides[get_async_db] = override_get_async_db

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def join_queue(client: TestClient, api_cache: ServiceCache):
    """Block until background indexing has drained."""

    def _join() -> None:
        client.portal.call(api_cache.indexing_queue.join)

    return _join
