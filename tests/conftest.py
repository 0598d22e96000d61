"""
Shared test fixtures and configuration for entire test suite.

Provides: deterministic fake embedding model, in-memory vector index,
SQLite async database sessions, pipeline and document factories
Dependencies: pytest, pytest-asyncio, sqlalchemy, aiosqlite, numpy
System role: Test infrastructure and fixture management
"""

from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from docsearch.boundary.db.create_tables import create_all_tables, drop_all_tables
from docsearch.boundary.db.CRUD.document_crud import document_crud
from docsearch.boundary.db.models.document_model import DocumentModel, DocumentStatus
from docsearch.boundary.vdb import FaissVectorIndex
from docsearch.core.document_processing import IndexingPipeline
from docsearch.core.document_processing.tasks import (
    Embedder,
    EmbeddingModelHandle,
    VectorStoreTask,
)
from tests.fakes import TEST_COLLECTION, TEST_DIMENSION, FakeSentenceTransformer


@pytest.fixture
def fake_model() -> FakeSentenceTransformer:
    """Provide a fresh fake embedding model."""
    return FakeSentenceTransformer()


@pytest.fixture
def model_handle(fake_model: FakeSentenceTransformer) -> EmbeddingModelHandle:
    """Provide a model handle that loads the fake model."""
    return EmbeddingModelHandle(model_name="fake-model", model_factory=lambda: fake_model)


@pytest.fixture
def embedder(model_handle: EmbeddingModelHandle) -> Embedder:
    """Provide an embedder backed by the fake model."""
    return Embedder(model_handle, dimension=TEST_DIMENSION)


@pytest.fixture
def vector_index() -> FaissVectorIndex:
    """Provide an in-memory vector index with the test collection created."""
    index = FaissVectorIndex()
    index.ensure_collection(TEST_COLLECTION, TEST_DIMENSION, "cosine")
    return index


@pytest.fixture
def vector_store_task(vector_index: FaissVectorIndex) -> VectorStoreTask:
    """Provide a vector store task writing to the test collection."""
    return VectorStoreTask(vector_index, TEST_COLLECTION)


@pytest.fixture
def pipeline(embedder: Embedder, vector_store_task: VectorStoreTask) -> IndexingPipeline:
    """Provide an indexing pipeline wired to the fake model and in-memory index."""
    return IndexingPipeline(embedder=embedder, vector_store_task=vector_store_task)


@pytest.fixture
async def test_engine():
    """
    Create in-memory SQLite async engine with all tables.

    Yields:
        AsyncEngine: Engine shared by every session of the test
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    await create_all_tables(engine)

    yield engine

    await drop_all_tables(engine)
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    """Provide session factory bound to the test engine."""
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def test_async_db(session_factory: async_sessionmaker[AsyncSession]):
    """
    Create async database session for testing.

    Yields:
        AsyncSession: Test database session with cleanup
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def create_text_document(test_async_db: AsyncSession, tmp_path: Path):
    """
    Factory writing a text file and creating its document row.

    Returns:
        Callable: async (text, name="notes.txt", status=NOT_INDEXED) -> DocumentModel
    """

    async def _create(
        text: str,
        name: str = "notes.txt",
        status: DocumentStatus = DocumentStatus.NOT_INDEXED,
    ) -> DocumentModel:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        document = await document_crud.create(
            test_async_db,
            filename=name,
            original_name=name,
            path=str(path),
            size=len(text.encode("utf-8")),
            mimetype="text/plain",
            description=f"Description of {name}",
            status=status,
        )
        await test_async_db.commit()
        return document

    return _create
