"""
Test suite for IndexingQueue.

System role: Verification of background indexing
"""

import asyncio

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from docsearch.boundary.db.CRUD.document_crud import document_crud
from docsearch.boundary.db.models.document_model import DocumentModel, DocumentStatus
from docsearch.boundary.vdb import FaissVectorIndex
from docsearch.core.document_processing import IndexingPipeline
from docsearch.core.document_processing.tasks import Embedder, VectorStoreTask
from docsearch.core.exceptions import IndexingInProgressError, SchemaConflictError
from docsearch.workers import IndexingQueue
from tests.fakes import TEST_COLLECTION, TEST_DIMENSION


@pytest.fixture
def make_document(session_factory: async_sessionmaker[AsyncSession], tmp_path):
    """Factory writing a text file and committing its row in its own session."""

    async def _make(
        name: str,
        text: str,
        status: DocumentStatus = DocumentStatus.NOT_INDEXED,
    ) -> DocumentModel:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        async with session_factory() as db:
            document = await document_crud.create(
                db,
                filename=name,
                original_name=name,
                path=str(path),
                size=len(text),
                mimetype="text/plain",
                status=status,
            )
            await db.commit()
        return document

    return _make


@pytest.fixture
async def queue(pipeline: IndexingPipeline, session_factory: async_sessionmaker[AsyncSession]):
    """Provide an unstarted queue, stopped after the test."""
    indexing_queue = IndexingQueue(pipeline, session_factory)
    yield indexing_queue
    await indexing_queue.stop()


async def status_of(session_factory: async_sessionmaker[AsyncSession], document_id) -> DocumentStatus:
    async with session_factory() as db:
        document = await document_crud.get_by_id(db, document_id)
    return document.status


class TestIndexingQueueInit:
    """Test suite for IndexingQueue construction."""

    def test_init_with_no_workers_should_raise(
        self, pipeline: IndexingPipeline, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        with pytest.raises(ValueError):
            IndexingQueue(pipeline, session_factory, worker_count=0)


class TestEnqueue:
    """Test suite for IndexingQueue.enqueue()."""

    @pytest.mark.asyncio
    async def test_enqueue_should_resolve_with_result(
        self, queue: IndexingQueue, make_document, session_factory, vector_index
    ) -> None:
        # Arrange
        document = await make_document("a.txt", "queued words to index")
        await queue.start()

        # Act
        result = await asyncio.wait_for(queue.enqueue(document.id), timeout=10)

        # Assert
        assert result.success is True
        assert result.chunk_count == 1
        assert queue.is_pending(document.id) is False
        assert await status_of(session_factory, document.id) == DocumentStatus.INDEXED
        assert vector_index.count(TEST_COLLECTION) == 1

    @pytest.mark.asyncio
    async def test_enqueue_duplicate_should_raise(
        self, queue: IndexingQueue, make_document
    ) -> None:
        document = await make_document("a.txt", "pending words")
        queue.enqueue(document.id)

        assert queue.is_pending(document.id) is True
        with pytest.raises(IndexingInProgressError):
            queue.enqueue(document.id)

    @pytest.mark.asyncio
    async def test_enqueue_after_completion_should_be_accepted(
        self, queue: IndexingQueue, make_document
    ) -> None:
        document = await make_document("a.txt", "index me twice")
        await queue.start()
        await queue.enqueue(document.id)

        result = await queue.enqueue(document.id)

        assert result.skipped is True

    @pytest.mark.asyncio
    async def test_enqueue_failed_document_should_resolve_unsuccessful(
        self, queue: IndexingQueue, make_document, session_factory
    ) -> None:
        document = await make_document("blank.txt", "   ")
        await queue.start()

        result = await queue.enqueue(document.id)

        assert result.success is False
        assert await status_of(session_factory, document.id) == DocumentStatus.FAILED

    @pytest.mark.asyncio
    async def test_several_workers_should_drain_queue(
        self, pipeline: IndexingPipeline, session_factory, make_document, vector_index
    ) -> None:
        queue = IndexingQueue(pipeline, session_factory, worker_count=3)
        documents = [await make_document(f"{n}.txt", f"document number {n}") for n in range(5)]
        await queue.start()
        try:
            futures = [queue.enqueue(d.id) for d in documents]
            results = await asyncio.wait_for(asyncio.gather(*futures), timeout=10)
        finally:
            await queue.stop()

        assert all(r.success for r in results)
        assert vector_index.count(TEST_COLLECTION) == 5

    @pytest.mark.asyncio
    async def test_drained_queue_should_save_index_without_autosave(
        self, embedder: Embedder, session_factory, make_document, tmp_path
    ) -> None:
        # Arrange
        vectors_dir = tmp_path / "vectors"
        index = FaissVectorIndex(persist_directory=str(vectors_dir), autosave=False)
        index.ensure_collection(TEST_COLLECTION, TEST_DIMENSION, "cosine")
        pipeline = IndexingPipeline(embedder, VectorStoreTask(index, TEST_COLLECTION))
        queue = IndexingQueue(pipeline, session_factory)
        documents = [await make_document(f"{n}.txt", f"saved document {n}") for n in range(3)]
        await queue.start()

        try:
            # Act
            for document in documents:
                queue.enqueue(document.id)
            await asyncio.wait_for(queue.join(), timeout=10)
        finally:
            await queue.stop()

        # Assert
        assert (vectors_dir / f"{TEST_COLLECTION}.faiss").exists()
        assert FaissVectorIndex(persist_directory=str(vectors_dir)).count(TEST_COLLECTION) == 3


class TestResume:
    """Test suite for IndexingQueue.resume()."""

    @pytest.mark.asyncio
    async def test_resume_should_requeue_unfinished_documents(
        self, queue: IndexingQueue, make_document, session_factory
    ) -> None:
        # Arrange
        pending = await make_document("p.txt", "never started")
        interrupted = await make_document("i.txt", "cut off", DocumentStatus.INDEXING)
        failed = await make_document("f.txt", "gave up", DocumentStatus.FAILED)

        # Act
        queued = await queue.resume()
        await queue.start()
        await asyncio.wait_for(queue.join(), timeout=10)

        # Assert
        assert queued == 2
        assert await status_of(session_factory, pending.id) == DocumentStatus.INDEXED
        assert await status_of(session_factory, interrupted.id) == DocumentStatus.INDEXED
        assert await status_of(session_factory, failed.id) == DocumentStatus.FAILED

    @pytest.mark.asyncio
    async def test_resume_should_skip_already_pending(
        self, queue: IndexingQueue, make_document
    ) -> None:
        document = await make_document("p.txt", "already queued")
        queue.enqueue(document.id)

        assert await queue.resume() == 0


class TestStopAndHalt:
    """Test suite for shutdown and schema conflicts."""

    @pytest.mark.asyncio
    async def test_stop_should_cancel_pending_jobs(
        self, queue: IndexingQueue, make_document, session_factory
    ) -> None:
        document = await make_document("a.txt", "will not run")
        future = queue.enqueue(document.id)

        await queue.stop()

        assert future.cancelled()
        assert queue.running is False
        assert queue.is_pending(document.id) is False
        assert await status_of(session_factory, document.id) == DocumentStatus.NOT_INDEXED

    @pytest.mark.asyncio
    async def test_schema_conflict_should_halt_queue(
        self, embedder: Embedder, session_factory, make_document
    ) -> None:
        # Arrange: collection exists with another dimension
        index = FaissVectorIndex()
        index.ensure_collection(TEST_COLLECTION, TEST_DIMENSION // 2, "cosine")
        pipeline = IndexingPipeline(embedder, VectorStoreTask(index, TEST_COLLECTION))
        queue = IndexingQueue(pipeline, session_factory)
        first = await make_document("a.txt", "first document")
        second = await make_document("b.txt", "second document")

        try:
            first_future = queue.enqueue(first.id)
            second_future = queue.enqueue(second.id)
            await queue.start()

            # Act / Assert
            with pytest.raises(SchemaConflictError):
                await asyncio.wait_for(first_future, timeout=10)
            with pytest.raises(SchemaConflictError):
                await asyncio.wait_for(second_future, timeout=10)
            with pytest.raises(SchemaConflictError):
                queue.enqueue(first.id)
        finally:
            await queue.stop()
