"""
Test suite for IndexingPipeline.

Runs the real extraction, chunking and FAISS index against the fake
embedding model and an in-memory SQLite database.

System role: Verification of the indexing pipeline orchestration
"""

import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from docsearch.boundary.db.CRUD.document_crud import document_crud
from docsearch.boundary.db.models.document_model import DocumentStatus
from docsearch.boundary.vdb import FaissVectorIndex
from docsearch.core.document_processing import IndexingPipeline
from docsearch.core.document_processing.tasks import Embedder, VectorStoreTask
from docsearch.core.exceptions import DocumentNotFoundError, SchemaConflictError
from tests.fakes import TEST_COLLECTION, TEST_DIMENSION


class TestIndexText:
    """Test suite for IndexingPipeline.index_text()."""

    @pytest.mark.asyncio
    async def test_index_text_should_write_one_point_per_chunk(
        self, pipeline: IndexingPipeline, vector_index: FaissVectorIndex
    ) -> None:
        # Act
        result = await pipeline.index_text("doc1", "A" * 1500)

        # Assert
        assert result.success is True
        assert result.state == DocumentStatus.INDEXED
        assert result.chunk_count == 2
        assert result.text_length == 1500
        assert result.point_ids == ["doc1_0", "doc1_1"]
        assert vector_index.count(TEST_COLLECTION) == 2

    @pytest.mark.asyncio
    async def test_index_text_twice_should_overwrite_same_points(
        self, pipeline: IndexingPipeline, vector_index: FaissVectorIndex
    ) -> None:
        await pipeline.index_text("doc1", "A" * 1500)
        await pipeline.index_text("doc1", "A" * 1500)

        assert vector_index.count(TEST_COLLECTION) == 2

    @pytest.mark.asyncio
    async def test_index_text_should_make_first_chunk_findable(
        self, pipeline: IndexingPipeline, vector_index: FaissVectorIndex, embedder: Embedder
    ) -> None:
        await pipeline.index_text("doc1", "A" * 1500, source_path="/tmp/doc1.txt")

        hits = vector_index.search(TEST_COLLECTION, embedder.embed("A" * 1000), 1)

        assert len(hits) == 1
        assert hits[0].id == "doc1_0"
        assert hits[0].payload.chunk_index == 0
        assert hits[0].payload.document_id == "doc1"
        assert hits[0].payload.source_path == "/tmp/doc1.txt"
        assert hits[0].payload.text == "A" * 1000

    @pytest.mark.asyncio
    async def test_index_text_should_batch_embedding_calls(
        self, embedder: Embedder, vector_store_task: VectorStoreTask, fake_model
    ) -> None:
        # Arrange: roughly 29 chunks, embedded 10 at a time
        pipeline = IndexingPipeline(embedder, vector_store_task, batch_size=10)
        text = " ".join(f"word{n}" for n in range(4000))

        # Act
        result = await pipeline.index_text("doc2", text)

        # Assert
        expected_batches = -(-result.chunk_count // 10)
        assert fake_model.encode_calls == expected_batches

    def test_init_with_invalid_batch_size_should_raise(
        self, embedder: Embedder, vector_store_task: VectorStoreTask
    ) -> None:
        with pytest.raises(ValueError):
            IndexingPipeline(embedder, vector_store_task, batch_size=0)


class TestIndexDocument:
    """Test suite for IndexingPipeline.index_document()."""

    @pytest.mark.asyncio
    async def test_index_document_should_mark_indexed(
        self,
        pipeline: IndexingPipeline,
        vector_index: FaissVectorIndex,
        test_async_db: AsyncSession,
        create_text_document,
    ) -> None:
        # Arrange
        document = await create_text_document("A" * 1500)

        # Act
        result = await pipeline.index_document(test_async_db, document.id)

        # Assert
        assert result.success is True
        assert result.skipped is False
        assert result.point_ids == [f"{document.id}_0", f"{document.id}_1"]

        stored = await document_crud.get_by_id(test_async_db, document.id)
        await test_async_db.refresh(stored)
        assert stored.status == DocumentStatus.INDEXED
        assert stored.chunk_count == 2
        assert stored.text_length == 1500
        assert stored.indexed_at is not None
        assert stored.error_message is None
        assert vector_index.count(TEST_COLLECTION) == 2

    @pytest.mark.asyncio
    async def test_index_document_already_indexed_should_skip(
        self,
        pipeline: IndexingPipeline,
        vector_index: FaissVectorIndex,
        test_async_db: AsyncSession,
        create_text_document,
        fake_model,
    ) -> None:
        document = await create_text_document("A" * 1500)
        await pipeline.index_document(test_async_db, document.id)
        calls = fake_model.encode_calls

        result = await pipeline.index_document(test_async_db, document.id)

        assert result.success is True
        assert result.skipped is True
        assert result.chunk_count == 2
        assert fake_model.encode_calls == calls
        assert vector_index.count(TEST_COLLECTION) == 2

    @pytest.mark.asyncio
    async def test_index_document_unknown_id_should_raise(
        self, pipeline: IndexingPipeline, test_async_db: AsyncSession
    ) -> None:
        with pytest.raises(DocumentNotFoundError):
            await pipeline.index_document(test_async_db, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_index_document_blank_text_should_mark_failed(
        self,
        pipeline: IndexingPipeline,
        vector_index: FaissVectorIndex,
        test_async_db: AsyncSession,
        create_text_document,
    ) -> None:
        document = await create_text_document("   \n\t  ")

        result = await pipeline.index_document(test_async_db, document.id)

        assert result.success is False
        assert result.state == DocumentStatus.FAILED
        assert result.error_type == "ExtractionError"
        stored = await document_crud.get_by_id(test_async_db, document.id)
        await test_async_db.refresh(stored)
        assert stored.status == DocumentStatus.FAILED
        assert stored.error_message == "No text could be extracted"
        assert vector_index.count(TEST_COLLECTION) == 0

    @pytest.mark.asyncio
    async def test_index_document_missing_file_should_mark_failed(
        self,
        pipeline: IndexingPipeline,
        test_async_db: AsyncSession,
        create_text_document,
        tmp_path,
    ) -> None:
        document = await create_text_document("some text")
        (tmp_path / "notes.txt").unlink()

        result = await pipeline.index_document(test_async_db, document.id)

        assert result.success is False
        assert result.error_type == "ExtractionError"

    @pytest.mark.asyncio
    async def test_index_document_embedding_failure_should_mark_failed(
        self,
        pipeline: IndexingPipeline,
        test_async_db: AsyncSession,
        create_text_document,
    ) -> None:
        # Punctuation only: the model produces a zero vector
        document = await create_text_document("!!! ??? ...")

        result = await pipeline.index_document(test_async_db, document.id)

        assert result.success is False
        assert result.error_type == "EmbeddingError"
        stored = await document_crud.get_by_id(test_async_db, document.id)
        await test_async_db.refresh(stored)
        assert stored.status == DocumentStatus.FAILED

    @pytest.mark.asyncio
    async def test_index_document_failed_document_can_be_retried(
        self,
        pipeline: IndexingPipeline,
        test_async_db: AsyncSession,
        create_text_document,
        tmp_path,
    ) -> None:
        document = await create_text_document("   ")
        await pipeline.index_document(test_async_db, document.id)
        (tmp_path / "notes.txt").write_text("retry with real words", encoding="utf-8")

        result = await pipeline.index_document(test_async_db, document.id)

        assert result.success is True
        stored = await document_crud.get_by_id(test_async_db, document.id)
        await test_async_db.refresh(stored)
        assert stored.status == DocumentStatus.INDEXED
        assert stored.error_message is None

    @pytest.mark.asyncio
    async def test_index_document_schema_conflict_should_mark_failed_and_raise(
        self,
        embedder: Embedder,
        test_async_db: AsyncSession,
        create_text_document,
    ) -> None:
        # Arrange: collection created with a different dimension
        index = FaissVectorIndex()
        index.ensure_collection(TEST_COLLECTION, TEST_DIMENSION // 2, "cosine")
        conflicting = IndexingPipeline(embedder, VectorStoreTask(index, TEST_COLLECTION))
        document = await create_text_document("plain words here")

        # Act / Assert
        with pytest.raises(SchemaConflictError):
            await conflicting.index_document(test_async_db, document.id)

        stored = await document_crud.get_by_id(test_async_db, document.id)
        await test_async_db.refresh(stored)
        assert stored.status == DocumentStatus.FAILED
