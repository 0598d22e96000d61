"""
Document indexing pipeline orchestrator.

Coordinates extraction, chunking, batched embedding and vector upsert for one
document, and writes the outcome back to the metadata store.

Dependencies: All task modules, docsearch.boundary.db
System role: Pipeline orchestration (coordinates only)
"""

import asyncio
import logging
import time
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from docsearch.boundary.db.base import utcnow
from docsearch.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud
from docsearch.boundary.db.models.document_model import DocumentModel, DocumentStatus
from docsearch.core.exceptions import (
    DocumentNotFoundError,
    EmbeddingError,
    ExtractionError,
    SchemaConflictError,
    VectorStoreError,
)
from docsearch.observability.log_utils import log_exception_with_context, log_with_context

from .models import Chunk, IndexingResult
from .tasks import ChunkingTask, Embedder, ExtractionTask, VectorStoreTask

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10


class IndexingPipeline:
    """Orchestrate document indexing: extract -> chunk -> embed -> upsert."""

    def __init__(
        self,
        embedder: Embedder,
        vector_store_task: VectorStoreTask,
        extraction_task: ExtractionTask | None = None,
        chunking_task: ChunkingTask | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        crud: DocumentCRUD = document_crud,
    ) -> None:
        """
        Initialize pipeline with its collaborators.

        Args:
            embedder: Embedder shared with retrieval
            vector_store_task: Writes points to the configured collection
            extraction_task: Text extraction (defaults to PDF/plain text dispatch)
            chunking_task: Chunker (defaults to 1000/200 character windows)
            batch_size: Chunks embedded per model call
            crud: Document CRUD used for status write-back

        Raises:
            ValueError: When batch_size is not positive
        """
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")

        self._embedder = embedder
        self._vector_store_task = vector_store_task
        self._extraction_task = extraction_task or ExtractionTask()
        self._chunking_task = chunking_task or ChunkingTask()
        self._batch_size = batch_size
        self._crud = crud

    async def index_text(
        self,
        document_id: str,
        text: str,
        source_path: str = "",
    ) -> IndexingResult:
        """
        Chunk, embed and upsert already extracted text.

        Point ids are "{document_id}_{position}", so running this twice on
        the same text overwrites the same points.

        Args:
            document_id: Document identifier stored in each payload
            text: Extracted text
            source_path: Source file path stored in each payload

        Returns:
            IndexingResult: Successful result with chunk count and point ids

        Raises:
            EmbeddingError: Embedding failed
            SchemaConflictError: Collection exists with another dimension
            VectorStoreError: Upsert failed
        """
        start_time = time.perf_counter()

        chunks = self._chunking_task.split_with_offsets(text)
        vectors = await self._embed_chunks(document_id, chunks)
        points = VectorStoreTask.build_points(document_id, chunks, vectors, source_path)
        await self._vector_store_task.ensure_collection(self._embedder.dimension)
        point_ids = await self._vector_store_task.upload(points)

        return IndexingResult(
            document_id=document_id,
            state=DocumentStatus.INDEXED,
            success=True,
            chunk_count=len(chunks),
            text_length=len(text),
            point_ids=point_ids,
            indexed_at=utcnow(),
            processing_time_ms=(time.perf_counter() - start_time) * 1000,
        )

    async def index_document(self, session: AsyncSession, document_id: UUID) -> IndexingResult:
        """
        Index one stored document and record the outcome.

        Already indexed documents are left untouched. Extraction, embedding
        and vector store failures mark the document failed and come back as
        an unsuccessful result. A schema conflict is re-raised after marking
        the document failed, since nothing can be indexed until it is fixed.

        Args:
            session: Async database session (committed by this method)
            document_id: Document UUID

        Returns:
            IndexingResult: Outcome of the run

        Raises:
            DocumentNotFoundError: No document with that id
            SchemaConflictError: Vector collection schema does not match
        """
        document = await self._crud.get_by_id(session, document_id)
        if document is None:
            raise DocumentNotFoundError(str(document_id))

        if document.indexed:
            log_with_context(
                logger,
                logging.INFO,
                f"{__name__}:index_document - Document already indexed, skipping",
                document_id=document_id,
            )
            return self._skipped_result(document)

        await self._crud.mark_indexing(session, document_id)
        await session.commit()

        start_time = time.perf_counter()
        try:
            text = await asyncio.to_thread(self._extraction_task.extract, document.path)
            if not text.strip():
                raise ExtractionError(
                    "No text could be extracted",
                    source_path=document.path,
                    document_id=str(document_id),
                )
            result = await self.index_text(str(document_id), text, document.path)

        except SchemaConflictError as e:
            await self._record_failure(session, document_id, e)
            raise

        except (ExtractionError, EmbeddingError, VectorStoreError) as e:
            await self._record_failure(session, document_id, e)
            return IndexingResult(
                document_id=str(document_id),
                state=DocumentStatus.FAILED,
                success=False,
                error=e.message,
                error_type=type(e).__name__,
                processing_time_ms=(time.perf_counter() - start_time) * 1000,
            )

        await self._crud.mark_indexed(
            session,
            document_id,
            chunk_count=result.chunk_count,
            text_length=result.text_length,
            indexed_at=result.indexed_at,
        )
        await session.commit()

        result.processing_time_ms = (time.perf_counter() - start_time) * 1000
        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:index_document - Document indexed",
            document_id=document_id,
            chunk_count=result.chunk_count,
            text_length=result.text_length,
            processing_time_ms=round(result.processing_time_ms, 1),
        )
        return result

    async def persist(self) -> None:
        """Flush vector index changes not yet written to disk."""
        await self._vector_store_task.persist()

    async def _embed_chunks(self, document_id: str, chunks: list[Chunk]) -> list[list[float]]:
        vectors: list[list[float]] = []
        for offset in range(0, len(chunks), self._batch_size):
            batch = chunks[offset : offset + self._batch_size]
            vectors.extend(await self._embedder.aembed_batch([chunk.text for chunk in batch]))
            logger.debug(
                f"{__name__}:_embed_chunks - Embedded batch",
                extra={"document_id": document_id, "embedded": len(vectors), "total": len(chunks)},
            )
        return vectors

    async def _record_failure(
        self,
        session: AsyncSession,
        document_id: UUID,
        error: Exception,
    ) -> None:
        log_exception_with_context(
            logger,
            f"{__name__}:index_document - Indexing failed",
            error,
            document_id=document_id,
        )
        await session.rollback()
        await self._crud.mark_failed(session, document_id, str(getattr(error, "message", error)))
        await session.commit()

    @staticmethod
    def _skipped_result(document: DocumentModel) -> IndexingResult:
        return IndexingResult(
            document_id=str(document.id),
            state=document.status,
            success=True,
            skipped=True,
            chunk_count=document.chunk_count or 0,
            text_length=document.text_length or 0,
            indexed_at=document.indexed_at,
        )
