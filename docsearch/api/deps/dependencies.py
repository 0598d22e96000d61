"""
Dependency injection container.

Process-wide cache of the heavy collaborators (embedding model handle, vector
index, pipeline, indexing queue) and factory functions for FastAPI
dependencies.

Dependencies: docsearch.configs, docsearch.application, docsearch.boundary
System role: DI container for service injection
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from docsearch.application.services import DocumentService, RetrievalService
from docsearch.boundary.db import get_async_db, get_async_session_factory
from docsearch.boundary.vdb import FaissVectorIndex, get_vector_index
from docsearch.configs import Settings, get_settings
from docsearch.core.document_processing import IndexingPipeline
from docsearch.core.document_processing.tasks import (
    ChunkingTask,
    Embedder,
    EmbeddingModelHandle,
    VectorStoreTask,
    get_model_handle,
)
from docsearch.workers import IndexingQueue


class ServiceCache:
    """Container for cached service instances."""

    def __init__(
        self,
        settings: Settings | None = None,
        model_handle: EmbeddingModelHandle | None = None,
        vector_index: FaissVectorIndex | None = None,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        """
        Initialize cache. Collaborators left as None are built on first access.

        Args:
            settings: Application settings
            model_handle: Embedding model handle
            vector_index: Vector index
            session_factory: Session factory used by background indexing jobs
        """
        self._settings = settings
        self._model_handle = model_handle
        self._embedder: Embedder | None = None
        self._vector_index = vector_index
        self._session_factory = session_factory
        self._pipeline: IndexingPipeline | None = None
        self._indexing_queue: IndexingQueue | None = None

    @property
    def settings(self) -> Settings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def model_handle(self) -> EmbeddingModelHandle:
        """Process-wide embedding model handle (model loads on first use)."""
        if self._model_handle is None:
            self._model_handle = get_model_handle(
                self.settings.pipeline.embedding_model,
                self.settings.pipeline.embedding_device,
            )
        return self._model_handle

    @property
    def embedder(self) -> Embedder:
        """Get cached embedder."""
        if self._embedder is None:
            self._embedder = Embedder(
                self.model_handle, dimension=self.settings.vector_store.dimension
            )
        return self._embedder

    @property
    def vector_index(self) -> FaissVectorIndex:
        """Get cached vector index."""
        if self._vector_index is None:
            self._vector_index = get_vector_index(self.settings.vector_store)
        return self._vector_index

    @property
    def vector_store_task(self) -> VectorStoreTask:
        return VectorStoreTask(self.vector_index, self.settings.vector_store.collection_name)

    @property
    def pipeline(self) -> IndexingPipeline:
        """Get cached indexing pipeline."""
        if self._pipeline is None:
            pipeline_settings = self.settings.pipeline
            self._pipeline = IndexingPipeline(
                embedder=self.embedder,
                vector_store_task=self.vector_store_task,
                chunking_task=ChunkingTask(
                    chunk_size=pipeline_settings.chunk_size,
                    chunk_overlap=pipeline_settings.chunk_overlap,
                ),
                batch_size=pipeline_settings.batch_size,
            )
        return self._pipeline

    @property
    def indexing_queue(self) -> IndexingQueue:
        """Get cached background indexing queue."""
        if self._indexing_queue is None:
            self._indexing_queue = IndexingQueue(
                pipeline=self.pipeline,
                session_factory=self._session_factory or get_async_session_factory(),
                worker_count=self.settings.pipeline.worker_count,
            )
        return self._indexing_queue

    def clear(self) -> None:
        """Clear all cached instances."""
        self._model_handle = None
        self._embedder = None
        self._vector_index = None
        self._pipeline = None
        self._indexing_queue = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


def get_document_service(
    db: AsyncSession = Depends(get_async_db),
    cache: ServiceCache = Depends(get_service_cache),
) -> DocumentService:
    """
    Get document service instance.

    Args:
        db: Async database session (injected via Depends)
        cache: Service cache (injected via Depends)

    Returns:
        DocumentService: Document service bound to the request session
    """
    pipeline_settings = cache.settings.pipeline
    return DocumentService(
        db=db,
        pipeline=cache.pipeline,
        vector_store_task=cache.vector_store_task,
        upload_directory=pipeline_settings.upload_directory,
        max_file_size=pipeline_settings.max_file_size,
        queue=cache.indexing_queue,
    )


def get_retrieval_service(
    db: AsyncSession = Depends(get_async_db),
    cache: ServiceCache = Depends(get_service_cache),
) -> RetrievalService:
    """
    Get retrieval service instance.

    Args:
        db: Async database session (injected via Depends)
        cache: Service cache (injected via Depends)

    Returns:
        RetrievalService: Retrieval service bound to the request session
    """
    return RetrievalService(
        db=db,
        embedder=cache.embedder,
        index=cache.vector_index,
        collection_name=cache.settings.vector_store.collection_name,
        default_limit=cache.settings.vector_store.top_k,
    )
