"""
In-process background indexing queue.

An asyncio.Queue drained by a fixed number of worker tasks. Each job indexes
one document in its own database session; its outcome lands in the document
row and in a per-job future. A document id can be queued at most once at a
time.

Dependencies: asyncio, sqlalchemy, docsearch.core.document_processing
System role: Background task processing
"""

import asyncio
import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from docsearch.boundary.db.CRUD.document_crud import document_crud
from docsearch.core.document_processing import IndexingPipeline, IndexingResult
from docsearch.core.exceptions import (
    IndexingInProgressError,
    SchemaConflictError,
    VectorStoreError,
)
from docsearch.observability.correlation import clear_correlation_id, set_correlation_id
from docsearch.observability.log_utils import log_exception_with_context

logger = logging.getLogger(__name__)


class IndexingQueue:
    """Fixed pool of asyncio workers indexing documents in the background."""

    def __init__(
        self,
        pipeline: IndexingPipeline,
        session_factory: async_sessionmaker[AsyncSession],
        worker_count: int = 1,
    ) -> None:
        """
        Initialize queue.

        Args:
            pipeline: Pipeline run for every job
            session_factory: Factory producing one session per job
            worker_count: Number of concurrent workers

        Raises:
            ValueError: When worker_count is not positive
        """
        if worker_count <= 0:
            raise ValueError("worker_count must be positive")

        self._pipeline = pipeline
        self._session_factory = session_factory
        self._worker_count = worker_count
        self._queue: asyncio.Queue[tuple[UUID, asyncio.Future]] = asyncio.Queue()
        self._in_flight: dict[UUID, asyncio.Future] = {}
        self._workers: list[asyncio.Task] = []
        self._halted: SchemaConflictError | None = None

    @property
    def running(self) -> bool:
        return any(not worker.done() for worker in self._workers)

    def is_pending(self, document_id: UUID) -> bool:
        """Whether a document is queued or being indexed."""
        return document_id in self._in_flight

    async def start(self) -> None:
        """Spawn the worker tasks. Calling start twice is a no-op."""
        if self.running:
            return
        self._workers = [
            asyncio.create_task(self._worker(n), name=f"indexing-worker-{n}")
            for n in range(self._worker_count)
        ]
        logger.info(
            f"{__name__}:start - Indexing workers started",
            extra={"worker_count": self._worker_count},
        )

    async def stop(self) -> None:
        """
        Cancel the workers.

        Jobs still waiting in the queue are cancelled; their documents keep
        their stored state and can be resumed later.
        """
        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []

        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()
        for future in self._in_flight.values():
            future.cancel()
        self._in_flight.clear()
        logger.info(f"{__name__}:stop - Indexing workers stopped")

    def enqueue(self, document_id: UUID) -> asyncio.Future:
        """
        Schedule a document for indexing.

        Args:
            document_id: Document UUID

        Returns:
            asyncio.Future: Resolves to the IndexingResult of the job

        Raises:
            IndexingInProgressError: The document is already queued or running
            SchemaConflictError: Indexing was halted by a schema conflict
        """
        if self._halted is not None:
            raise self._halted
        if document_id in self._in_flight:
            raise IndexingInProgressError(str(document_id))

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._in_flight[document_id] = future
        self._queue.put_nowait((document_id, future))
        logger.info(
            f"{__name__}:enqueue - Document queued for indexing",
            extra={"document_id": str(document_id), "queue_size": self._queue.qsize()},
        )
        return future

    async def resume(self) -> int:
        """
        Re-enqueue documents left unindexed or interrupted by a previous run.

        Returns:
            int: Number of documents queued
        """
        async with self._session_factory() as session:
            documents = await document_crud.get_resumable(session)

        queued = 0
        for document in documents:
            if document.id in self._in_flight:
                continue
            self.enqueue(document.id)
            queued += 1

        logger.info(
            f"{__name__}:resume - Unfinished documents re-queued",
            extra={"queued": queued},
        )
        return queued

    async def join(self) -> None:
        """Wait until every queued job has finished."""
        await self._queue.join()

    async def _worker(self, number: int) -> None:
        while True:
            document_id, future = await self._queue.get()
            set_correlation_id(f"index-{document_id}")
            try:
                result = await self._run(document_id)
            except SchemaConflictError as e:
                self._halted = e
                log_exception_with_context(
                    logger,
                    f"{__name__}:_worker - Schema conflict, indexing halted",
                    e,
                    document_id=document_id,
                    worker=number,
                )
                self._settle(future, error=e)
                self._finish(document_id)
                self._fail_queued(e)
                return
            except Exception as e:
                log_exception_with_context(
                    logger,
                    f"{__name__}:_worker - Indexing job crashed",
                    e,
                    document_id=document_id,
                    worker=number,
                )
                self._settle(future, error=e)
            else:
                self._settle(future, result=result)
            finally:
                clear_correlation_id()
            if self._queue.qsize() == 0:
                await self._flush(number)
            self._finish(document_id)

    async def _flush(self, number: int) -> None:
        try:
            await self._pipeline.persist()
        except VectorStoreError as e:
            # Changes stay marked unsaved and are written on the next flush
            log_exception_with_context(
                logger,
                f"{__name__}:_flush - Saving the vector index failed",
                e,
                worker=number,
            )

    async def _run(self, document_id: UUID) -> IndexingResult:
        async with self._session_factory() as session:
            return await self._pipeline.index_document(session, document_id)

    def _fail_queued(self, error: SchemaConflictError) -> None:
        while not self._queue.empty():
            document_id, future = self._queue.get_nowait()
            self._settle(future, error=error)
            self._finish(document_id)

    def _finish(self, document_id: UUID) -> None:
        self._in_flight.pop(document_id, None)
        self._queue.task_done()

    @staticmethod
    def _settle(
        future: asyncio.Future,
        result: IndexingResult | None = None,
        error: BaseException | None = None,
    ) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
            # Mark retrieved: the error is already logged and nobody may await it
            future.exception()
        else:
            future.set_result(result)
