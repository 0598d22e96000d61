"""
Document service orchestrator.

Coordinates document upload, indexing, status reporting and deletion.
Uploaded files are written to the configured upload directory; indexing runs
through the background IndexingQueue so one document is never indexed twice
at the same time.

Dependencies: docsearch.boundary.db, docsearch.core.document_processing, docsearch.workers
System role: Document management orchestration
"""

import asyncio
import logging
import secrets
import time
from pathlib import Path
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from docsearch.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud
from docsearch.boundary.db.models.document_model import DocumentModel, DocumentStatus
from docsearch.core.document_processing import IndexingPipeline, IndexingResult
from docsearch.core.document_processing.tasks import VectorStoreTask
from docsearch.core.document_processing.tasks.extraction_task import SUPPORTED_EXTENSIONS
from docsearch.core.exceptions import (
    DocumentNotFoundError,
    IndexingInProgressError,
    ValidationError,
)
from docsearch.workers.indexing_queue import IndexingQueue

logger = logging.getLogger(__name__)


class DocumentService:
    """
    Document service orchestrator.

    Handles document lifecycle: upload, indexing, status, deletion.
    """

    def __init__(
        self,
        db: AsyncSession,
        pipeline: IndexingPipeline,
        vector_store_task: VectorStoreTask,
        upload_directory: str,
        max_file_size: int,
        queue: IndexingQueue | None = None,
        crud: DocumentCRUD = document_crud,
    ) -> None:
        """
        Initialize document service.

        Args:
            db: AsyncSession for document metadata
            pipeline: Indexing pipeline (used directly when no queue is given)
            vector_store_task: Removes a document's points on deletion
            upload_directory: Directory receiving uploaded files
            max_file_size: Upload size limit in bytes
            queue: Background indexing queue
            crud: Document CRUD
        """
        self.db = db
        self._pipeline = pipeline
        self._vector_store_task = vector_store_task
        self._upload_directory = Path(upload_directory)
        self._max_file_size = max_file_size
        self._queue = queue
        self._crud = crud

    async def upload_document(
        self,
        original_name: str,
        content: bytes,
        mimetype: str | None = None,
        description: str | None = None,
    ) -> DocumentModel:
        """
        Store an uploaded file, create its record and queue it for indexing.

        Steps:
        1. Validate file name, extension and size
        2. Write the file under a unique name to the upload directory
        3. Create document record with NOT_INDEXED status
        4. Enqueue background indexing (when a queue is configured)

        Args:
            original_name: File name as uploaded
            content: File bytes
            mimetype: Content type reported by the client
            description: Optional description

        Returns:
            DocumentModel: Created document record

        Raises:
            ValidationError: Missing name, unsupported type, empty or oversized file
        """
        if not original_name:
            raise ValidationError("No file uploaded", field="file")

        suffix = Path(original_name).suffix.lower()
        if suffix not in SUPPORTED_EXTENSIONS:
            raise ValidationError(
                f"Unsupported file type: {suffix or '<none>'}",
                field="file",
                details={"supported": sorted(SUPPORTED_EXTENSIONS)},
            )
        if not content:
            raise ValidationError("Uploaded file is empty", field="file")
        if len(content) > self._max_file_size:
            raise ValidationError(
                "Uploaded file is too large",
                field="file",
                details={"size": len(content), "max_file_size": self._max_file_size},
            )

        filename = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"
        path = self._upload_directory / filename
        await asyncio.to_thread(self._write_file, path, content)

        try:
            document = await self._crud.create(
                self.db,
                filename=filename,
                original_name=original_name,
                path=str(path),
                size=len(content),
                mimetype=mimetype,
                description=description or "",
                status=DocumentStatus.NOT_INDEXED,
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            await asyncio.to_thread(path.unlink, missing_ok=True)
            logger.error(
                f"{__name__}:upload_document - Record creation failed, stored file removed",
                extra={"path": str(path)},
            )
            raise

        logger.info(
            f"{__name__}:upload_document - Document stored",
            extra={"document_id": str(document.id), "size": len(content), "path": str(path)},
        )

        if self._queue is not None:
            self._queue.enqueue(document.id)
        return document

    async def list_documents(self) -> Sequence[DocumentModel]:
        """All documents, newest upload first."""
        return await self._crud.get_all(self.db)

    async def get_document(self, document_id: UUID) -> DocumentModel:
        """
        Fetch one document.

        Raises:
            DocumentNotFoundError: No such document
        """
        document = await self._crud.get_by_id(self.db, document_id)
        if document is None:
            raise DocumentNotFoundError(str(document_id))
        return document

    async def index_document(self, document_id: UUID) -> IndexingResult:
        """
        Index one document and wait for the outcome.

        Runs through the queue when one is configured, so a document already
        being indexed in the background is rejected instead of indexed twice.

        Args:
            document_id: Document UUID

        Returns:
            IndexingResult: Outcome (skipped=True if already indexed)

        Raises:
            DocumentNotFoundError: No such document
            IndexingInProgressError: Document already queued or being indexed
        """
        await self.get_document(document_id)

        if self._queue is None:
            return await self._pipeline.index_document(self.db, document_id)
        return await self._queue.enqueue(document_id)

    async def delete_document(self, document_id: UUID) -> None:
        """
        Delete document vectors, record and stored file.

        Args:
            document_id: Document UUID

        Raises:
            DocumentNotFoundError: No such document
            IndexingInProgressError: Document is being indexed
        """
        document = await self.get_document(document_id)
        if self._queue is not None and self._queue.is_pending(document_id):
            raise IndexingInProgressError(str(document_id))

        removed = await self._vector_store_task.delete_document(str(document_id))
        await self._crud.delete_by_id(self.db, document_id)
        await self.db.commit()
        await asyncio.to_thread(Path(document.path).unlink, missing_ok=True)

        logger.info(
            f"{__name__}:delete_document - Document deleted",
            extra={"document_id": str(document_id), "points_removed": removed},
        )

    @staticmethod
    def _write_file(path: Path, content: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
