"""
Document CRUD operations.

Provides Create, Read, Update, Delete operations for DocumentModel
with status transitions used by the indexing pipeline.

Dependencies: sqlalchemy, docsearch.boundary.db.models
System role: Document persistence operations
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from docsearch.boundary.db.base import utcnow
from docsearch.boundary.db.CRUD.base_crud import BaseCRUD
from docsearch.boundary.db.models.document_model import DocumentModel, DocumentStatus


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """
    CRUD operations for DocumentModel.

    Extends BaseCRUD with ordering, status filtering and the indexing
    lifecycle transitions.
    """

    def __init__(self) -> None:
        """Initialize DocumentCRUD with DocumentModel."""
        super().__init__(DocumentModel)

    async def get_all(
        self,
        session: AsyncSession,
        limit: int | None = None,
        offset: int = 0,
    ) -> Sequence[DocumentModel]:
        """
        Retrieve documents, newest upload first.

        Args:
            session: Async database session
            limit: Maximum number of documents to return
            offset: Number of documents to skip

        Returns:
            Sequence of DocumentModels
        """
        stmt = (
            select(DocumentModel)
            .order_by(DocumentModel.created_at.desc())
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_by_status(
        self,
        session: AsyncSession,
        statuses: list[DocumentStatus],
    ) -> Sequence[DocumentModel]:
        """
        Retrieve documents in any of the given states, oldest first.

        Args:
            session: Async database session
            statuses: States to match

        Returns:
            Sequence of DocumentModels with matching status
        """
        stmt = (
            select(DocumentModel)
            .where(DocumentModel.status.in_(statuses))
            .order_by(DocumentModel.created_at.asc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_resumable(self, session: AsyncSession) -> Sequence[DocumentModel]:
        """Documents never indexed or interrupted mid-indexing."""
        return await self.get_by_status(
            session, [DocumentStatus.NOT_INDEXED, DocumentStatus.INDEXING]
        )

    async def mark_indexing(self, session: AsyncSession, id: UUID) -> DocumentModel | None:
        """
        Mark document as being indexed and clear any previous error.

        Args:
            session: Async database session
            id: Document UUID

        Returns:
            Updated DocumentModel if found, None otherwise
        """
        return await self.update_by_id(
            session, id, status=DocumentStatus.INDEXING, error_message=None
        )

    async def mark_indexed(
        self,
        session: AsyncSession,
        id: UUID,
        chunk_count: int,
        text_length: int,
        indexed_at: datetime | None = None,
    ) -> DocumentModel | None:
        """
        Mark document as successfully indexed.

        Args:
            session: Async database session
            id: Document UUID
            chunk_count: Number of chunks written to the vector index
            text_length: Extracted text length in characters
            indexed_at: Completion time (defaults to now)

        Returns:
            Updated DocumentModel if found, None otherwise
        """
        return await self.update_by_id(
            session,
            id,
            status=DocumentStatus.INDEXED,
            chunk_count=chunk_count,
            text_length=text_length,
            indexed_at=indexed_at or utcnow(),
            error_message=None,
        )

    async def mark_failed(
        self,
        session: AsyncSession,
        id: UUID,
        error_message: str,
    ) -> DocumentModel | None:
        """
        Mark document as failed with error details.

        Args:
            session: Async database session
            id: Document UUID
            error_message: Human-readable error description (truncated to column size)

        Returns:
            Updated DocumentModel if found, None otherwise
        """
        return await self.update_by_id(
            session,
            id,
            status=DocumentStatus.FAILED,
            error_message=error_message[:2048],
        )


document_crud = DocumentCRUD()
