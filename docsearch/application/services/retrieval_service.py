"""
Retrieval service orchestrator.

Embeds a query, searches the vector index and joins each hit with its
document metadata. Hits whose document row no longer exists are still
returned, with document=None.

Dependencies: docsearch.boundary.vdb, docsearch.boundary.db, docsearch.core
System role: Retrieval orchestration
"""

import asyncio
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from docsearch.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud
from docsearch.boundary.db.models.document_model import DocumentModel
from docsearch.boundary.vdb import FaissVectorIndex, ScoredPoint
from docsearch.core.document_processing.tasks import Embedder
from docsearch.core.exceptions import (
    EmbeddingError,
    RetrievalError,
    ValidationError,
    VectorStoreError,
)
from docsearch.models.search import DocumentSummary, SearchResult
from docsearch.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 5


def _parse_uuid(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


class RetrievalService:
    """Retrieval service orchestrator."""

    def __init__(
        self,
        db: AsyncSession,
        embedder: Embedder,
        index: FaissVectorIndex,
        collection_name: str,
        crud: DocumentCRUD = document_crud,
        default_limit: int = DEFAULT_LIMIT,
    ) -> None:
        """
        Initialize retrieval service.

        Args:
            db: AsyncSession for document metadata lookups
            embedder: Embedder shared with the indexing pipeline
            index: Vector index
            collection_name: Collection to search
            crud: Document CRUD used for the metadata join
            default_limit: Result count used when a search gives no limit
        """
        self.db = db
        self._embedder = embedder
        self._index = index
        self._collection_name = collection_name
        self._crud = crud
        self.default_limit = default_limit

    async def search(self, query: str, limit: int | None = None) -> list[SearchResult]:
        """
        Return the passages most similar to a query.

        Args:
            query: Natural language query
            limit: Maximum number of results (defaults to default_limit)

        Returns:
            list[SearchResult]: Results by descending score

        Raises:
            ValidationError: Empty query or limit <= 0
            RetrievalError: Embedding or vector store failure
        """
        if not query or not query.strip():
            raise ValidationError("Query must not be empty", field="query")
        if limit is None:
            limit = self.default_limit
        if limit <= 0:
            raise ValidationError("limit must be positive", field="limit")

        try:
            vector = await self._embedder.aembed(query)
            hits = await asyncio.to_thread(
                self._index.search, self._collection_name, vector, limit
            )
        except (EmbeddingError, VectorStoreError) as e:
            log_exception_with_context(
                logger,
                f"{__name__}:search - Search failed",
                e,
                query=query,
                limit=limit,
            )
            raise RetrievalError(
                f"Search failed: {e.message}",
                query=query,
                details={"cause": type(e).__name__},
            ) from e

        documents = await self._fetch_documents(hits)
        results = [
            SearchResult(
                text=hit.payload.text,
                score=hit.score,
                document_id=hit.payload.document_id,
                source_path=hit.payload.source_path,
                document=documents.get(hit.payload.document_id),
            )
            for hit in hits
        ]

        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:search - Search completed",
            query=query,
            limit=limit,
            result_count=len(results),
        )
        return results

    async def _fetch_documents(self, hits: list[ScoredPoint]) -> dict[str, DocumentSummary]:
        document_ids = list(dict.fromkeys(hit.payload.document_id for hit in hits))
        uuids = [u for u in (_parse_uuid(d) for d in document_ids) if u is not None]
        rows = await self._crud.get_by_ids(self.db, uuids)
        return {str(row.id): self._summary(row) for row in rows}

    @staticmethod
    def _summary(document: DocumentModel) -> DocumentSummary:
        return DocumentSummary(
            id=document.id,
            filename=document.filename,
            original_name=document.original_name,
            description=document.description,
            upload_date=document.created_at,
        )
