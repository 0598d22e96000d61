"""
Search API endpoints.

Routes:
- POST /search/index/{id} - Index one document and wait for the outcome
- GET /search/query - Ranked passages for a natural language query
- GET /search/status - Indexing status of all documents

Dependencies: docsearch.application.services, docsearch.models
System role: Search HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from docsearch.api.deps import get_document_service, get_retrieval_service
from docsearch.api.routers.router_utils import handle_service_errors
from docsearch.application.services import DocumentService, RetrievalService
from docsearch.models.document import IndexDocumentResponse, IndexStatusResponse
from docsearch.models.search import SearchResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/search", tags=["search"])


@router.post("/index/{document_id}", response_model=IndexDocumentResponse)
@handle_service_errors
async def index_document(
    document_id: UUID,
    document_service: DocumentService = Depends(get_document_service),
) -> IndexDocumentResponse:
    """
    Index one document synchronously.

    Returns:
        IndexDocumentResponse: Outcome; "already indexed" when nothing ran

    Raises:
        HTTPException(404): Document not found
        HTTPException(409): Document already being indexed
        HTTPException(500): Indexing failed, with the reason
    """
    result = await document_service.index_document(document_id)

    if result.skipped:
        message = "Document already indexed"
    elif result.success:
        message = "Document indexed successfully"
    else:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to index document: {result.error}",
        )

    return IndexDocumentResponse(
        message=message,
        document_id=document_id,
        status=result.state.value,
        chunk_count=result.chunk_count,
        skipped=result.skipped,
    )


@router.get("/query", response_model=SearchResponse)
@handle_service_errors
async def search(
    query: str | None = Query(default=None, description="Natural language query"),
    limit: int | None = Query(default=None, description="Maximum number of results"),
    retrieval_service: RetrievalService = Depends(get_retrieval_service),
) -> SearchResponse:
    """
    Ranked passages for a query.

    Raises:
        HTTPException(400): Missing query or limit <= 0
        HTTPException(503): Vector store unavailable
    """
    results = await retrieval_service.search(query or "", limit=limit)
    return SearchResponse(query=query or "", results=results, count=len(results))


@router.get("/status", response_model=list[IndexStatusResponse])
async def indexing_status(
    document_service: DocumentService = Depends(get_document_service),
) -> list[IndexStatusResponse]:
    """Indexing status of every document, newest first."""
    documents = await document_service.list_documents()
    return [
        IndexStatusResponse(
            id=document.id,
            name=document.original_name,
            status=document.status.value,
            chunks_processed=document.chunk_count or 0,
            completed_at=document.indexed_at,
            error_message=document.error_message,
        )
        for document in documents
    ]
