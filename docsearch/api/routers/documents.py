"""
Document API endpoints.

Routes:
- POST /documents - Upload a document and start background indexing
- GET /documents - List documents, newest first
- GET /documents/{id} - Get one document
- GET /documents/{id}/index-status - Indexing status of one document
- DELETE /documents/{id} - Delete document, its vectors and its file

Dependencies: docsearch.application.services, docsearch.models
System role: Document HTTP API
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from docsearch.api.deps import get_document_service
from docsearch.api.routers.router_utils import handle_service_errors
from docsearch.application.services.document_service import DocumentService
from docsearch.models.document import (
    DocumentResponse,
    DocumentUploadResponse,
    IndexStatusResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("", response_model=DocumentUploadResponse, status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def upload_document(
    file: UploadFile = File(...),
    description: str | None = Form(default=None),
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentUploadResponse:
    """
    Upload a document and queue it for indexing.

    Args:
        file: Uploaded PDF, text or markdown file
        description: Optional description
        document_service: Injected DocumentService

    Returns:
        DocumentUploadResponse: Stored document, indexing "in_progress"

    Raises:
        HTTPException(400): Missing, unsupported, empty or oversized file
    """
    content = await file.read()
    document = await document_service.upload_document(
        original_name=file.filename or "",
        content=content,
        mimetype=file.content_type,
        description=description,
    )
    return DocumentUploadResponse(
        message="Document uploaded successfully and indexing started",
        document=DocumentResponse.model_validate(document),
    )


@router.get("", response_model=list[DocumentResponse])
async def list_documents(
    document_service: DocumentService = Depends(get_document_service),
) -> list[DocumentResponse]:
    """List all documents, newest upload first."""
    documents = await document_service.list_documents()
    return [DocumentResponse.model_validate(document) for document in documents]


@router.get("/{document_id}", response_model=DocumentResponse)
@handle_service_errors
async def get_document(
    document_id: UUID,
    document_service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    """
    Get one document.

    Raises:
        HTTPException(404): Document not found
    """
    document = await document_service.get_document(document_id)
    return DocumentResponse.model_validate(document)


@router.get("/{document_id}/index-status", response_model=IndexStatusResponse)
@handle_service_errors
async def get_index_status(
    document_id: UUID,
    document_service: DocumentService = Depends(get_document_service),
) -> IndexStatusResponse:
    """
    Indexing status of one document.

    Raises:
        HTTPException(404): Document not found
    """
    document = await document_service.get_document(document_id)
    return IndexStatusResponse(
        id=document.id,
        name=document.original_name,
        status=document.status.value,
        chunks_processed=document.chunk_count or 0,
        completed_at=document.indexed_at,
        error_message=document.error_message,
    )


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
@handle_service_errors
async def delete_document(
    document_id: UUID,
    document_service: DocumentService = Depends(get_document_service),
) -> None:
    """
    Delete a document with its vectors and stored file.

    Raises:
        HTTPException(404): Document not found
        HTTPException(409): Document is being indexed
    """
    await document_service.delete_document(document_id)
