"""
Document domain models and schemas.

Request/response schemas for document operations.

Dependencies: pydantic, docsearch.boundary.db.models
System role: Document API contracts
"""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from docsearch.boundary.db.models.document_model import DocumentStatus


class DocumentResponse(BaseModel):
    """Response schema for a stored document."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    filename: str
    original_name: str
    path: str
    size: int
    mimetype: str | None = None
    description: str | None = None
    status: DocumentStatus
    indexed: bool
    chunk_count: int | None = None
    text_length: int | None = None
    indexed_at: datetime | None = None
    error_message: str | None = None
    created_at: datetime = Field(description="Upload date")


class DocumentUploadResponse(BaseModel):
    """Response schema for a successful upload."""

    message: str
    document: DocumentResponse
    indexing: Literal["in_progress"] = "in_progress"


class IndexStatusResponse(BaseModel):
    """Indexing status of one document."""

    id: uuid.UUID
    name: str = Field(description="Original filename")
    status: str
    chunks_processed: int = 0
    completed_at: datetime | None = None
    error_message: str | None = None


class IndexDocumentResponse(BaseModel):
    """Result of a synchronous indexing request."""

    message: str
    document_id: uuid.UUID
    status: str
    chunk_count: int = 0
    skipped: bool = False
