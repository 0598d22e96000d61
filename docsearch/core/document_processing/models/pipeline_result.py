"""
Indexing result model for document processing.

Represents the structured outcome of running one document through the
indexing pipeline. Failures are reported here instead of raised, so callers
can tell "document failed" apart from "pipeline crashed".

Dependencies: pydantic, docsearch.boundary.db.models
System role: Return type for IndexingPipeline.index_document()
"""

from datetime import datetime

from pydantic import BaseModel, Field

from docsearch.boundary.db.models.document_model import DocumentStatus


class IndexingResult(BaseModel):
    """Result of document indexing pipeline execution."""

    document_id: str = Field(description="Document identifier")
    state: DocumentStatus = Field(description="Document state after the run")
    success: bool = Field(description="Whether the document ended up indexed")
    skipped: bool = Field(
        default=False,
        description="True when the document was already indexed and nothing ran",
    )
    chunk_count: int = Field(default=0, description="Number of chunks indexed")
    text_length: int = Field(default=0, description="Extracted text length in characters")
    point_ids: list[str] = Field(default_factory=list, description="Upserted point ids")
    indexed_at: datetime | None = Field(default=None, description="Completion timestamp")
    error: str | None = Field(default=None, description="Failure reason")
    error_type: str | None = Field(default=None, description="Failure exception class")
    processing_time_ms: float = Field(default=0.0, description="Wall time in milliseconds")
