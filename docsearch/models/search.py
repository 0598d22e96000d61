"""
Search domain models and schemas.

Ranked passage results with the joined document metadata.

Dependencies: pydantic
System role: Search API contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class DocumentSummary(BaseModel):
    """Document metadata attached to a search result."""

    id: uuid.UUID
    filename: str
    original_name: str
    description: str | None = None
    upload_date: datetime


class SearchResult(BaseModel):
    """One retrieved passage."""

    text: str = Field(description="Chunk text")
    score: float = Field(description="Cosine similarity, higher is closer")
    document_id: str
    source_path: str = ""
    document: DocumentSummary | None = Field(
        default=None,
        description="Document metadata, None when the document row is gone",
    )


class SearchResponse(BaseModel):
    """Response schema for a search query."""

    query: str
    results: list[SearchResult]
    count: int
