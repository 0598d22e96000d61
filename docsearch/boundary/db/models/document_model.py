"""
Document ORM model.

Represents uploaded documents with indexing status and metadata.
Tracks the indexing lifecycle from upload to vector storage.

Dependencies: sqlalchemy, docsearch.boundary.db.base
System role: Document persistence for indexing tracking
"""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from docsearch.boundary.db.base import Base, TimestampMixin, UUIDMixin


class DocumentStatus(str, enum.Enum):
    """
    Document indexing lifecycle states.

    NOT_INDEXED: Uploaded, awaiting indexing
    INDEXING: Pipeline running (or interrupted, and then retryable)
    INDEXED: All chunks stored in the vector index, ready for retrieval
    FAILED: Indexing error; error_message field contains details
    """

    NOT_INDEXED = "not_indexed"
    INDEXING = "indexing"
    INDEXED = "indexed"
    FAILED = "failed"


class DocumentModel(Base, UUIDMixin, TimestampMixin):
    """
    Document ORM model tracking indexing pipeline state.

    Lifecycle: Upload (NOT_INDEXED) -> pipeline (INDEXING) -> INDEXED or
    FAILED. FAILED and a stale INDEXING row can be indexed again.

    Attributes:
        id: UUID primary key (auto-generated)
        filename: Stored file name
        original_name: File name as uploaded
        path: Location of the stored file, passed to text extraction
        size: File size in bytes
        mimetype: Content type reported at upload
        description: Optional user description
        status: Current indexing state
        text_length: Extracted text length (set when indexed)
        chunk_count: Number of chunks in the vector index (set when indexed)
        indexed_at: Completion timestamp of the last successful run
        error_message: Null unless FAILED
        created_at: Upload timestamp (UTC)
        updated_at: Last status change timestamp (UTC)
    """

    __tablename__ = "documents"

    filename: Mapped[str] = mapped_column(String(255), nullable=False, doc="Stored file name")

    original_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Original filename",
    )

    path: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        doc="File path of the stored document",
    )

    size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    mimetype: Mapped[str | None] = mapped_column(String(255), nullable=True)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[DocumentStatus] = mapped_column(
        Enum(DocumentStatus, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=DocumentStatus.NOT_INDEXED,
    )

    text_length: Mapped[int | None] = mapped_column(Integer, nullable=True)

    chunk_count: Mapped[int | None] = mapped_column(Integer, nullable=True)

    indexed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    error_message: Mapped[str | None] = mapped_column(
        String(2048),
        nullable=True,
        doc="Error details if indexing failed",
    )

    @property
    def indexed(self) -> bool:
        """Whether the document is searchable."""
        return self.status == DocumentStatus.INDEXED
