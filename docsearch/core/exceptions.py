"""
Exception hierarchy for the document search application.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class DocSearchException(Exception):
    """Base exception for all document search application errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging

        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(DocSearchException):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class DocumentNotFoundError(DocSearchException):
    """Raised when a document cannot be found in the metadata store."""

    def __init__(self, document_id: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize document not found error.

        Args:
            document_id: ID of the missing document
            details: Additional context
        """
        details = details or {}
        details["document_id"] = document_id
        self.document_id = document_id
        super().__init__(f"Document not found: {document_id}", details)


class DocumentProcessingError(DocSearchException):
    """Base exception for document indexing errors."""

    def __init__(
        self,
        message: str,
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize document processing error.

        Args:
            message: Error message
            document_id: ID of the document that failed
            details: Additional context
        """
        details = details or {}
        if document_id:
            details["document_id"] = document_id
        super().__init__(message, details)


class ExtractionError(DocumentProcessingError):
    """Raised when raw text extraction from a source file fails."""

    def __init__(
        self,
        message: str,
        source_path: str | None = None,
        document_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize extraction error.

        Args:
            message: Error message
            source_path: Path of the file that failed extraction
            document_id: ID of the document
            details: Additional context
        """
        details = details or {}
        if source_path:
            details["source_path"] = source_path
        self.source_path = source_path
        super().__init__(message, document_id, details)


class EmbeddingError(DocumentProcessingError):
    """Raised when the embedding model is unavailable or input is invalid."""

    pass


class IndexingInProgressError(DocSearchException):
    """Raised when a document is already queued or being indexed."""

    def __init__(self, document_id: str) -> None:
        """
        Initialize indexing in progress error.

        Args:
            document_id: ID of the document already in flight
        """
        self.document_id = document_id
        super().__init__(
            f"Indexing already in progress: {document_id}",
            {"document_id": document_id},
        )


class VectorStoreError(DocSearchException):
    """Raised when vector store operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (ensure_collection, upsert, search, delete)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        self.operation = operation
        super().__init__(message, details)


class SchemaConflictError(VectorStoreError):
    """Raised when an existing collection disagrees with the requested schema."""

    def __init__(
        self,
        collection: str,
        expected: dict[str, Any],
        actual: dict[str, Any],
    ) -> None:
        """
        Initialize schema conflict error.

        Args:
            collection: Collection name
            expected: Requested dimension/metric
            actual: Dimension/metric of the existing collection
        """
        super().__init__(
            f"Collection '{collection}' exists with a different schema",
            operation="ensure_collection",
            details={"collection": collection, "expected": expected, "actual": actual},
        )


class RetrievalError(DocSearchException):
    """Raised when a search request cannot be served."""

    def __init__(
        self,
        message: str,
        query: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize retrieval error.

        Args:
            message: Error message
            query: Query text of the failed search
            details: Additional context
        """
        details = details or {}
        if query is not None:
            details["query"] = query
        super().__init__(message, details)
