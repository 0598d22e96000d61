"""
Core business logic module.

Contains the exception hierarchy and the document indexing pipeline.
Pipeline components are imported from docsearch.core.document_processing.
"""

from docsearch.core.exceptions import (
    DocSearchException,
    DocumentNotFoundError,
    DocumentProcessingError,
    EmbeddingError,
    IndexingInProgressError,
    ExtractionError,
    RetrievalError,
    SchemaConflictError,
    ValidationError,
    VectorStoreError,
)

__all__ = [
    "DocSearchException",
    "DocumentNotFoundError",
    "DocumentProcessingError",
    "EmbeddingError",
    "IndexingInProgressError",
    "ExtractionError",
    "RetrievalError",
    "SchemaConflictError",
    "ValidationError",
    "VectorStoreError",
]
