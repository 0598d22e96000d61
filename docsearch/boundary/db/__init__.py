"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Async connection management
  - DocumentModel, DocumentStatus: Document entity and its indexing states
  - document_crud: CRUD operation singleton

Dependencies: sqlalchemy, docsearch.configs
System role: Database adapter providing persistent storage for document metadata
"""

from docsearch.boundary.db.base import Base, TimestampMixin, UUIDMixin
from docsearch.boundary.db.connection import (
    dispose_engine,
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from docsearch.boundary.db.models.document_model import DocumentModel, DocumentStatus
from docsearch.boundary.db.CRUD import BaseCRUD, DocumentCRUD, document_crud

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    # Connection
    "dispose_engine",
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "DocumentModel",
    "DocumentStatus",
    # CRUD
    "BaseCRUD",
    "DocumentCRUD",
    "document_crud",
]
