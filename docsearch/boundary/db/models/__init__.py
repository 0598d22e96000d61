"""
Database models package.

Exports:
  - DocumentModel, DocumentStatus: Document ORM model and status enum

Dependencies: sqlalchemy, docsearch.boundary.db.base
System role: Database model definitions for domain entities
"""

from docsearch.boundary.db.models.document_model import DocumentModel, DocumentStatus

__all__ = [
    "DocumentModel",
    "DocumentStatus",
]
