"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from docsearch.boundary.db.CRUD import document_crud

    document = await document_crud.get_by_id(db, document_id)
"""

from docsearch.boundary.db.CRUD.base_crud import BaseCRUD
from docsearch.boundary.db.CRUD.document_crud import DocumentCRUD, document_crud

__all__ = [
    "BaseCRUD",
    "DocumentCRUD",
    "document_crud",
]
