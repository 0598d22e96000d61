"""
Background workers module.

Async in-process queue for document indexing.

Dependencies: asyncio, docsearch.core.document_processing
System role: Background task processing
"""

from docsearch.workers.indexing_queue import IndexingQueue

__all__ = ["IndexingQueue"]
