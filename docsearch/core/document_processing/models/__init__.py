"""
Models for document processing pipeline.

Exports: Chunk, IndexingResult
"""

from .chunk import Chunk
from .pipeline_result import IndexingResult

__all__ = [
    "Chunk",
    "IndexingResult",
]
