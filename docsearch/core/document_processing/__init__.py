"""
Document indexing pipeline.

Extracts text, splits it into overlapping character chunks, embeds the
chunks and stores them in the vector index.

Dependencies: langchain_community, sentence_transformers, faiss, pydantic
System role: Document indexing pipeline entrypoint
"""

from .entrypoint import IndexingPipeline
from .models import Chunk, IndexingResult

__all__ = [
    "IndexingPipeline",
    "Chunk",
    "IndexingResult",
]
