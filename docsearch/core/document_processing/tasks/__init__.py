"""
Task modules for document indexing pipeline.

Exports: ExtractionTask, ChunkingTask, Embedder, VectorStoreTask
"""

from .chunking_task import ChunkingTask, split_text
from .embedding_task import Embedder, EmbeddingModelHandle, get_model_handle
from .extraction_task import (
    ExtractionTask,
    PdfTextExtractor,
    PlainTextExtractor,
    TextExtractor,
    get_extractor,
)
from .vector_store_task import VectorStoreTask

__all__ = [
    "ChunkingTask",
    "split_text",
    "Embedder",
    "EmbeddingModelHandle",
    "get_model_handle",
    "ExtractionTask",
    "PdfTextExtractor",
    "PlainTextExtractor",
    "TextExtractor",
    "get_extractor",
    "VectorStoreTask",
]
