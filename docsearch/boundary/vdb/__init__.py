"""
Vector database boundary layer.

Provides the FAISS-backed vector index used for chunk storage and retrieval.

Dependencies: faiss-cpu, numpy
System role: Vector store adapter for passage retrieval
"""

from docsearch.boundary.vdb.faiss_index import FaissVectorIndex
from docsearch.boundary.vdb.vector_index_factory import get_vector_index
from docsearch.boundary.vdb.vector_schemas import (
    CollectionInfo,
    Distance,
    ScoredPoint,
    VectorPayload,
    VectorPoint,
)

__all__ = [
    "CollectionInfo",
    "Distance",
    "FaissVectorIndex",
    "ScoredPoint",
    "VectorPayload",
    "VectorPoint",
    "get_vector_index",
]
