"""
Vector database schemas.

Pydantic models for vector operations (points, payloads, scored results,
collection descriptors). Used for type-safe vector index interactions.

Dependencies: pydantic
System role: Type definitions for vector operations
"""

from enum import Enum

from pydantic import BaseModel, Field


class Distance(str, Enum):
    """Similarity metrics supported by the vector index."""

    COSINE = "cosine"


class VectorPayload(BaseModel):
    """Metadata stored alongside each chunk vector."""

    document_id: str = Field(description="Owning document ID")
    text: str = Field(description="Chunk text")
    chunk_index: int = Field(description="Chunk position within the document", ge=0)
    source_path: str = Field(default="", description="Path of the source file")


class VectorPoint(BaseModel):
    """One (id, vector, payload) triple to upsert."""

    id: str = Field(description="Deterministic point id: {document_id}_{chunk_index}")
    vector: list[float] = Field(description="Embedding vector")
    payload: VectorPayload


class ScoredPoint(BaseModel):
    """Single result from vector search."""

    id: str = Field(description="Point id")
    score: float = Field(description="Cosine similarity, higher is closer")
    payload: VectorPayload


class CollectionInfo(BaseModel):
    """Immutable collection schema plus current size."""

    name: str
    dimension: int = Field(gt=0)
    metric: Distance = Distance.COSINE
    points_count: int = 0
