"""
Chunk domain model for document processing pipeline.

Represents one contiguous, possibly overlapping window of a document's
extracted text. Chunks are ephemeral: only their embedding and payload
survive in the vector index.

Dependencies: pydantic
System role: Data structure for document chunks in indexing pipeline
"""

from pydantic import BaseModel, Field


class Chunk(BaseModel):
    """Character window of a document's extracted text."""

    position: int = Field(description="Zero-based position within the document", ge=0)
    start: int = Field(description="Start character offset (inclusive)", ge=0)
    end: int = Field(description="End character offset (exclusive)", ge=0)
    text: str = Field(description="Chunk text content")

    def point_id(self, document_id: str) -> str:
        """
        Deterministic vector point id for this chunk.

        Args:
            document_id: Owning document ID

        Returns:
            str: "{document_id}_{position}"
        """
        return f"{document_id}_{self.position}"
