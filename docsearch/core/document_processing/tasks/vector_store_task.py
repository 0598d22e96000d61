"""
Vector index upload task.

Turns positioned chunks and their embeddings into vector points with
deterministic ids and writes them to the configured collection. Index calls
run in a worker thread so the event loop is never blocked.

Dependencies: docsearch.boundary.vdb
System role: Final stage of document indexing pipeline
"""

import asyncio
import logging

from docsearch.boundary.vdb import FaissVectorIndex, VectorPayload, VectorPoint
from docsearch.core.exceptions import VectorStoreError

from ..models import Chunk

logger = logging.getLogger(__name__)


class VectorStoreTask:
    """Write document chunk vectors to one collection of the vector index."""

    def __init__(self, index: FaissVectorIndex, collection_name: str) -> None:
        """
        Initialize vector store task.

        Args:
            index: Shared vector index
            collection_name: Collection receiving the points

        Raises:
            ValueError: When collection_name is empty
        """
        if not collection_name:
            raise ValueError("collection_name cannot be empty")

        self.index = index
        self.collection_name = collection_name

    @staticmethod
    def build_points(
        document_id: str,
        chunks: list[Chunk],
        vectors: list[list[float]],
        source_path: str = "",
    ) -> list[VectorPoint]:
        """
        Pair chunks with their vectors.

        Args:
            document_id: Owning document ID
            chunks: Chunks in position order
            vectors: One vector per chunk, same order
            source_path: Path of the source file stored in each payload

        Returns:
            list[VectorPoint]: Points with ids "{document_id}_{position}"

        Raises:
            VectorStoreError: When chunk and vector counts differ
        """
        if len(chunks) != len(vectors):
            raise VectorStoreError(
                "Chunk and vector counts differ",
                operation="upsert",
                details={
                    "document_id": document_id,
                    "chunk_count": len(chunks),
                    "vector_count": len(vectors),
                },
            )

        return [
            VectorPoint(
                id=chunk.point_id(document_id),
                vector=vector,
                payload=VectorPayload(
                    document_id=document_id,
                    text=chunk.text,
                    chunk_index=chunk.position,
                    source_path=source_path,
                ),
            )
            for chunk, vector in zip(chunks, vectors)
        ]

    async def ensure_collection(self, dimension: int) -> None:
        """
        Create the collection for vectors of the given dimension if missing.

        Raises:
            SchemaConflictError: The collection exists with another dimension
        """
        await asyncio.to_thread(self.index.ensure_collection, self.collection_name, dimension)

    async def upload(self, points: list[VectorPoint]) -> list[str]:
        """
        Upsert points into the collection.

        Args:
            points: Points to write

        Returns:
            list[str]: Written point ids

        Raises:
            VectorStoreError: When the index rejects the batch
        """
        ids = await asyncio.to_thread(self.index.upsert, self.collection_name, points)
        logger.info(
            f"{__name__}:upload - Uploaded points to vector index",
            extra={"collection": self.collection_name, "point_count": len(ids)},
        )
        return ids

    async def persist(self) -> None:
        """Write unsaved changes of the index to disk."""
        await asyncio.to_thread(self.index.persist)

    async def delete_document(self, document_id: str) -> int:
        """
        Remove all points of a document.

        Args:
            document_id: Document ID

        Returns:
            int: Number of points removed
        """
        return await asyncio.to_thread(
            self.index.delete_by_document, self.collection_name, document_id
        )
