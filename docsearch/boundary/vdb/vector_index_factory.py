"""
Vector index factory.

Builds the FAISS vector index from VECTOR_STORE_* settings: 'faiss' persists
collections under persist_directory, 'memory' keeps them in process only.

Dependencies: docsearch.boundary.vdb, docsearch.configs
System role: Vector index instantiation and selection
"""

import logging

from docsearch.boundary.vdb.faiss_index import FaissVectorIndex
from docsearch.configs.vector_store import VectorStoreSettings

logger = logging.getLogger(__name__)


def get_vector_index(settings: VectorStoreSettings) -> FaissVectorIndex:
    """
    Create the vector index selected by configuration.

    Args:
        settings: Vector store settings

    Returns:
        FaissVectorIndex: Configured index

    Raises:
        ValueError: If store_type is invalid
    """
    store_type = settings.store_type.lower()

    if store_type == "faiss":
        logger.info(
            f"{__name__}:get_vector_index - Creating persistent FAISS index",
            extra={"persist_directory": settings.persist_directory, "autosave": settings.autosave},
        )
        return FaissVectorIndex(
            persist_directory=settings.persist_directory, autosave=settings.autosave
        )

    if store_type == "memory":
        logger.info(f"{__name__}:get_vector_index - Creating in-memory FAISS index")
        return FaissVectorIndex()

    raise ValueError(
        f"Invalid VECTOR_STORE_STORE_TYPE: {store_type}. Must be 'faiss' or 'memory'."
    )
