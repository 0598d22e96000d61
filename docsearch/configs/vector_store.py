"""
Vector store configuration settings.

Manages the FAISS-backed vector index: collection name, vector dimension,
similarity metric and on-disk persistence directory.

Dependencies: pydantic, pydantic_settings
System role: Vector database configuration for retrieval
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from docsearch.configs.base import BaseSettings


class VectorStoreSettings(BaseSettings):
    """Vector index configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VECTOR_STORE_",
        case_sensitive=False,
        extra="ignore",
    )

    store_type: str = Field(
        default="faiss",
        description="Vector store type: 'faiss' (persisted to disk) or 'memory'",
    )
    collection_name: str = Field(
        default="pdf_embeddings",
        description="Collection holding all document chunk vectors",
    )
    dimension: int = Field(
        default=384,
        description="Embedding vector dimension (384 for all-MiniLM-L6-v2)",
        gt=0,
    )
    metric: str = Field(default="cosine", description="Similarity metric")
    persist_directory: str = Field(
        default="./.vector_index",
        description="Directory where FAISS collections are saved",
    )
    autosave: bool = Field(
        default=True,
        description="Save after every write; when false, save when the indexing queue drains",
    )
    top_k: int = Field(default=5, description="Default number of results to retrieve", gt=0)
