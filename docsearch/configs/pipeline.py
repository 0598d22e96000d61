"""
Indexing pipeline configuration settings.

Chunking, embedding and background worker settings for document indexing.

Dependencies: pydantic, pydantic_settings
System role: Centralized pipeline configuration
"""

from pydantic import Field, model_validator
from pydantic_settings import SettingsConfigDict

from docsearch.configs.base import BaseSettings


class PipelineSettings(BaseSettings):
    """Settings for the document indexing pipeline."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PIPELINE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Chunking settings
    chunk_size: int = Field(default=1000, description="Chunk size in characters", gt=0)
    chunk_overlap: int = Field(
        default=200,
        description="Overlap between consecutive chunks",
        ge=0,
    )

    # Embedding settings
    embedding_model: str = Field(
        default="sentence-transformers/all-MiniLM-L6-v2",
        description="sentence-transformers model name or path",
    )
    embedding_device: str = Field(default="cpu", description="Torch device for the model")
    batch_size: int = Field(
        default=10,
        description="Chunks embedded per batch",
        gt=0,
    )

    # Upload handling
    upload_directory: str = Field(
        default="./uploads",
        description="Directory where uploaded documents are written",
    )
    max_file_size: int = Field(
        default=25 * 1024 * 1024,
        description="Maximum upload size in bytes",
    )

    # Background indexing
    worker_count: int = Field(default=1, description="Indexing queue workers", gt=0)
    resume_on_startup: bool = Field(
        default=True,
        description="Re-enqueue documents left unindexed by a previous run",
    )

    @model_validator(mode="after")
    def _check_overlap(self) -> "PipelineSettings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self
