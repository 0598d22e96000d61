"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    ServiceCache,
    get_document_service,
    get_retrieval_service,
    get_service_cache,
)

__all__ = [
    "ServiceCache",
    "get_document_service",
    "get_retrieval_service",
    "get_service_cache",
]
