"""
Health check API endpoints.

Routes: GET /health, GET /health/vector-store

Dependencies: docsearch.boundary.vdb
System role: Health check HTTP API
"""

import asyncio

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from docsearch.api.deps import ServiceCache, get_service_cache


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str


class VectorStoreHealthResponse(HealthResponse):
    """Vector store health with collection details."""

    collection: str
    dimension: int
    points_count: int


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", message="Server Healthy")


@router.get("/vector-store", response_model=VectorStoreHealthResponse)
async def health_check_vector_store(
    cache: ServiceCache = Depends(get_service_cache),
) -> VectorStoreHealthResponse:
    """
    Vector store health check.

    Raises:
        HTTPException(503): Collection missing
    """
    name = cache.settings.vector_store.collection_name
    info = await asyncio.to_thread(cache.vector_index.get_collection, name)
    if info is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Collection '{name}' does not exist",
        )
    return VectorStoreHealthResponse(
        status="healthy",
        message="Vector store accessible",
        collection=info.name,
        dimension=info.dimension,
        points_count=info.points_count,
    )
