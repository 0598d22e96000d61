"""
FastAPI application entry point.

Initializes FastAPI app, registers routers, adds middleware, and configures lifespan.

Dependencies: fastapi, docsearch.api, docsearch.observability, docsearch.configs
System role: Application initialization and configuration
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docsearch.api import api_router
from docsearch.api.deps import get_service_cache
from docsearch.boundary.db import dispose_engine
from docsearch.boundary.db.create_tables import create_all_tables
from docsearch.configs import get_settings
from docsearch.observability.logger import configure_logging
from docsearch.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Startup: create tables, ensure the vector collection (a schema conflict
    aborts startup), start indexing workers and resume unfinished documents.
    Shutdown: stop workers, persist the index, release connections.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Application startup: logging configured")

    cache = get_service_cache()
    vector_settings = settings.vector_store

    try:
        await create_all_tables()
        await asyncio.to_thread(
            cache.vector_index.ensure_collection,
            vector_settings.collection_name,
            vector_settings.dimension,
            vector_settings.metric,
        )
    except Exception as e:
        logger.exception(
            "Failed to initialize application resources",
            extra={"error": str(e)},
        )
        raise

    queue = cache.indexing_queue
    await queue.start()
    if settings.pipeline.resume_on_startup:
        await queue.resume()

    logger.info("Application startup complete: all resources initialized")

    yield

    # Shutdown
    await queue.stop()
    await asyncio.to_thread(cache.vector_index.persist)
    await dispose_engine()
    cache.clear()
    logger.info("Application shutdown")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        FastAPI: Configured application instance
    """
    app = FastAPI(
        title="Document Search API",
        description="Upload documents and retrieve the most relevant passages for a query",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Add observability middleware (added first = last to execute)
    app.add_middleware(CorrelationMiddleware)
    app.add_middleware(RequestLoggingMiddleware)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register API routes
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "docsearch.main:app",
        host="localhost",
        port=8082,
        reload=True,
    )
