"""
Router error handling utilities.

Decorator translating service-layer exceptions into HTTPExceptions with
consistent logging, so endpoints only contain the happy path.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from docsearch.core.exceptions import (
    DocSearchException,
    DocumentNotFoundError,
    IndexingInProgressError,
    RetrievalError,
    ValidationError,
    VectorStoreError,
)

logger = logging.getLogger(__name__)

# Type for the decorated function
F = TypeVar("F", bound=Callable[..., Any])


def handle_service_errors(func: F) -> F:
    """
    Decorator mapping service exceptions to HTTP status codes.

    DocumentNotFoundError -> 404, ValidationError -> 400,
    IndexingInProgressError -> 409, RetrievalError/VectorStoreError -> 503,
    any other DocSearchException -> 500.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except DocumentNotFoundError as e:
            logger.warning(
                "Document not found",
                extra={"document_id": e.document_id, "error": e.message},
            )
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)

        except ValidationError as e:
            logger.warning("Invalid request", extra={"error": e.message, **e.details})
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

        except IndexingInProgressError as e:
            logger.warning(
                "Indexing already in progress",
                extra={"document_id": e.document_id},
            )
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

        except (RetrievalError, VectorStoreError) as e:
            logger.error("Vector store unavailable", extra={"error": e.message})
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=e.message,
            )

        except DocSearchException as e:
            logger.exception("Service operation failed", extra={"error": e.message})
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=e.message,
            )

    return wrapper  # type: ignore
