"""
Router error handling.

Decorator that maps domain exceptions onto HTTP errors with an
ErrorResponse body, so every route reports failures the same way.
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import HTTPException, status

from knowledge_base.core.exceptions import (
    DocumentNotFoundError,
    KnowledgeBaseError,
    RetrievalError,
    StoreError,
    ValidationError,
)
from knowledge_base.models.common import ErrorResponse

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _http_error(status_code: int, error: KnowledgeBaseError | str, details: dict | None = None) -> HTTPException:
    if isinstance(error, KnowledgeBaseError):
        body = ErrorResponse(error=error.message, details=error.details or None)
    else:
        body = ErrorResponse(error=error, details=details)
    return HTTPException(status_code=status_code, detail=body.model_dump())


def handle_service_errors(func: F) -> F:
    """
    Map service exceptions to HTTPExceptions.

    ValidationError and RetrievalError -> 400, DocumentNotFoundError -> 404,
    StoreError -> 503, any other KnowledgeBaseError or unexpected error -> 500.
    """

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)

        except HTTPException:
            raise

        except DocumentNotFoundError as e:
            logger.warning("Document not found", extra={"details": e.details})
            raise _http_error(status.HTTP_404_NOT_FOUND, e)

        except (ValidationError, RetrievalError) as e:
            logger.warning("Invalid request", extra={"error_msg": e.message, "details": e.details})
            raise _http_error(status.HTTP_400_BAD_REQUEST, e)

        except StoreError as e:
            logger.error("Record store unavailable", extra={"error_msg": e.message, "details": e.details})
            raise _http_error(status.HTTP_503_SERVICE_UNAVAILABLE, e)

        except KnowledgeBaseError as e:
            logger.error("Service operation failed", extra={"error_type": type(e).__name__, "error_msg": e.message})
            raise _http_error(status.HTTP_500_INTERNAL_SERVER_ERROR, e)

        except Exception as e:
            logger.exception("Unexpected failure", extra={"error_msg": str(e)})
            raise _http_error(
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                "An internal error occurred",
                {"error_type": type(e).__name__},
            )

    return wrapper  # type: ignore
