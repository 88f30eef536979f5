"""Exception handler middleware for structured error responses."""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from ..exceptions import ErrorCode, NovelHelperException

logger = logging.getLogger(__name__)


async def novelhelper_exception_handler(request: Request, exc: NovelHelperException) -> JSONResponse:
    """
    Handle custom exceptions and return structured JSON responses.

    Client errors (4xx) are logged at WARNING, everything else at ERROR.

    Args:
        request: FastAPI request object
        exc: NovelHelperException instance

    Returns:
        JSONResponse with error details
    """
    level = logging.WARNING if exc.status_code < 500 else logging.ERROR
    logger.log(
        level,
        f"NovelHelperException: {exc.error_code.value}",
        extra={
            "error_code": exc.error_code.value,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
            "status_code": exc.status_code
        }
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Render metadata store failures as INTERNAL_ERROR without leaking SQL."""
    logger.error(
        "Database error",
        extra={"path": request.url.path, "method": request.method, "error": str(exc)},
        exc_info=exc,
    )
    error = NovelHelperException("Metadata store error", ErrorCode.INTERNAL_ERROR, status_code=500)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())
