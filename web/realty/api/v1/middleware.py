import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ...core import BaseError

logger = logging.getLogger(__name__)


async def app_error_handler(request: Request, exc: BaseError):
    """Render application errors with their stable kind"""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.message,
            "kind": exc.kind,
            "details": exc.details
        }
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    """Anything unexpected is logged and surfaced as Internal"""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "kind": "Internal",
            "details": {}
        }
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handler for request validation errors"""
    errors = []
    for error in exc.errors():
        errors.append({
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"]
        })

    return JSONResponse(
        status_code=422,
        content={
            "error": "Validation error",
            "kind": "InvalidArgument",
            "details": {"errors": errors}
        }
    )
