# app/api/exception_handlers.py

import logging
from typing import TYPE_CHECKING
from fastapi import Request
from fastapi.responses import JSONResponse
from exceptions.domain_exceptions import DomainException

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """
    Global exception handler for domain exceptions in FastAPI

    Returns a consistent JSON response format for all domain exceptions
    """
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.__class__.__name__,
            "message": exc.message,
            "details": exc.details,
            "path": request.url.path
        }
    )


def register_exception_handlers(app: "FastAPI") -> None:
    """
    Register the domain exception handler with FastAPI app

    Subclasses (NotFoundException, ConflictException, ...) are routed to
    the same handler through DomainException.
    """
    app.add_exception_handler(DomainException, domain_exception_handler)
